from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from fulfillment.auth import get_current_user
from fulfillment.dependencies import get_workflow_deps
from fulfillment.main import app


@pytest.fixture
def acting_user():
    return SimpleNamespace(id=uuid4(), name="Olive", email=None, role="ops", is_active=True)


@pytest.fixture
def client(deps, acting_user):
    app.dependency_overrides[get_current_user] = lambda: acting_user
    app.dependency_overrides[get_workflow_deps] = lambda: deps
    yield TestClient(app)
    app.dependency_overrides.clear()


def _order(status, salesperson_id=None):
    return SimpleNamespace(
        id=uuid4(),
        org_id=None,
        salesperson_id=salesperson_id,
        order_code="ORD-1",
        order_name="Caps",
        status=status,
        priority="normal",
        is_rush=False,
        invoice_url=None,
    )


def _line_item(order):
    return SimpleNamespace(
        id=uuid4(),
        order_id=order.id,
        item_name="Cap",
        sizes={"s": 5, "m": 10, "l": 5},
        unit_price=Decimal("15.00"),
        notes=None,
    )


def test_order_status_change_generates_invoice(client, store) -> None:
    order = _order("approved")
    store.add_order(order, [_line_item(order)])

    response = client.post(f"/api/v1/orders/{order.id}/status", json={"status": "awaiting_payment"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["entity"]["status"] == "awaiting_payment"
    assert payload["warnings"] == []
    assert store.invoices[0].total_amount == Decimal("300.00")


def test_invalid_transition_is_problem_details(client, store) -> None:
    order = store.add_order(_order("completed"))

    response = client.post(f"/api/v1/orders/{order.id}/status", json={"status": "draft"})

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "INVALID_STATUS_TRANSITION"
    assert body["details"] == {"entity_type": "order", "from": "completed", "to": "draft"}


def test_sales_gets_403_for_foreign_order(client, store, acting_user) -> None:
    acting_user.role = "sales"
    order = store.add_order(_order("draft", salesperson_id=uuid4()))

    response = client.get(f"/api/v1/orders/{order.id}")

    assert response.status_code == 403
    assert response.json()["code"] == "ORDERS_ACCESS_DENIED"


def test_missing_design_job_is_404(client) -> None:
    response = client.get(f"/api/v1/design-jobs/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["code"] == "DESIGN_JOB_NOT_FOUND"


def test_manufacturing_update_endpoint(client, store) -> None:
    record = store.add_manufacturing(
        SimpleNamespace(id=uuid4(), order_id=uuid4(), manufacturer_id=None, status="new")
    )

    response = client.post(
        f"/api/v1/manufacturing/{record.id}/updates",
        json={"status": "accepted", "notes": "Fabric received"},
    )

    assert response.status_code == 201
    assert response.json()["entity"]["status"] == "accepted"
    assert record.status == "accepted"


def test_users_routes_require_users_permission(client, store, acting_user) -> None:
    target = store.add_user(SimpleNamespace(id=uuid4(), name="Sam", email=None, role="sales", is_active=True))

    response = client.delete(f"/api/v1/users/{target.id}")

    assert response.status_code == 403
    assert target.id in store.users


def test_admin_changes_role_and_cannot_delete_self(client, store, acting_user) -> None:
    acting_user.role = "admin"
    store.add_user(acting_user)
    target = store.add_user(SimpleNamespace(id=uuid4(), name="Sam", email=None, role="sales", is_active=True))

    response = client.patch(f"/api/v1/users/{target.id}/role", json={"role": "finance"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "finance"

    response = client.delete(f"/api/v1/users/{acting_user.id}")
    assert response.status_code == 409
    assert response.json()["code"] == "SELF_DELETE_FORBIDDEN"
