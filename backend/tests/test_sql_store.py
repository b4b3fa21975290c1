from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fulfillment.database import Base
from fulfillment.models import ActivityLog, UserManufacturerAssociation
from fulfillment.repositories import SqlActivityRecorder, SqlAssociationLookup, SqlEntityStore
from fulfillment.services.status_transitions import MANUFACTURING, ORDER
from fulfillment.use_cases.entity_reads import read_entity_use_case
from fulfillment.use_cases.manufacturing_updates import create_manufacturing_update_use_case
from fulfillment.use_cases.user_admin import delete_user_use_case
from fulfillment.use_cases.workflow_transitions import WorkflowDeps, transition_status_use_case
from seed_data import DEMO_USERS, MANUFACTURER_ID, ORDER_ID, seed

USER_IDS = {user["role"]: user["id"] for user in DEMO_USERS}


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    seed(session)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_deps(db) -> WorkflowDeps:
    return WorkflowDeps(
        store=SqlEntityStore(db),
        recorder=SqlActivityRecorder(db),
        associations=SqlAssociationLookup(db),
        today=lambda: date(2026, 3, 1),
        invoice_due_days=30,
        invoice_tax_rate=Decimal("0"),
        invoice_number_prefix="INV",
    )


def _transition(deps, entity_type, entity_id, status, user):
    return transition_status_use_case(
        entity_type=entity_type,
        entity_id=entity_id,
        requested_status=status,
        current_user=user,
        deps=deps,
    )


def test_order_lifecycle_against_sqlite(sql_deps, db) -> None:
    store = sql_deps.store
    ops = store.get_user(USER_IDS["ops"])

    result = _transition(sql_deps, ORDER, ORDER_ID, "awaiting_payment", ops)

    assert result.warnings == []
    invoices = store.get_invoices_by_order_id(ORDER_ID)
    assert len(invoices) == 1
    assert invoices[0].subtotal == Decimal("300.00")
    assert invoices[0].due_date == date(2026, 3, 31)

    _transition(sql_deps, ORDER, ORDER_ID, "deposit_received", ops)
    _transition(sql_deps, ORDER, ORDER_ID, "ready_for_manufacturing", ops)

    record = store.get_manufacturing_by_order(ORDER_ID)
    assert record is not None
    assert record.status == "new"
    assert [update.status for update in record.updates] == ["new"]
    assert db.query(ActivityLog).filter(ActivityLog.entity_id == ORDER_ID).count() == 3


def test_manufacturer_flow_against_sqlite(sql_deps) -> None:
    store = sql_deps.store
    ops = store.get_user(USER_IDS["ops"])
    maker = store.get_user(USER_IDS["manufacturer"])

    _transition(sql_deps, ORDER, ORDER_ID, "awaiting_payment", ops)
    _transition(sql_deps, ORDER, ORDER_ID, "deposit_received", ops)
    _transition(sql_deps, ORDER, ORDER_ID, "ready_for_manufacturing", ops)
    record = store.get_manufacturing_by_order(ORDER_ID)
    store.update_manufacturing(record.id, {"manufacturer_id": MANUFACTURER_ID})

    result = create_manufacturing_update_use_case(
        manufacturing_id=record.id,
        status="accepted",
        notes="Scheduled for next week",
        current_user=maker,
        deps=sql_deps,
    )

    assert result.entity.status == "accepted"
    assert store.get_manufacturing(record.id).status == "accepted"

    payload = read_entity_use_case(entity_type=ORDER, entity_id=ORDER_ID, current_user=maker, deps=sql_deps)
    assert payload["status"] == "ready_for_manufacturing"
    assert "subtotal" not in payload
    assert "unit_price" not in payload["line_items"][0]

    manufacturing = read_entity_use_case(
        entity_type=MANUFACTURING, entity_id=record.id, current_user=maker, deps=sql_deps
    )
    assert manufacturing["manufacturer_id"] == str(MANUFACTURER_ID)


def test_delete_user_removes_associations(sql_deps, db) -> None:
    store = sql_deps.store
    admin = store.get_user(USER_IDS["admin"])

    assert store.count_active_admins() == 1

    delete_user_use_case(user_id=USER_IDS["manufacturer"], current_user=admin, deps=sql_deps)

    assert store.get_user(USER_IDS["manufacturer"]) is None
    assert db.query(UserManufacturerAssociation).count() == 0
    assert sql_deps.associations.get_associated_manufacturer_ids(USER_IDS["manufacturer"]) == set()
