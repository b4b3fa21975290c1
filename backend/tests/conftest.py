from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from fulfillment.use_cases.workflow_transitions import WorkflowDeps

FIXED_TODAY = date(2026, 3, 1)
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _StoreStub:
    """Dict-backed EntityStore; ``fail_on`` names methods that should raise."""

    def __init__(self) -> None:
        self.orders: dict = {}
        self.line_items: dict = {}
        self.manufacturing: dict = {}
        self.manufacturing_updates: list = []
        self.design_jobs: dict = {}
        self.invoices: list = []
        self.users: dict = {}
        self.fail_on: set[str] = set()
        self.writes: list[str] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"{name} unavailable")

    @staticmethod
    def _patch(entity, patch):
        if entity is None:
            return None
        for key, value in patch.items():
            setattr(entity, key, value)
        return entity

    # Seeding helpers
    def add_order(self, order, line_items=()):
        self.orders[order.id] = order
        self.line_items[order.id] = list(line_items)
        return order

    def add_manufacturing(self, record):
        self.manufacturing[record.id] = record
        return record

    def add_design_job(self, job):
        self.design_jobs[job.id] = job
        return job

    def add_user(self, user):
        self.users[user.id] = user
        return user

    # Orders
    def get_order(self, order_id):
        return self.orders.get(order_id)

    def update_order(self, order_id, patch):
        self._maybe_fail("update_order")
        self.writes.append("update_order")
        return self._patch(self.orders.get(order_id), patch)

    def get_order_line_items(self, order_id):
        return list(self.line_items.get(order_id, []))

    # Manufacturing
    def get_manufacturing(self, manufacturing_id):
        return self.manufacturing.get(manufacturing_id)

    def get_manufacturing_by_order(self, order_id):
        return next((r for r in self.manufacturing.values() if r.order_id == order_id), None)

    def create_manufacturing(self, data):
        self._maybe_fail("create_manufacturing")
        self.writes.append("create_manufacturing")
        record = SimpleNamespace(**{"id": uuid4(), "manufacturer_id": None, **data})
        self.manufacturing[record.id] = record
        return record

    def update_manufacturing(self, manufacturing_id, patch):
        self._maybe_fail("update_manufacturing")
        self.writes.append("update_manufacturing")
        return self._patch(self.manufacturing.get(manufacturing_id), patch)

    def create_manufacturing_update(self, data):
        self._maybe_fail("create_manufacturing_update")
        self.writes.append("create_manufacturing_update")
        update = SimpleNamespace(id=uuid4(), created_at=FIXED_NOW, **data)
        self.manufacturing_updates.append(update)
        record = self.manufacturing.get(data["manufacturing_id"])
        if record is not None:
            record.status = update.status
        return update

    # Design jobs
    def get_design_job(self, job_id):
        return self.design_jobs.get(job_id)

    def update_design_job(self, job_id, patch):
        self._maybe_fail("update_design_job")
        self.writes.append("update_design_job")
        return self._patch(self.design_jobs.get(job_id), patch)

    # Invoices
    def get_invoices_by_order_id(self, order_id):
        return [invoice for invoice in self.invoices if invoice.order_id == order_id]

    def create_invoice(self, data):
        self._maybe_fail("create_invoice")
        self.writes.append("create_invoice")
        invoice = SimpleNamespace(id=uuid4(), **data)
        self.invoices.append(invoice)
        return invoice

    # Users
    def get_user(self, user_id):
        return self.users.get(user_id)

    def update_user(self, user_id, patch):
        self.writes.append("update_user")
        return self._patch(self.users.get(user_id), patch)

    def delete_user(self, user_id):
        self.writes.append("delete_user")
        self.users.pop(user_id, None)

    def count_active_admins(self):
        return sum(1 for user in self.users.values() if user.role == "admin" and user.is_active)


class _RecorderStub:
    def __init__(self) -> None:
        self.entries: list[dict] = []
        self.fail = False

    def log_activity(self, actor_id, entity_type, entity_id, action, before, after):
        if self.fail:
            raise RuntimeError("activity log unavailable")
        self.entries.append(
            {
                "actor_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "before": before,
                "after": after,
            }
        )


class _AssociationsStub:
    def __init__(self) -> None:
        self.by_user: dict = {}

    def get_associated_manufacturer_ids(self, user_id):
        return set(self.by_user.get(user_id, set()))


@pytest.fixture
def store() -> _StoreStub:
    return _StoreStub()


@pytest.fixture
def recorder() -> _RecorderStub:
    return _RecorderStub()


@pytest.fixture
def associations() -> _AssociationsStub:
    return _AssociationsStub()


@pytest.fixture
def deps(store, recorder, associations) -> WorkflowDeps:
    return WorkflowDeps(
        store=store,
        recorder=recorder,
        associations=associations,
        today=lambda: FIXED_TODAY,
        now=lambda: FIXED_NOW,
        invoice_due_days=30,
        invoice_tax_rate=Decimal("0"),
        invoice_number_prefix="INV",
    )
