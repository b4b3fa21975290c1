"""JSON-safe snapshots of workflow entities for responses and the activity log."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from .order_totals import line_item_quantity, line_item_total, order_subtotal, to_money
from .status_transitions import DESIGN_JOB, MANUFACTURING, ORDER


ORDER_FIELDS: tuple[str, ...] = (
    "id", "org_id", "salesperson_id", "order_code", "order_name",
    "status", "priority", "is_rush", "invoice_url", "created_at", "updated_at",
)
LINE_ITEM_FIELDS: tuple[str, ...] = ("id", "order_id", "item_name", "sizes", "unit_price", "notes")
MANUFACTURING_FIELDS: tuple[str, ...] = (
    "id", "order_id", "manufacturer_id", "status", "priority",
    "production_notes", "tracking_number", "created_at", "updated_at",
)
MANUFACTURING_UPDATE_FIELDS: tuple[str, ...] = (
    "id", "manufacturing_id", "order_id", "status", "notes",
    "updated_by", "manufacturer_id", "created_at",
)
DESIGN_JOB_FIELDS: tuple[str, ...] = (
    "id", "job_code", "order_id", "salesperson_id", "assigned_designer_id",
    "status", "brief", "urgency", "status_changed_at", "created_at", "updated_at",
)
INVOICE_FIELDS: tuple[str, ...] = (
    "id", "invoice_number", "order_id", "org_id", "salesperson_id", "issue_date", "due_date",
    "status", "subtotal", "discount", "tax_rate", "tax_amount", "total_amount",
    "amount_paid", "payment_terms", "created_by",
)
USER_FIELDS: tuple[str, ...] = ("id", "name", "email", "role", "is_active")

_FIELDS_BY_ENTITY_TYPE: dict[str, tuple[str, ...]] = {
    ORDER: ORDER_FIELDS,
    MANUFACTURING: MANUFACTURING_FIELDS,
    DESIGN_JOB: DESIGN_JOB_FIELDS,
}


def to_json_value(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(item) for item in value]
    return value


def entity_snapshot(entity: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Copy ``fields`` off ``entity``; attributes the entity lacks are skipped."""
    missing = object()
    snapshot: dict[str, Any] = {}
    for field in fields:
        value = getattr(entity, field, missing)
        if value is missing:
            continue
        snapshot[field] = to_json_value(value)
    return snapshot


def serialize_line_item(line_item: Any) -> dict[str, Any]:
    payload = entity_snapshot(line_item, LINE_ITEM_FIELDS)
    payload["unit_price"] = str(to_money(getattr(line_item, "unit_price", 0)))
    payload["qty_total"] = line_item_quantity(line_item)
    payload["line_total"] = str(line_item_total(line_item))
    return payload


def serialize_order(order: Any, line_items: Iterable[Any] | None = None) -> dict[str, Any]:
    payload = entity_snapshot(order, ORDER_FIELDS)
    if line_items is not None:
        items = list(line_items)
        payload["line_items"] = [serialize_line_item(item) for item in items]
        payload["subtotal"] = str(order_subtotal(items))
    return payload


def serialize_manufacturing(record: Any) -> dict[str, Any]:
    return entity_snapshot(record, MANUFACTURING_FIELDS)


def serialize_manufacturing_update(update: Any) -> dict[str, Any]:
    return entity_snapshot(update, MANUFACTURING_UPDATE_FIELDS)


def serialize_design_job(job: Any) -> dict[str, Any]:
    return entity_snapshot(job, DESIGN_JOB_FIELDS)


def serialize_invoice(invoice: Any) -> dict[str, Any]:
    return entity_snapshot(invoice, INVOICE_FIELDS)


def serialize_user(user: Any) -> dict[str, Any]:
    return entity_snapshot(user, USER_FIELDS)


def serialize_entity(entity_type: str, entity: Any) -> dict[str, Any]:
    """Flat snapshot of a transitionable entity (no nested relations)."""
    fields = _FIELDS_BY_ENTITY_TYPE.get(entity_type)
    if fields is None:
        raise ValueError(f"Unknown entity type: {entity_type}")
    return entity_snapshot(entity, fields)
