"""Status-change use-case for orders, manufacturing records and design jobs.

A transition commits the new status first and then runs its side effects one
by one. A failing side effect is logged and reported as a warning; it never
rolls the status back.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from ..config import settings
from ..domain_errors import DomainError, InvalidTransitionError, NotFoundError, PreconditionFailedError
from ..ports import ActivityRecorder, AssociationLookup, EntityStore
from ..security import ensure_entity_access
from ..services.entity_serializers import serialize_entity, serialize_invoice, serialize_manufacturing
from ..services.order_totals import build_invoice_data, empty_line_items
from ..services.status_transitions import (
    DESIGN_JOB,
    INITIAL_STATUSES,
    MANUFACTURING,
    ORDER,
    is_known_status,
    is_valid_transition,
    normalize_status,
)

logger = logging.getLogger(__name__)

# Order statuses that hand the order over to manufacturing.
PRODUCTION_STATUSES: frozenset[str] = frozenset({"ready_for_manufacturing", "in_production"})
# Order status in which the customer is invoiced.
INVOICING_STATUSES: frozenset[str] = frozenset({"awaiting_payment"})

RESOURCE_BY_ENTITY_TYPE: dict[str, str] = {
    ORDER: "orders",
    MANUFACTURING: "manufacturing",
    DESIGN_JOB: "design_jobs",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkflowDeps:
    """Collaborators and policy knobs shared by workflow use-cases."""

    store: EntityStore
    recorder: ActivityRecorder
    associations: AssociationLookup | None = None
    today: Callable[[], date] = date.today
    now: Callable[[], datetime] = _utcnow
    invoice_due_days: int = field(default_factory=lambda: settings.INVOICE_DUE_DAYS)
    invoice_tax_rate: Decimal = field(default_factory=lambda: settings.INVOICE_DEFAULT_TAX_RATE)
    invoice_number_prefix: str = field(default_factory=lambda: settings.INVOICE_NUMBER_PREFIX)


@dataclass(frozen=True)
class TransitionResult:
    entity: Any
    warnings: list[str] = field(default_factory=list)


def load_entity(deps: WorkflowDeps, entity_type: str, entity_id: UUID) -> Any:
    loaders: dict[str, Callable[[UUID], Any]] = {
        ORDER: deps.store.get_order,
        MANUFACTURING: deps.store.get_manufacturing,
        DESIGN_JOB: deps.store.get_design_job,
    }
    loader = loaders.get(entity_type)
    if loader is None:
        raise DomainError(
            code="UNKNOWN_ENTITY_TYPE",
            http_status=400,
            message=f"Unknown entity type: {entity_type}",
        )
    entity = loader(entity_id)
    if entity is None:
        raise NotFoundError(entity_type, entity_id)
    return entity


def resolve_owner_manufacturer_id(deps: WorkflowDeps, entity_type: str, entity: Any, user: Any) -> UUID | None:
    """Facility owning ``entity``; orders are owned through their manufacturing record."""
    if getattr(user, "role", None) != "manufacturer":
        return None
    if entity_type == ORDER:
        record = deps.store.get_manufacturing_by_order(entity.id)
        return getattr(record, "manufacturer_id", None) if record else None
    return getattr(entity, "manufacturer_id", None)


def record_activity(
    deps: WorkflowDeps,
    warnings: list[str],
    *,
    actor_id: UUID,
    entity_type: str,
    entity_id: UUID,
    action: str,
    before: dict[str, Any] | None,
    after: dict[str, Any] | None,
) -> None:
    """Write an audit entry; a failure is logged and surfaced as a warning."""
    try:
        deps.recorder.log_activity(actor_id, entity_type, entity_id, action, before, after)
    except Exception:
        logger.exception(
            "activity.log_failed entity_type=%s entity_id=%s action=%s",
            entity_type,
            entity_id,
            action,
        )
        warnings.append(f"Activity log entry for {entity_type} {entity_id} could not be recorded")


def _persist_status(deps: WorkflowDeps, entity_type: str, entity_id: UUID, status: str) -> Any:
    if entity_type == ORDER:
        updated = deps.store.update_order(entity_id, {"status": status})
    elif entity_type == MANUFACTURING:
        updated = deps.store.update_manufacturing(entity_id, {"status": status})
    else:
        updated = deps.store.update_design_job(entity_id, {"status": status, "status_changed_at": deps.now()})
    if updated is None:
        raise NotFoundError(entity_type, entity_id)
    return updated


def _check_order_preconditions(order_status: str, line_items: list[Any]) -> None:
    if order_status in PRODUCTION_STATUSES and not line_items:
        raise PreconditionFailedError(
            f"Order must have at least one line item before moving to {order_status}"
        )

    if order_status in INVOICING_STATUSES:
        if not line_items:
            raise PreconditionFailedError("Order must have at least one line item before it can be invoiced")
        empty = empty_line_items(line_items)
        if empty:
            names = ", ".join(str(getattr(item, "item_name", None) or item.id) for item in empty)
            raise PreconditionFailedError(
                f"Every line item must have a total size quantity greater than 0 before invoicing (empty: {names})"
            )


def _ensure_manufacturing_record(deps: WorkflowDeps, order: Any, current_user: Any, warnings: list[str]) -> None:
    existing = deps.store.get_manufacturing_by_order(order.id)
    if existing is not None:
        return

    record = deps.store.create_manufacturing(
        {
            "order_id": order.id,
            "status": INITIAL_STATUSES[MANUFACTURING],
            "priority": "high" if getattr(order, "is_rush", False) else "normal",
            "production_notes": f"Auto-created when order moved to {order.status}",
        }
    )
    deps.store.create_manufacturing_update(
        {
            "manufacturing_id": record.id,
            "order_id": order.id,
            "status": record.status,
            "notes": "Manufacturing record created",
            "updated_by": current_user.id,
            "manufacturer_id": getattr(record, "manufacturer_id", None),
        }
    )
    logger.info("order.production manufacturing_created order=%s manufacturing=%s", order.id, record.id)
    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type=MANUFACTURING,
        entity_id=record.id,
        action="created",
        before=None,
        after=serialize_manufacturing(record),
    )


def _ensure_invoice(deps: WorkflowDeps, order: Any, line_items: list[Any], current_user: Any, warnings: list[str]) -> None:
    if deps.store.get_invoices_by_order_id(order.id):
        logger.info("order.invoiced invoice_exists order=%s", order.id)
        return

    invoice = deps.store.create_invoice(
        build_invoice_data(
            order=order,
            line_items=line_items,
            issue_date=deps.today(),
            due_days=deps.invoice_due_days,
            tax_rate=deps.invoice_tax_rate,
            number_prefix=deps.invoice_number_prefix,
            created_by=current_user.id,
        )
    )
    logger.info("order.invoiced invoice_created order=%s invoice=%s", order.id, invoice.id)
    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type="invoice",
        entity_id=invoice.id,
        action="created",
        before=None,
        after=serialize_invoice(invoice),
    )


def _run_side_effect(
    label: str,
    entity_type: str,
    entity_id: UUID,
    warnings: list[str],
    action: Callable[[], None],
) -> None:
    try:
        action()
    except Exception:
        logger.exception("%s.side_effect_failed id=%s step=%s", entity_type, entity_id, label)
        warnings.append(f"Failed to {label} for {entity_type} {entity_id}")


def _run_order_side_effects(
    deps: WorkflowDeps,
    order: Any,
    line_items: list[Any],
    current_user: Any,
    warnings: list[str],
) -> None:
    if order.status in PRODUCTION_STATUSES:
        _run_side_effect(
            "create manufacturing record",
            ORDER,
            order.id,
            warnings,
            lambda: _ensure_manufacturing_record(deps, order, current_user, warnings),
        )
    if order.status in INVOICING_STATUSES:
        _run_side_effect(
            "generate invoice",
            ORDER,
            order.id,
            warnings,
            lambda: _ensure_invoice(deps, order, line_items, current_user, warnings),
        )


def _run_manufacturing_side_effects(
    deps: WorkflowDeps,
    record: Any,
    previous_status: str,
    current_user: Any,
    warnings: list[str],
) -> None:
    _run_side_effect(
        "append manufacturing update",
        MANUFACTURING,
        record.id,
        warnings,
        lambda: deps.store.create_manufacturing_update(
            {
                "manufacturing_id": record.id,
                "order_id": getattr(record, "order_id", None),
                "status": record.status,
                "notes": f"Status changed from {previous_status} to {record.status}",
                "updated_by": current_user.id,
                "manufacturer_id": getattr(record, "manufacturer_id", None),
            }
        ),
    )


def transition_status_use_case(
    *,
    entity_type: str,
    entity_id: UUID,
    requested_status: str,
    current_user: Any,
    deps: WorkflowDeps,
) -> TransitionResult:
    """Validate and apply a status change, then run its side effects."""
    entity = load_entity(deps, entity_type, entity_id)

    ensure_entity_access(
        current_user,
        RESOURCE_BY_ENTITY_TYPE[entity_type],
        entity,
        "write",
        associations=deps.associations,
        manufacturer_id=resolve_owner_manufacturer_id(deps, entity_type, entity, current_user),
    )

    current_status = normalize_status(entity.status)
    next_status = normalize_status(requested_status)

    # Idempotent re-submission.
    if next_status == current_status:
        return TransitionResult(entity=entity, warnings=[])

    if not is_known_status(entity_type, next_status):
        raise DomainError(
            code="UNKNOWN_STATUS",
            http_status=400,
            message=f"Unknown {entity_type} status: {requested_status}",
            details={"entity_type": entity_type, "status": requested_status},
        )

    if not is_valid_transition(entity_type, current_status, next_status):
        raise InvalidTransitionError(entity_type, current_status, next_status)

    line_items: list[Any] = []
    if entity_type == ORDER and next_status in PRODUCTION_STATUSES | INVOICING_STATUSES:
        line_items = list(deps.store.get_order_line_items(entity.id))
        _check_order_preconditions(next_status, line_items)

    before = serialize_entity(entity_type, entity)
    updated = _persist_status(deps, entity_type, entity.id, next_status)
    logger.info(
        "%s.status_changed id=%s from=%s to=%s user=%s",
        entity_type,
        entity.id,
        current_status,
        next_status,
        current_user.id,
    )

    warnings: list[str] = []
    if entity_type == ORDER:
        _run_order_side_effects(deps, updated, line_items, current_user, warnings)
    elif entity_type == MANUFACTURING:
        _run_manufacturing_side_effects(deps, updated, current_status, current_user, warnings)

    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type=entity_type,
        entity_id=updated.id,
        action="updated",
        before=before,
        after=serialize_entity(entity_type, updated),
    )
    return TransitionResult(entity=updated, warnings=warnings)
