from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from ..domain_errors import DomainError, ForbiddenError, InvalidTransitionError
from ..security import ensure_entity_access
from ..services.entity_serializers import serialize_manufacturing, serialize_manufacturing_update
from ..services.status_transitions import MANUFACTURING, is_known_status, is_valid_transition, normalize_status
from .workflow_transitions import TransitionResult, WorkflowDeps, load_entity, record_activity

logger = logging.getLogger(__name__)


def create_manufacturing_update_use_case(
    *,
    manufacturing_id: UUID,
    status: str,
    notes: str | None,
    current_user: Any,
    deps: WorkflowDeps,
    manufacturer_id: UUID | None = None,
) -> TransitionResult:
    """Append a manufacturing history entry and move the record to its status.

    The returned entity is the new ManufacturingUpdate. The parent record's
    status is synced by the store in the same write.
    """
    record = load_entity(deps, MANUFACTURING, manufacturing_id)
    ensure_entity_access(
        current_user,
        "manufacturing",
        record,
        "write",
        associations=deps.associations,
    )

    next_status = normalize_status(status)
    if not is_known_status(MANUFACTURING, next_status):
        raise DomainError(
            code="UNKNOWN_STATUS",
            http_status=400,
            message=f"Unknown {MANUFACTURING} status: {status}",
            details={"entity_type": MANUFACTURING, "status": status},
        )

    record_manufacturer_id = getattr(record, "manufacturer_id", None)
    if current_user.role == "manufacturer" and manufacturer_id is not None and manufacturer_id != record_manufacturer_id:
        raise ForbiddenError(
            "Updates can only be credited to the facility that owns the record",
            code="MANUFACTURER_MISMATCH",
        )

    current_status = normalize_status(record.status)
    if next_status != current_status and not is_valid_transition(MANUFACTURING, current_status, next_status):
        raise InvalidTransitionError(MANUFACTURING, current_status, next_status)

    before = serialize_manufacturing(record)
    update = deps.store.create_manufacturing_update(
        {
            "manufacturing_id": record.id,
            "order_id": getattr(record, "order_id", None),
            "status": next_status,
            "notes": notes,
            "updated_by": current_user.id,
            "manufacturer_id": manufacturer_id or record_manufacturer_id,
        }
    )
    logger.info(
        "manufacturing.update_created id=%s record=%s status=%s user=%s",
        update.id,
        record.id,
        next_status,
        current_user.id,
    )

    warnings: list[str] = []
    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type="manufacturing_update",
        entity_id=update.id,
        action="created",
        before=None,
        after=serialize_manufacturing_update(update),
    )
    if next_status != current_status:
        refreshed = deps.store.get_manufacturing(record.id)
        record_activity(
            deps,
            warnings,
            actor_id=current_user.id,
            entity_type=MANUFACTURING,
            entity_id=record.id,
            action="updated",
            before=before,
            after=serialize_manufacturing(refreshed if refreshed is not None else record),
        )
    return TransitionResult(entity=update, warnings=warnings)
