from __future__ import annotations

from typing import Any
from uuid import UUID

from ..security import ensure_entity_access
from ..services.entity_serializers import (
    serialize_design_job,
    serialize_entity,
    serialize_manufacturing,
    serialize_manufacturing_update,
    serialize_order,
)
from ..services.financial_redaction import redact_financial_fields
from ..services.status_transitions import DESIGN_JOB, MANUFACTURING, ORDER
from .workflow_transitions import RESOURCE_BY_ENTITY_TYPE, WorkflowDeps, load_entity, resolve_owner_manufacturer_id


def _serialize_for_read(deps: WorkflowDeps, entity_type: str, entity: Any) -> dict[str, Any]:
    if entity_type == ORDER:
        return serialize_order(entity, deps.store.get_order_line_items(entity.id))
    if entity_type == MANUFACTURING:
        return serialize_manufacturing(entity)
    if entity_type == DESIGN_JOB:
        return serialize_design_job(entity)
    raise ValueError(f"Unknown entity type: {entity_type}")


def present_entity(entity_type: str, entity: Any, role: str | None) -> dict[str, Any]:
    """Flat snapshot of a changed entity, redacted for ``role``."""
    if entity_type == "manufacturing_update":
        payload = serialize_manufacturing_update(entity)
    else:
        payload = serialize_entity(entity_type, entity)
    return redact_financial_fields(payload, role)


def read_entity_use_case(
    *,
    entity_type: str,
    entity_id: UUID,
    current_user: Any,
    deps: WorkflowDeps,
) -> dict[str, Any]:
    """Load one entity the caller may read, shaped for the caller's role.

    An existing entity outside the caller's scope raises ForbiddenError, not
    NotFoundError.
    """
    entity = load_entity(deps, entity_type, entity_id)
    ensure_entity_access(
        current_user,
        RESOURCE_BY_ENTITY_TYPE[entity_type],
        entity,
        "read",
        associations=deps.associations,
        manufacturer_id=resolve_owner_manufacturer_id(deps, entity_type, entity, current_user),
    )
    payload = _serialize_for_read(deps, entity_type, entity)
    return redact_financial_fields(payload, getattr(current_user, "role", None))
