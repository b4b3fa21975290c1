from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from ..domain_errors import DomainError, NotFoundError
from ..models import USER_ROLES
from ..security import ensure_admin_remains, require_permission
from ..services.entity_serializers import serialize_user
from .workflow_transitions import WorkflowDeps, record_activity

logger = logging.getLogger(__name__)


def _load_user(deps: WorkflowDeps, user_id: UUID) -> Any:
    user = deps.store.get_user(user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def delete_user_use_case(
    *,
    user_id: UUID,
    current_user: Any,
    deps: WorkflowDeps,
) -> list[str]:
    """Delete a user account; returns warnings from activity recording."""
    require_permission(current_user, "users", "delete")
    target = _load_user(deps, user_id)

    ensure_admin_remains(
        acting_user=current_user,
        target_user=target,
        active_admin_count=deps.store.count_active_admins(),
        deleting=True,
    )

    before = serialize_user(target)
    deps.store.delete_user(target.id)
    logger.info("user.deleted id=%s by=%s", target.id, current_user.id)

    warnings: list[str] = []
    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type="user",
        entity_id=target.id,
        action="deleted",
        before=before,
        after=None,
    )
    return warnings


def change_user_role_use_case(
    *,
    user_id: UUID,
    role: str,
    current_user: Any,
    deps: WorkflowDeps,
) -> tuple[Any, list[str]]:
    require_permission(current_user, "users", "write")

    new_role = (role or "").strip().lower()
    if new_role not in USER_ROLES:
        raise DomainError(
            code="UNKNOWN_ROLE",
            http_status=400,
            message=f"Unknown role: {role}",
            details={"role": role, "allowed": list(USER_ROLES)},
        )

    target = _load_user(deps, user_id)
    if target.role == new_role:
        return target, []

    ensure_admin_remains(
        acting_user=current_user,
        target_user=target,
        active_admin_count=deps.store.count_active_admins(),
        new_role=new_role,
    )

    before = serialize_user(target)
    updated = deps.store.update_user(target.id, {"role": new_role})
    if updated is None:
        raise NotFoundError("user", user_id)
    logger.info("user.role_changed id=%s from=%s to=%s by=%s", target.id, before.get("role"), new_role, current_user.id)

    warnings: list[str] = []
    record_activity(
        deps,
        warnings,
        actor_id=current_user.id,
        entity_type="user",
        entity_id=updated.id,
        action="updated",
        before=before,
        after=serialize_user(updated),
    )
    return updated, warnings
