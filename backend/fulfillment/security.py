"""Role permission matrix and instance-level access checks."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from .domain_errors import ConflictError, ForbiddenError
from .ports import AssociationLookup

logger = logging.getLogger(__name__)

ACTIONS: tuple[str, ...] = ("read", "write", "delete", "view_all")
RESOURCES: tuple[str, ...] = ("orders", "manufacturing", "design_jobs", "invoices", "users")

_NONE = {"read": False, "write": False, "delete": False, "view_all": False}


def _perm(*, read=False, write=False, delete=False, view_all=False) -> dict[str, bool]:
    return {"read": read, "write": write, "delete": delete, "view_all": view_all}


# Role permissions matrix
ROLE_PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "admin": {
        "orders": _perm(read=True, write=True, delete=True, view_all=True),
        "manufacturing": _perm(read=True, write=True, delete=True, view_all=True),
        "design_jobs": _perm(read=True, write=True, delete=True, view_all=True),
        "invoices": _perm(read=True, write=True, view_all=True),
        "users": _perm(read=True, write=True, delete=True, view_all=True),
    },
    "sales": {
        "orders": _perm(read=True, write=True),  # own orders only
        "manufacturing": dict(_NONE),
        "design_jobs": _perm(read=True, write=True),  # own requests only
        "invoices": dict(_NONE),
        "users": dict(_NONE),
    },
    "ops": {
        "orders": _perm(read=True, write=True, view_all=True),
        "manufacturing": _perm(read=True, write=True, view_all=True),
        "design_jobs": _perm(read=True, write=True, view_all=True),
        "invoices": _perm(read=True, view_all=True),
        "users": dict(_NONE),
    },
    "designer": {
        "orders": dict(_NONE),
        "manufacturing": dict(_NONE),
        "design_jobs": _perm(read=True, write=True),  # assigned jobs only
        "invoices": dict(_NONE),
        "users": dict(_NONE),
    },
    "manufacturer": {
        "orders": _perm(read=True),  # orders produced by an associated facility
        "manufacturing": _perm(read=True, write=True),  # associated facilities only
        "design_jobs": dict(_NONE),
        "invoices": dict(_NONE),
        "users": dict(_NONE),
    },
    "finance": {
        "orders": _perm(read=True, view_all=True),
        "manufacturing": dict(_NONE),
        "design_jobs": dict(_NONE),
        "invoices": _perm(read=True, write=True, view_all=True),
        "users": _perm(read=True, view_all=True),
    },
}

# Resources whose instances are owned by a salesperson.
_SALES_OWNED_RESOURCES = frozenset({"orders", "design_jobs", "invoices"})


def has_permission(role: str | None, resource: str, action: str) -> bool:
    """Check the static matrix; unknown roles, resources and actions deny."""
    permissions = ROLE_PERMISSIONS.get(role or "", {})
    return bool(permissions.get(resource, {}).get(action, False))


def check_permission(user: Any, resource: str, action: str) -> bool:
    return has_permission(getattr(user, "role", None), resource, action)


def require_permission(user: Any, resource: str, action: str) -> None:
    """Enforce a role permission server-side."""
    if not check_permission(user, resource, action):
        raise ForbiddenError(f"Permission denied: {action} on {resource} required")


def _manufacturer_ids_for(user: Any, associations: AssociationLookup | None) -> set[UUID]:
    if associations is None:
        return set()
    return set(associations.get_associated_manufacturer_ids(user.id) or ())


def can_access_entity(
    user: Any,
    resource: str,
    entity: Any,
    action: str,
    *,
    associations: AssociationLookup | None = None,
    manufacturer_id: UUID | None = None,
) -> bool:
    """Object-level access check (used for IDOR prevention).

    ``manufacturer_id`` names the facility that owns ``entity`` when the entity
    itself does not carry one (an order is owned through its manufacturing
    record).
    """
    role = getattr(user, "role", None)
    if not has_permission(role, resource, action):
        return False

    # admin/ops (and finance on its resources) see every instance.
    if has_permission(role, resource, "view_all"):
        return True

    if role == "sales" and resource in _SALES_OWNED_RESOURCES:
        owner_id = getattr(entity, "salesperson_id", None)
        return owner_id is not None and owner_id == user.id

    if role == "designer" and resource == "design_jobs":
        designer_id = getattr(entity, "assigned_designer_id", None)
        return designer_id is not None and designer_id == user.id

    if role == "manufacturer" and resource in {"manufacturing", "orders"}:
        owner_manufacturer_id = manufacturer_id or getattr(entity, "manufacturer_id", None)
        if owner_manufacturer_id is None:
            return False
        allowed_ids = _manufacturer_ids_for(user, associations)
        return owner_manufacturer_id in allowed_ids

    return False


def ensure_entity_access(
    user: Any,
    resource: str,
    entity: Any,
    action: str,
    *,
    associations: AssociationLookup | None = None,
    manufacturer_id: UUID | None = None,
) -> None:
    """Raise ForbiddenError for an existing entity the user may not touch."""
    if can_access_entity(
        user,
        resource,
        entity,
        action,
        associations=associations,
        manufacturer_id=manufacturer_id,
    ):
        return
    logger.info(
        "access.denied user=%s role=%s resource=%s action=%s entity=%s",
        getattr(user, "id", None),
        getattr(user, "role", None),
        resource,
        action,
        getattr(entity, "id", None),
    )
    raise ForbiddenError(
        "Access denied",
        code=f"{resource.upper()}_ACCESS_DENIED",
    )


def ensure_admin_remains(
    *,
    acting_user: Any,
    target_user: Any,
    active_admin_count: int,
    deleting: bool = False,
    new_role: str | None = None,
) -> None:
    """At least one admin must exist, and admins cannot remove themselves."""
    is_self = target_user.id == acting_user.id

    if deleting and is_self:
        raise ConflictError("Cannot delete your own account", code="SELF_DELETE_FORBIDDEN")

    if target_user.role != "admin":
        return

    loses_admin = deleting or (new_role is not None and new_role != "admin")
    if not loses_admin:
        return

    if is_self:
        raise ConflictError("Cannot remove admin role from your own account", code="SELF_DEMOTE_FORBIDDEN")
    # Inactive admins are not part of active_admin_count.
    if getattr(target_user, "is_active", True) and active_admin_count <= 1:
        raise ConflictError("At least one admin user must remain", code="LAST_ADMIN_REQUIRED")
