from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest

from fulfillment.domain_errors import ConflictError, ForbiddenError
from fulfillment.security import (
    ACTIONS,
    RESOURCES,
    ROLE_PERMISSIONS,
    can_access_entity,
    ensure_admin_remains,
    ensure_entity_access,
    has_permission,
    require_permission,
)


class _Associations:
    def __init__(self, mapping) -> None:
        self.mapping = mapping

    def get_associated_manufacturer_ids(self, user_id):
        return self.mapping.get(user_id, set())


def _user(role: str):
    return SimpleNamespace(id=uuid4(), role=role, is_active=True)


@pytest.mark.parametrize(
    ("role", "resource", "action", "expected"),
    [
        ("admin", "users", "delete", True),
        ("admin", "invoices", "delete", False),
        ("sales", "orders", "write", True),
        ("sales", "orders", "view_all", False),
        ("sales", "manufacturing", "read", False),
        ("ops", "manufacturing", "view_all", True),
        ("ops", "users", "read", False),
        ("designer", "design_jobs", "write", True),
        ("designer", "orders", "read", False),
        ("designer", "orders", "write", False),
        ("manufacturer", "manufacturing", "write", True),
        ("manufacturer", "invoices", "read", False),
        ("finance", "invoices", "write", True),
        ("finance", "orders", "write", False),
        ("guest", "orders", "read", False),
        ("admin", "leads", "read", False),
    ],
)
def test_role_matrix(role, resource, action, expected) -> None:
    assert has_permission(role, resource, action) is expected


def test_every_role_declares_every_resource() -> None:
    for role, permissions in ROLE_PERMISSIONS.items():
        assert set(permissions) == set(RESOURCES), role
        for resource in RESOURCES:
            assert set(permissions[resource]) == set(ACTIONS), (role, resource)


def test_require_permission_raises_forbidden() -> None:
    with pytest.raises(ForbiddenError, match="delete on users") as exc:
        require_permission(_user("ops"), "users", "delete")
    assert exc.value.http_status == 403


def test_sales_only_reaches_own_orders() -> None:
    sales = _user("sales")
    own = SimpleNamespace(id=uuid4(), salesperson_id=sales.id)
    other = SimpleNamespace(id=uuid4(), salesperson_id=uuid4())

    assert can_access_entity(sales, "orders", own, "write")
    assert not can_access_entity(sales, "orders", other, "read")

    with pytest.raises(ForbiddenError) as exc:
        ensure_entity_access(sales, "orders", other, "read")
    assert exc.value.code == "ORDERS_ACCESS_DENIED"


@pytest.mark.parametrize("role", ["admin", "ops"])
def test_view_all_roles_bypass_instance_scoping(role) -> None:
    entity = SimpleNamespace(id=uuid4(), salesperson_id=uuid4(), manufacturer_id=uuid4())
    for resource in ("orders", "manufacturing", "design_jobs"):
        assert can_access_entity(_user(role), resource, entity, "write")


def test_designer_reaches_only_assigned_jobs() -> None:
    designer = _user("designer")
    assigned = SimpleNamespace(id=uuid4(), assigned_designer_id=designer.id)
    unassigned = SimpleNamespace(id=uuid4(), assigned_designer_id=None)

    assert can_access_entity(designer, "design_jobs", assigned, "write")
    assert not can_access_entity(designer, "design_jobs", unassigned, "read")
    assert not can_access_entity(designer, "orders", SimpleNamespace(id=uuid4()), "read")


def test_manufacturer_scope_follows_associations() -> None:
    maker = _user("manufacturer")
    facility_id = uuid4()
    record = SimpleNamespace(id=uuid4(), manufacturer_id=facility_id)
    foreign_record = SimpleNamespace(id=uuid4(), manufacturer_id=uuid4())
    associations = _Associations({maker.id: {facility_id}})

    assert can_access_entity(maker, "manufacturing", record, "write", associations=associations)
    assert not can_access_entity(maker, "manufacturing", foreign_record, "read", associations=associations)
    order = SimpleNamespace(id=uuid4())
    assert can_access_entity(maker, "orders", order, "read", associations=associations, manufacturer_id=facility_id)


def test_manufacturer_without_associations_sees_nothing() -> None:
    maker = _user("manufacturer")
    record = SimpleNamespace(id=uuid4(), manufacturer_id=uuid4())
    unassigned = SimpleNamespace(id=uuid4(), manufacturer_id=None)

    assert not can_access_entity(maker, "manufacturing", record, "read", associations=_Associations({}))
    assert not can_access_entity(maker, "manufacturing", record, "read", associations=None)
    assert not can_access_entity(
        maker, "manufacturing", unassigned, "read", associations=_Associations({maker.id: {uuid4()}})
    )


def test_admin_cannot_delete_self() -> None:
    admin = _user("admin")
    with pytest.raises(ConflictError) as exc:
        ensure_admin_remains(acting_user=admin, target_user=admin, active_admin_count=3, deleting=True)
    assert exc.value.code == "SELF_DELETE_FORBIDDEN"


def test_admin_cannot_demote_self() -> None:
    admin = _user("admin")
    with pytest.raises(ConflictError) as exc:
        ensure_admin_remains(acting_user=admin, target_user=admin, active_admin_count=3, new_role="ops")
    assert exc.value.code == "SELF_DEMOTE_FORBIDDEN"


def test_last_admin_cannot_be_removed() -> None:
    acting = _user("admin")
    target = _user("admin")
    with pytest.raises(ConflictError) as exc:
        ensure_admin_remains(acting_user=acting, target_user=target, active_admin_count=1, deleting=True)
    assert exc.value.code == "LAST_ADMIN_REQUIRED"
    assert exc.value.http_status == 409


def test_inactive_admin_does_not_count_toward_last_admin() -> None:
    dormant = SimpleNamespace(id=uuid4(), role="admin", is_active=False)
    ensure_admin_remains(acting_user=_user("admin"), target_user=dormant, active_admin_count=1, deleting=True)
    ensure_admin_remains(acting_user=_user("admin"), target_user=dormant, active_admin_count=1, new_role="sales")


def test_removing_one_of_several_admins_is_allowed() -> None:
    ensure_admin_remains(acting_user=_user("admin"), target_user=_user("admin"), active_admin_count=2, new_role="ops")
    ensure_admin_remains(acting_user=_user("admin"), target_user=_user("sales"), active_admin_count=1, deleting=True)
