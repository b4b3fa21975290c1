"""Collaborator interfaces the workflow use-cases depend on."""
from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class EntityStore(Protocol):
    """CRUD persistence for orders, manufacturing, design jobs, invoices and users."""

    def get_order(self, order_id: UUID) -> Any | None: ...

    def update_order(self, order_id: UUID, patch: dict[str, Any]) -> Any: ...

    def get_order_line_items(self, order_id: UUID) -> list[Any]: ...

    def get_manufacturing(self, manufacturing_id: UUID) -> Any | None: ...

    def get_manufacturing_by_order(self, order_id: UUID) -> Any | None: ...

    def create_manufacturing(self, data: dict[str, Any]) -> Any: ...

    def update_manufacturing(self, manufacturing_id: UUID, patch: dict[str, Any]) -> Any: ...

    def create_manufacturing_update(self, data: dict[str, Any]) -> Any:
        """Append a history entry; the parent record takes the entry's status in the same write."""
        ...

    def get_design_job(self, job_id: UUID) -> Any | None: ...

    def update_design_job(self, job_id: UUID, patch: dict[str, Any]) -> Any: ...

    def get_invoices_by_order_id(self, order_id: UUID) -> list[Any]: ...

    def create_invoice(self, data: dict[str, Any]) -> Any: ...

    def get_user(self, user_id: UUID) -> Any | None: ...

    def update_user(self, user_id: UUID, patch: dict[str, Any]) -> Any: ...

    def delete_user(self, user_id: UUID) -> None: ...

    def count_active_admins(self) -> int: ...


class ActivityRecorder(Protocol):
    """Append-only audit log."""

    def log_activity(
        self,
        actor_id: UUID,
        entity_type: str,
        entity_id: UUID,
        action: str,
        before: dict[str, Any] | None,
        after: dict[str, Any] | None,
    ) -> None: ...


class AssociationLookup(Protocol):
    """Resolves which manufacturers a manufacturer-role user belongs to."""

    def get_associated_manufacturer_ids(self, user_id: UUID) -> set[UUID]: ...
