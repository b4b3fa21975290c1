"""SQLAlchemy-backed implementations of the workflow collaborator interfaces.

Every write commits on its own; a status change and its side effects are
separate commits, not one transaction.
"""
from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import (
    ActivityLog,
    DesignJob,
    Invoice,
    ManufacturingRecord,
    ManufacturingUpdate,
    Order,
    OrderLineItem,
    User,
    UserManufacturerAssociation,
)
from .services.entity_serializers import to_json_value


def _apply_patch(entity: Any, patch: dict[str, Any]) -> None:
    for key, value in patch.items():
        setattr(entity, key, value)


def _commit(db: Session) -> None:
    # A failed flush leaves the session unusable until rolled back.
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


class SqlEntityStore:
    """EntityStore over a request-scoped Session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get(self, model: type, entity_id: UUID):
        return self.db.query(model).filter(model.id == entity_id).first()

    def _create(self, model: type, data: dict[str, Any]):
        entity = model(**data)
        self.db.add(entity)
        _commit(self.db)
        self.db.refresh(entity)
        return entity

    def _update(self, model: type, entity_id: UUID, patch: dict[str, Any]):
        entity = self._get(model, entity_id)
        if entity is None:
            return None
        _apply_patch(entity, patch)
        _commit(self.db)
        self.db.refresh(entity)
        return entity

    # Orders
    def get_order(self, order_id: UUID) -> Order | None:
        return self._get(Order, order_id)

    def update_order(self, order_id: UUID, patch: dict[str, Any]) -> Order | None:
        return self._update(Order, order_id, patch)

    def get_order_line_items(self, order_id: UUID) -> list[OrderLineItem]:
        return (
            self.db.query(OrderLineItem)
            .filter(OrderLineItem.order_id == order_id)
            .order_by(OrderLineItem.created_at)
            .all()
        )

    # Manufacturing
    def get_manufacturing(self, manufacturing_id: UUID) -> ManufacturingRecord | None:
        return self._get(ManufacturingRecord, manufacturing_id)

    def get_manufacturing_by_order(self, order_id: UUID) -> ManufacturingRecord | None:
        return self.db.query(ManufacturingRecord).filter(ManufacturingRecord.order_id == order_id).first()

    def create_manufacturing(self, data: dict[str, Any]) -> ManufacturingRecord:
        return self._create(ManufacturingRecord, data)

    def update_manufacturing(self, manufacturing_id: UUID, patch: dict[str, Any]) -> ManufacturingRecord | None:
        return self._update(ManufacturingRecord, manufacturing_id, patch)

    def create_manufacturing_update(self, data: dict[str, Any]) -> ManufacturingUpdate:
        """Append a history entry and sync the parent record's status in one commit."""
        update = ManufacturingUpdate(**data)
        self.db.add(update)
        record = self._get(ManufacturingRecord, data["manufacturing_id"])
        if record is not None and record.status != update.status:
            record.status = update.status
        _commit(self.db)
        self.db.refresh(update)
        return update

    # Design jobs
    def get_design_job(self, job_id: UUID) -> DesignJob | None:
        return self._get(DesignJob, job_id)

    def update_design_job(self, job_id: UUID, patch: dict[str, Any]) -> DesignJob | None:
        return self._update(DesignJob, job_id, patch)

    # Invoices
    def get_invoices_by_order_id(self, order_id: UUID) -> list[Invoice]:
        return self.db.query(Invoice).filter(Invoice.order_id == order_id).all()

    def create_invoice(self, data: dict[str, Any]) -> Invoice:
        return self._create(Invoice, data)

    # Users
    def get_user(self, user_id: UUID) -> User | None:
        return self._get(User, user_id)

    def update_user(self, user_id: UUID, patch: dict[str, Any]) -> User | None:
        return self._update(User, user_id, patch)

    def delete_user(self, user_id: UUID) -> None:
        user = self._get(User, user_id)
        if user is None:
            return
        self.db.query(UserManufacturerAssociation).filter(
            UserManufacturerAssociation.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.delete(user)
        _commit(self.db)

    def count_active_admins(self) -> int:
        count = (
            self.db.query(func.count(User.id))
            .filter(User.role == "admin", User.is_active.is_(True))
            .scalar()
        )
        return int(count or 0)


class SqlActivityRecorder:
    """ActivityRecorder writing ActivityLog rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def log_activity(
        self,
        actor_id: UUID,
        entity_type: str,
        entity_id: UUID,
        action: str,
        before: dict[str, Any] | None,
        after: dict[str, Any] | None,
    ) -> None:
        self.db.add(
            ActivityLog(
                user_id=actor_id,
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                previous_state=to_json_value(before) if before is not None else None,
                new_state=to_json_value(after) if after is not None else None,
            )
        )
        _commit(self.db)


class SqlAssociationLookup:
    """AssociationLookup over user_manufacturer_associations."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_associated_manufacturer_ids(self, user_id: UUID) -> set[UUID]:
        rows = (
            self.db.query(UserManufacturerAssociation.manufacturer_id)
            .filter(
                UserManufacturerAssociation.user_id == user_id,
                UserManufacturerAssociation.is_active.is_(True),
            )
            .all()
        )
        return {row[0] for row in rows}
