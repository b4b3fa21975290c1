"""SQLAlchemy models for the fulfillment workflow."""
from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index,
    Integer, Numeric, String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .database import Base
from .services.status_transitions import (
    DESIGN_JOB,
    DESIGN_JOB_STATUS_TRANSITIONS,
    INITIAL_STATUSES,
    MANUFACTURING,
    MANUFACTURING_STATUS_TRANSITIONS,
    ORDER,
    ORDER_STATUS_TRANSITIONS,
)

USER_ROLES = ("admin", "sales", "ops", "designer", "manufacturer", "finance")


class User(Base):
    """User model."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True)
    role = Column(String(50), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(role.in_(USER_ROLES), name="chk_user_role"),
    )


class Manufacturer(Base):
    """External production facility."""
    __tablename__ = "manufacturers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    lead_time_days = Column(Integer, default=14)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserManufacturerAssociation(Base):
    """Links manufacturer-role users to the facilities they may see."""
    __tablename__ = "user_manufacturer_associations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    manufacturer_id = Column(Uuid, ForeignKey("manufacturers.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "manufacturer_id", name="uq_user_manufacturer"),
    )


class Order(Base):
    """Customer order."""
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=True, index=True)
    salesperson_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    order_code = Column(String(50), unique=True, nullable=False)
    order_name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default=INITIAL_STATUSES[ORDER], index=True)
    priority = Column(String(20), nullable=False, default="normal")
    is_rush = Column(Boolean, nullable=False, default=False)
    invoice_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(status.in_(tuple(ORDER_STATUS_TRANSITIONS)), name="chk_order_status"),
        CheckConstraint(priority.in_(["low", "normal", "high"]), name="chk_order_priority"),
    )

    # Relationships
    line_items = relationship("OrderLineItem", back_populates="order", order_by="OrderLineItem.created_at")


class OrderLineItem(Base):
    """Order line with a per-size quantity grid."""
    __tablename__ = "order_line_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=False, index=True)
    item_name = Column(String(255), nullable=True)
    sizes = Column(JSON, nullable=False, default=dict)  # {"s": 5, "m": 10, ...}
    unit_price = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    order = relationship("Order", back_populates="line_items")


class ManufacturingRecord(Base):
    """Production record, at most one per order."""
    __tablename__ = "manufacturing"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # No FK cascade: deleting an order leaves its manufacturing record in place.
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=False, unique=True)
    manufacturer_id = Column(Uuid, ForeignKey("manufacturers.id"), nullable=True, index=True)
    status = Column(String(50), nullable=False, default=INITIAL_STATUSES[MANUFACTURING], index=True)
    priority = Column(String(20), nullable=False, default="normal")
    production_notes = Column(Text, nullable=True)
    tracking_number = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(status.in_(tuple(MANUFACTURING_STATUS_TRANSITIONS)), name="chk_manufacturing_status"),
    )

    # Relationships
    updates = relationship("ManufacturingUpdate", back_populates="record", order_by="ManufacturingUpdate.created_at")


class ManufacturingUpdate(Base):
    """Append-only history entry for a manufacturing record."""
    __tablename__ = "manufacturing_updates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    manufacturing_id = Column(Uuid, ForeignKey("manufacturing.id"), nullable=False, index=True)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=True)
    status = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    updated_by = Column(Uuid, ForeignKey("users.id"), nullable=False)
    manufacturer_id = Column(Uuid, ForeignKey("manufacturers.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    record = relationship("ManufacturingRecord", back_populates="updates")


class DesignJob(Base):
    """Design task tied to an order."""
    __tablename__ = "design_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    job_code = Column(String(50), unique=True, nullable=False)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=True, index=True)
    salesperson_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    assigned_designer_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(50), nullable=False, default=INITIAL_STATUSES[DESIGN_JOB], index=True)
    brief = Column(Text, nullable=True)
    urgency = Column(String(20), nullable=False, default="normal")
    status_changed_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(status.in_(tuple(DESIGN_JOB_STATUS_TRANSITIONS)), name="chk_design_job_status"),
    )


class Invoice(Base):
    """Invoice generated from an order's line items; totals are frozen."""
    __tablename__ = "invoices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number = Column(String(50), unique=True, nullable=False)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=True, index=True)
    org_id = Column(Uuid, nullable=True, index=True)
    salesperson_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), default=0)
    tax_rate = Column(Numeric(5, 4), default=0)
    tax_amount = Column(Numeric(12, 2), default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), default=0)
    payment_terms = Column(String(50), nullable=True)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            status.in_(["draft", "sent", "partial", "paid", "overdue", "cancelled"]),
            name="chk_invoice_status",
        ),
    )


class ActivityLog(Base):
    """Append-only audit entry with before/after snapshots."""
    __tablename__ = "activity_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Uuid, nullable=False)
    action = Column(String(50), nullable=False, index=True)
    previous_state = Column(JSON, nullable=True)
    new_state = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        Index("idx_activity_logs_entity", "entity_type", "entity_id"),
    )
