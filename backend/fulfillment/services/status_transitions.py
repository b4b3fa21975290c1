"""Status transition tables for orders, manufacturing records and design jobs."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


ORDER = "order"
MANUFACTURING = "manufacturing"
DESIGN_JOB = "design_job"

ENTITY_TYPES: tuple[str, ...] = (ORDER, MANUFACTURING, DESIGN_JOB)


def _freeze(table: dict[str, set[str]]) -> Mapping[str, frozenset[str]]:
    return MappingProxyType({state: frozenset(targets) for state, targets in table.items()})


ORDER_STATUS_TRANSITIONS = _freeze({
    "draft": {"quote", "pending_approval", "cancelled"},
    "quote": {"quote_accepted", "draft", "cancelled"},
    "quote_accepted": {"pending_approval", "approved", "cancelled"},
    "pending_approval": {"approved", "draft", "cancelled"},
    "approved": {"awaiting_sizing", "awaiting_design", "awaiting_payment", "on_hold", "cancelled"},
    "awaiting_sizing": {"awaiting_design", "awaiting_payment", "on_hold", "cancelled"},
    "awaiting_design": {"in_design", "on_hold", "cancelled"},
    "in_design": {"design_review", "awaiting_design", "on_hold", "cancelled"},
    "design_review": {"awaiting_customer_approval", "in_design", "on_hold", "cancelled"},
    "awaiting_customer_approval": {"customer_approved", "design_review", "on_hold", "cancelled"},
    "customer_approved": {"awaiting_payment", "on_hold", "cancelled"},
    "awaiting_payment": {"deposit_received", "on_hold", "cancelled"},
    "deposit_received": {"ready_for_manufacturing", "on_hold"},
    "ready_for_manufacturing": {"in_production", "on_hold"},
    "in_production": {"production_complete", "on_hold"},
    "production_complete": {"shipped", "partially_shipped", "on_hold"},
    "shipped": {"delivered", "partially_shipped"},
    "partially_shipped": {"shipped", "delivered"},
    "delivered": {"completed"},
    "completed": set(),
    # Exception lane: parks an order and resumes it into most pipeline stages.
    "on_hold": {
        "draft",
        "quote",
        "approved",
        "awaiting_sizing",
        "awaiting_design",
        "in_design",
        "design_review",
        "awaiting_customer_approval",
        "customer_approved",
        "awaiting_payment",
        "deposit_received",
        "ready_for_manufacturing",
        "in_production",
        "production_complete",
        "cancelled",
    },
    "cancelled": set(),
})

MANUFACTURING_STATUS_TRANSITIONS = _freeze({
    "new": {"accepted"},
    "accepted": {"in_production", "new"},
    "in_production": {"qc"},
    "qc": {"ready_to_ship", "in_production"},
    "ready_to_ship": {"shipped"},
    "shipped": set(),
})

DESIGN_JOB_STATUS_TRANSITIONS = _freeze({
    "pending": {"assigned", "on_hold", "cancelled"},
    "assigned": {"in_progress", "pending", "on_hold", "cancelled"},
    "in_progress": {"review", "on_hold", "cancelled"},
    "review": {"approved", "needs_revision", "on_hold", "cancelled"},
    "needs_revision": {"in_progress", "on_hold", "cancelled"},
    "approved": {"completed", "needs_revision"},
    "on_hold": {"pending", "assigned", "in_progress", "review", "cancelled"},
    "completed": set(),
    "cancelled": set(),
})

INITIAL_STATUSES: Mapping[str, str] = MappingProxyType({
    ORDER: "draft",
    MANUFACTURING: "new",
    DESIGN_JOB: "pending",
})

_TABLES: Mapping[str, Mapping[str, frozenset[str]]] = MappingProxyType({
    ORDER: ORDER_STATUS_TRANSITIONS,
    MANUFACTURING: MANUFACTURING_STATUS_TRANSITIONS,
    DESIGN_JOB: DESIGN_JOB_STATUS_TRANSITIONS,
})


def normalize_status(status: str | None) -> str:
    if not status:
        return ""
    return status.strip().lower()


def transition_table(entity_type: str) -> Mapping[str, frozenset[str]]:
    table = _TABLES.get(entity_type)
    if table is None:
        raise ValueError(f"Unknown entity type: {entity_type}")
    return table


def known_statuses(entity_type: str) -> frozenset[str]:
    return frozenset(transition_table(entity_type))


def is_known_status(entity_type: str, status: str | None) -> bool:
    table = _TABLES.get(entity_type)
    return table is not None and normalize_status(status) in table


def is_terminal_status(entity_type: str, status: str | None) -> bool:
    table = _TABLES.get(entity_type)
    if table is None:
        return False
    current = normalize_status(status)
    return current in table and not table[current]


def allowed_next_statuses(entity_type: str, status: str | None) -> frozenset[str]:
    table = _TABLES.get(entity_type)
    if table is None:
        return frozenset()
    return table.get(normalize_status(status), frozenset())


def is_valid_transition(entity_type: str, from_status: str | None, to_status: str | None) -> bool:
    """Return True only for an explicit edge between two known states.

    Unknown entity types and unknown states on either side are rejected, and a
    self-loop is never an edge.
    """
    table = _TABLES.get(entity_type)
    if table is None:
        return False
    current = normalize_status(from_status)
    nxt = normalize_status(to_status)
    if current not in table or nxt not in table:
        return False
    return nxt in table[current]
