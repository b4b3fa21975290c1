"""Domain-level exception primitives with stable machine-readable codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class DomainError(Exception):
    """Use-case level error with stable code and HTTP mapping."""

    code: str
    http_status: int
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    """Entity id does not exist."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            code=f"{entity_type.upper()}_NOT_FOUND",
            http_status=404,
            message=f"{entity_type.replace('_', ' ').capitalize()} not found",
            details={"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class ForbiddenError(DomainError):
    """Entity exists but the acting user may not touch it."""

    def __init__(self, message: str = "Access denied", *, code: str = "PERMISSION_DENIED") -> None:
        super().__init__(code=code, http_status=403, message=message)


class InvalidTransitionError(DomainError):
    """Requested status is not reachable from the current one."""

    def __init__(self, entity_type: str, from_status: str, to_status: str) -> None:
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            http_status=409,
            message=f"Invalid {entity_type} status transition: {from_status} -> {to_status}",
            details={"entity_type": entity_type, "from": from_status, "to": to_status},
        )


class PreconditionFailedError(DomainError):
    """Transition is legal in the graph but business preconditions are unmet."""

    def __init__(self, condition: str) -> None:
        super().__init__(
            code="PRECONDITION_FAILED",
            http_status=422,
            message=condition,
            details={"condition": condition},
        )


class ConflictError(DomainError):
    """Structural invariant would be violated."""

    def __init__(self, message: str, *, code: str = "CONFLICT") -> None:
        super().__init__(code=code, http_status=409, message=message)
