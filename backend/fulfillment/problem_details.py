"""RFC 7807 Problem Details rendering for workflow errors."""
from __future__ import annotations

from http import HTTPStatus

from fastapi.responses import JSONResponse

from .domain_errors import DomainError

PROBLEM_BASE_URL = "https://api.fulfillment.local/problems"

# Codes whose title reads better than the bare HTTP phrase.
PROBLEM_TITLES: dict[str, str] = {
    "INVALID_STATUS_TRANSITION": "Status transition not allowed",
    "PRECONDITION_FAILED": "Transition precondition not met",
    "UNKNOWN_STATUS": "Unknown status",
    "UNKNOWN_ROLE": "Unknown role",
    "LAST_ADMIN_REQUIRED": "Admin account required",
    "SELF_DELETE_FORBIDDEN": "Cannot delete own account",
    "SELF_DEMOTE_FORBIDDEN": "Cannot demote own account",
    "MANUFACTURER_MISMATCH": "Manufacturer not permitted",
}


def problem_title(exc: DomainError) -> str:
    if exc.code in PROBLEM_TITLES:
        return PROBLEM_TITLES[exc.code]
    if exc.code.endswith("_NOT_FOUND"):
        return exc.message
    try:
        return HTTPStatus(exc.http_status).phrase
    except ValueError:
        return "Workflow Error"


def build_problem_details_response(exc: DomainError) -> JSONResponse:
    """Render a DomainError as a problem+json payload keyed by its stable code."""
    payload: dict[str, object] = {
        "type": f"{PROBLEM_BASE_URL}/{exc.code.lower().replace('_', '-')}",
        "title": problem_title(exc),
        "status": exc.http_status,
        "detail": exc.message,
        "code": exc.code,
    }
    if exc.details is not None:
        payload["details"] = exc.details

    return JSONResponse(
        status_code=exc.http_status,
        content=payload,
        media_type="application/problem+json",
    )
