"""Order endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_workflow_deps
from ..models import User
from ..schemas import StatusTransitionRequest, TransitionResponse
from ..services.status_transitions import ORDER
from ..use_cases.entity_reads import present_entity, read_entity_use_case
from ..use_cases.workflow_transitions import WorkflowDeps, transition_status_use_case

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/{order_id}")
def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    """Get order with its line items."""
    return read_entity_use_case(
        entity_type=ORDER,
        entity_id=order_id,
        current_user=current_user,
        deps=deps,
    )


@router.post("/{order_id}/status", response_model=TransitionResponse)
def change_order_status(
    order_id: UUID,
    data: StatusTransitionRequest,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    result = transition_status_use_case(
        entity_type=ORDER,
        entity_id=order_id,
        requested_status=data.status,
        current_user=current_user,
        deps=deps,
    )
    return TransitionResponse(
        entity=present_entity(ORDER, result.entity, current_user.role),
        warnings=result.warnings,
    )
