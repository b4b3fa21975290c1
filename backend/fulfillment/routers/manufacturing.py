"""Manufacturing record endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_workflow_deps
from ..models import User
from ..schemas import ManufacturingUpdateCreate, StatusTransitionRequest, TransitionResponse
from ..services.status_transitions import MANUFACTURING
from ..use_cases.entity_reads import present_entity, read_entity_use_case
from ..use_cases.manufacturing_updates import create_manufacturing_update_use_case
from ..use_cases.workflow_transitions import WorkflowDeps, transition_status_use_case

router = APIRouter(prefix="/manufacturing", tags=["manufacturing"])


@router.get("/{manufacturing_id}")
def get_manufacturing(
    manufacturing_id: UUID,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    return read_entity_use_case(
        entity_type=MANUFACTURING,
        entity_id=manufacturing_id,
        current_user=current_user,
        deps=deps,
    )


@router.post("/{manufacturing_id}/status", response_model=TransitionResponse)
def change_manufacturing_status(
    manufacturing_id: UUID,
    data: StatusTransitionRequest,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    result = transition_status_use_case(
        entity_type=MANUFACTURING,
        entity_id=manufacturing_id,
        requested_status=data.status,
        current_user=current_user,
        deps=deps,
    )
    return TransitionResponse(
        entity=present_entity(MANUFACTURING, result.entity, current_user.role),
        warnings=result.warnings,
    )


@router.post("/{manufacturing_id}/updates", response_model=TransitionResponse, status_code=201)
def create_manufacturing_update(
    manufacturing_id: UUID,
    data: ManufacturingUpdateCreate,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    """Append a production update; the record moves to the update's status."""
    result = create_manufacturing_update_use_case(
        manufacturing_id=manufacturing_id,
        status=data.status,
        notes=data.notes,
        manufacturer_id=data.manufacturer_id,
        current_user=current_user,
        deps=deps,
    )
    return TransitionResponse(
        entity=present_entity("manufacturing_update", result.entity, current_user.role),
        warnings=result.warnings,
    )
