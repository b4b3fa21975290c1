"""Design job endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..dependencies import get_workflow_deps
from ..models import User
from ..schemas import StatusTransitionRequest, TransitionResponse
from ..services.status_transitions import DESIGN_JOB
from ..use_cases.entity_reads import present_entity, read_entity_use_case
from ..use_cases.workflow_transitions import WorkflowDeps, transition_status_use_case

router = APIRouter(prefix="/design-jobs", tags=["design-jobs"])


@router.get("/{job_id}")
def get_design_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    return read_entity_use_case(
        entity_type=DESIGN_JOB,
        entity_id=job_id,
        current_user=current_user,
        deps=deps,
    )


@router.post("/{job_id}/status", response_model=TransitionResponse)
def change_design_job_status(
    job_id: UUID,
    data: StatusTransitionRequest,
    current_user: User = Depends(get_current_user),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    result = transition_status_use_case(
        entity_type=DESIGN_JOB,
        entity_id=job_id,
        requested_status=data.status,
        current_user=current_user,
        deps=deps,
    )
    return TransitionResponse(
        entity=present_entity(DESIGN_JOB, result.entity, current_user.role),
        warnings=result.warnings,
    )
