"""User administration endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from ..auth import PermissionChecker
from ..dependencies import get_workflow_deps
from ..models import User
from ..schemas import UserResponse, UserRoleResponse, UserRoleUpdate
from ..use_cases.user_admin import change_user_role_use_case, delete_user_use_case
from ..use_cases.workflow_transitions import WorkflowDeps

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/{user_id}/role", response_model=UserRoleResponse)
def change_user_role(
    user_id: UUID,
    data: UserRoleUpdate,
    current_user: User = Depends(PermissionChecker("users", "write")),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    user, warnings = change_user_role_use_case(
        user_id=user_id,
        role=data.role,
        current_user=current_user,
        deps=deps,
    )
    return UserRoleResponse(user=UserResponse.model_validate(user), warnings=warnings)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: UUID,
    current_user: User = Depends(PermissionChecker("users", "delete")),
    deps: WorkflowDeps = Depends(get_workflow_deps),
):
    delete_user_use_case(user_id=user_id, current_user=current_user, deps=deps)
    return Response(status_code=204)
