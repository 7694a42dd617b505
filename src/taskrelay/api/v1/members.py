"""Project member endpoints - role changes and removal."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.taskrelay.api.dependencies import CurrentUser, MembershipServiceDep
from src.taskrelay.schemas.member import MemberRead, RoleChangeRequest

router = APIRouter(prefix="/members", tags=["members"])


@router.put(
    "/{member_id}/role",
    response_model=MemberRead,
    summary="Change member role",
    description=(
        "Change a member's role. Giving OWNER to another member transfers "
        "ownership; the previous owner becomes ADMIN."
    ),
    responses={
        403: {"description": "Not allowed to make this change"},
        404: {"description": "Member not found"},
        409: {"description": "Concurrent change, or the owner tried to step down"},
    },
)
async def change_member_role(
    member_id: UUID,
    request: RoleChangeRequest,
    user: CurrentUser,
    membership_service: MembershipServiceDep,
) -> MemberRead:
    actor = await membership_service.get_actor(request.project_id, user.id)
    target = await membership_service.get_member(request.project_id, member_id)
    member = await membership_service.change_role(actor, target, request.role)
    return MemberRead.model_validate(member)


@router.delete(
    "/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove member",
    description="Remove a member, or leave the project when removing yourself.",
    responses={
        403: {"description": "Not allowed to remove this member"},
        404: {"description": "Member not found"},
        409: {"description": "Concurrent change, or the target is the owner"},
    },
)
async def remove_member(
    member_id: UUID,
    project_id: Annotated[UUID, Query(alias="projectId")],
    user: CurrentUser,
    membership_service: MembershipServiceDep,
) -> None:
    actor = await membership_service.get_actor(project_id, user.id)
    target = await membership_service.get_member(project_id, member_id)
    await membership_service.remove_member(actor, target)
