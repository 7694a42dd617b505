"""Project endpoints, including each project's members and invites."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.taskrelay.api.dependencies import (
    CurrentUser,
    InviteServiceDep,
    MembershipServiceDep,
    ProjectServiceDep,
)
from src.taskrelay.core.notifications import build_invite_url
from src.taskrelay.models import InviteStatus, Project, ProjectRole
from src.taskrelay.schemas.invite import (
    BatchInviteErrorRead,
    BatchInviteRequest,
    BatchInviteResponse,
    CreatedInviteRead,
    InviteRead,
)
from src.taskrelay.schemas.member import MemberWithUser
from src.taskrelay.schemas.project import ProjectCreate, ProjectRead, ProjectWithRole
from src.taskrelay.schemas.user import UserSummary

router = APIRouter(prefix="/projects", tags=["projects"])


def _with_role(project: Project, role: ProjectRole) -> ProjectWithRole:
    return ProjectWithRole(
        id=project.id,
        name=project.name,
        description=project.description,
        created_at=project.created_at,
        updated_at=project.updated_at,
        role=role,
    )


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    description="Create a project. The caller becomes its owner.",
)
async def create_project(
    request: ProjectCreate,
    user: CurrentUser,
    project_service: ProjectServiceDep,
) -> ProjectRead:
    project, _ = await project_service.create_project(user.id, request.name, request.description)
    return ProjectRead.model_validate(project)


@router.get(
    "",
    response_model=list[ProjectWithRole],
    summary="List my projects",
)
async def list_projects(
    user: CurrentUser,
    project_service: ProjectServiceDep,
) -> list[ProjectWithRole]:
    projects = await project_service.list_for_user(user.id)
    return [_with_role(p, role) for p, role in projects]


@router.get(
    "/{project_id}",
    response_model=ProjectWithRole,
    summary="Get project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: UUID,
    user: CurrentUser,
    project_service: ProjectServiceDep,
) -> ProjectWithRole:
    project, membership = await project_service.get_for_member(project_id, user.id)
    return _with_role(project, membership.role_enum)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
    description="Delete a project with all its members and invites. Owner only.",
    responses={
        403: {"description": "Not the owner"},
        404: {"description": "Project not found"},
    },
)
async def delete_project(
    project_id: UUID,
    user: CurrentUser,
    project_service: ProjectServiceDep,
) -> None:
    _, membership = await project_service.get_for_member(project_id, user.id)
    await project_service.delete_project(project_id, membership)


@router.get(
    "/{project_id}/members",
    response_model=list[MemberWithUser],
    summary="List members",
)
async def list_members(
    project_id: UUID,
    user: CurrentUser,
    membership_service: MembershipServiceDep,
) -> list[MemberWithUser]:
    await membership_service.get_actor(project_id, user.id)
    members = await membership_service.list_members(project_id)
    return [
        MemberWithUser(
            id=m.id,
            project_id=m.project_id,
            user_id=m.user_id,
            role=m.role_enum,
            created_at=m.created_at,
            updated_at=m.updated_at,
            user=UserSummary.model_validate(u),
        )
        for m, u in members
    ]


@router.post(
    "/{project_id}/invites",
    response_model=BatchInviteResponse,
    summary="Invite members",
    description=(
        "Invite one or more people. Each row succeeds or fails on its own; "
        "failed rows are listed in `errors` with a machine-readable code."
    ),
    responses={403: {"description": "Not an owner or admin"}},
)
async def create_invites(
    project_id: UUID,
    request: BatchInviteRequest,
    user: CurrentUser,
    membership_service: MembershipServiceDep,
    invite_service: InviteServiceDep,
) -> BatchInviteResponse:
    actor = await membership_service.get_actor(project_id, user.id)
    batch = await invite_service.create_batch(project_id, actor, request.rows)
    return BatchInviteResponse(
        results=[
            CreatedInviteRead(
                invite=InviteRead.from_invite(r.invite),
                invite_url=build_invite_url(r.token),
            )
            for r in batch.results
        ],
        errors=[
            BatchInviteErrorRead(email=e.email, error=e.error, message=e.message)
            for e in batch.errors
        ],
    )


@router.get(
    "/{project_id}/invites",
    response_model=list[InviteRead],
    summary="List invites",
    responses={403: {"description": "Not an owner or admin"}},
)
async def list_invites(
    project_id: UUID,
    user: CurrentUser,
    membership_service: MembershipServiceDep,
    invite_service: InviteServiceDep,
    invite_status: Annotated[InviteStatus | None, Query(alias="status")] = None,
) -> list[InviteRead]:
    actor = await membership_service.get_actor(project_id, user.id)
    invites = await invite_service.list_project_invites(project_id, actor, invite_status)
    return [InviteRead.from_invite(i) for i in invites]
