"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.taskrelay.api.dependencies.db import DBSession
from src.taskrelay.api.dependencies.repositories import (
    InviteRepo,
    MembershipRepo,
    ProjectRepo,
    UserRepo,
)
from src.taskrelay.services.auth_bridge import AuthBridge
from src.taskrelay.services.auth_service import AuthService
from src.taskrelay.services.invite_service import InviteService
from src.taskrelay.services.membership_service import MembershipService
from src.taskrelay.services.project_service import ProjectService


def get_auth_service(user_repo: UserRepo, session: DBSession) -> AuthService:
    return AuthService(user_repo, session)


def get_membership_service(
    membership_repo: MembershipRepo,
    user_repo: UserRepo,
    session: DBSession,
) -> MembershipService:
    return MembershipService(membership_repo, user_repo, session)


MembershipServiceDep = Annotated[MembershipService, Depends(get_membership_service)]


def get_invite_service(
    invite_repo: InviteRepo,
    project_repo: ProjectRepo,
    user_repo: UserRepo,
    membership_repo: MembershipRepo,
    membership_service: MembershipServiceDep,
    session: DBSession,
) -> InviteService:
    return InviteService(
        invite_repo,
        project_repo,
        user_repo,
        membership_repo,
        membership_service,
        session,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]


def get_auth_bridge(
    auth_service: AuthServiceDep,
    invite_service: InviteServiceDep,
) -> AuthBridge:
    return AuthBridge(auth_service, invite_service)


def get_project_service(
    project_repo: ProjectRepo,
    membership_repo: MembershipRepo,
    session: DBSession,
) -> ProjectService:
    return ProjectService(project_repo, membership_repo, session)


AuthBridgeDep = Annotated[AuthBridge, Depends(get_auth_bridge)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
