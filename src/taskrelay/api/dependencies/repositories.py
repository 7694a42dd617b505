"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.taskrelay.api.dependencies.db import DBSession
from src.taskrelay.repositories import (
    MembershipRepository,
    ProjectInviteRepository,
    ProjectRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_project_repository(session: DBSession) -> ProjectRepository:
    return ProjectRepository(session)


def get_membership_repository(session: DBSession) -> MembershipRepository:
    return MembershipRepository(session)


def get_invite_repository(session: DBSession) -> ProjectInviteRepository:
    return ProjectInviteRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
ProjectRepo = Annotated[ProjectRepository, Depends(get_project_repository)]
MembershipRepo = Annotated[MembershipRepository, Depends(get_membership_repository)]
InviteRepo = Annotated[ProjectInviteRepository, Depends(get_invite_repository)]
