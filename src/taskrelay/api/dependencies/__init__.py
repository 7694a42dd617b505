"""FastAPI dependency injection definitions."""

from src.taskrelay.api.dependencies.auth import CurrentUser, get_current_user
from src.taskrelay.api.dependencies.db import DBSession, get_db_session
from src.taskrelay.api.dependencies.repositories import (
    InviteRepo,
    MembershipRepo,
    ProjectRepo,
    UserRepo,
)
from src.taskrelay.api.dependencies.services import (
    AuthBridgeDep,
    AuthServiceDep,
    InviteServiceDep,
    MembershipServiceDep,
    ProjectServiceDep,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "CurrentUser",
    "get_current_user",
    # Repositories
    "InviteRepo",
    "MembershipRepo",
    "ProjectRepo",
    "UserRepo",
    # Services
    "AuthBridgeDep",
    "AuthServiceDep",
    "InviteServiceDep",
    "MembershipServiceDep",
    "ProjectServiceDep",
]
