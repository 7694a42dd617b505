"""Repository layer - data access abstraction."""

from src.taskrelay.repositories.base import BaseRepository
from src.taskrelay.repositories.invite import ProjectInviteRepository
from src.taskrelay.repositories.membership import MembershipRepository
from src.taskrelay.repositories.project import ProjectRepository
from src.taskrelay.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "MembershipRepository",
    "ProjectInviteRepository",
    "ProjectRepository",
    "UserRepository",
]
