"""Model exports.

Import from here: `from src.taskrelay.models import Project, ProjectMember`
"""

from src.taskrelay.models.enums import InviteStatus, ProjectRole
from src.taskrelay.models.invite import ProjectInvite
from src.taskrelay.models.project import Project, ProjectMember
from src.taskrelay.models.user import User

__all__ = [
    # Enums
    "InviteStatus",
    "ProjectRole",
    # Models
    "Project",
    "ProjectInvite",
    "ProjectMember",
    "User",
]
