"""Project member schemas."""

from datetime import datetime
from uuid import UUID

from src.taskrelay.models import ProjectRole
from src.taskrelay.schemas.base import CamelModel
from src.taskrelay.schemas.user import UserSummary


class MemberRead(CamelModel):
    id: UUID
    project_id: UUID
    user_id: UUID
    role: ProjectRole
    created_at: datetime
    updated_at: datetime


class MemberWithUser(MemberRead):
    user: UserSummary


class RoleChangeRequest(CamelModel):
    """Body of PUT /members/{id}/role."""

    role: ProjectRole
    project_id: UUID
