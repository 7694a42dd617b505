from datetime import datetime
from uuid import UUID

from src.taskrelay.schemas.base import CamelModel


class UserRead(CamelModel):
    id: UUID
    email: str
    full_name: str | None
    is_active: bool
    created_at: datetime


class UserSummary(CamelModel):
    """Public identity shown next to invites and members."""

    id: UUID
    email: str
    full_name: str | None
