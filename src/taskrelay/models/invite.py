"""Project invite model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.taskrelay.models.base import utc_now
from src.taskrelay.models.enums import InviteStatus, ProjectRole

_PENDING_ONLY = text("status = 'PENDING'")


class ProjectInvite(SQLModel, table=True):
    """Time-bound, single-use capability binding an email and role to a project.

    Only the SHA-256 hash of the token is stored.
    """

    __tablename__ = "project_invites"
    __table_args__ = (
        # At most one live invite per (project, email)
        Index(
            "uq_project_invites_pending_email",
            "project_id",
            "email",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    email: str = Field(max_length=255, index=True)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    role: str = Field(default=ProjectRole.MEMBER.value, max_length=20)
    message: str | None = Field(default=None, max_length=500)
    invited_by_user_id: UUID | None = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )
    status: str = Field(default=InviteStatus.PENDING.value, max_length=20, index=True)
    expires_at: datetime
    responded_at: datetime | None = Field(default=None)
    accepted_by_user_id: UUID | None = Field(
        default=None, foreign_key="users.id", ondelete="SET NULL"
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def role_enum(self) -> ProjectRole:
        return ProjectRole(self.role)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) > self.expires_at

    @property
    def effective_status(self) -> InviteStatus:
        """Status as observed now: a lapsed PENDING invite reads as EXPIRED."""
        status = InviteStatus(self.status)
        if status is InviteStatus.PENDING and self.is_expired():
            return InviteStatus.EXPIRED
        return status
