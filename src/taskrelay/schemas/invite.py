"""Invite schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from src.taskrelay.models import InviteStatus, ProjectInvite, ProjectRole
from src.taskrelay.schemas.base import CamelModel
from src.taskrelay.schemas.member import MemberRead
from src.taskrelay.schemas.project import ProjectRead, ProjectSummary
from src.taskrelay.schemas.user import UserSummary


class InviteRowCreate(CamelModel):
    """One row of a batch invite.

    ``email`` is deliberately a plain string: a malformed address fails only
    its own row, not the whole request.
    """

    email: str = Field(min_length=1, max_length=320)
    role: ProjectRole = ProjectRole.MEMBER
    message: str | None = Field(default=None, max_length=500)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v


class BatchInviteRequest(CamelModel):
    rows: list[InviteRowCreate] = Field(min_length=1)


class InviteRead(CamelModel):
    """Read model for invites (manager view)."""

    id: UUID
    project_id: UUID
    email: str
    role: ProjectRole
    status: InviteStatus
    message: str | None
    invited_by_user_id: UUID | None
    created_at: datetime
    expires_at: datetime
    responded_at: datetime | None

    @classmethod
    def from_invite(cls, invite: ProjectInvite) -> "InviteRead":
        """Build from a row, reporting a lapsed PENDING invite as EXPIRED."""
        read = cls.model_validate(invite)
        read.status = invite.effective_status
        return read


class CreatedInviteRead(CamelModel):
    invite: InviteRead
    invite_url: str


class BatchInviteErrorRead(CamelModel):
    email: str
    error: str
    message: str


class BatchInviteResponse(CamelModel):
    results: list[CreatedInviteRead]
    errors: list[BatchInviteErrorRead]


class InvitePreviewResponse(CamelModel):
    """What the token holder sees before deciding to accept or decline."""

    id: UUID
    email: str
    role: ProjectRole
    status: InviteStatus
    message: str | None
    expires_at: datetime
    project: ProjectSummary
    inviter: UserSummary | None


class AcceptInviteResponse(CamelModel):
    project: ProjectRead
    member: MemberRead
    warning: str | None = None
