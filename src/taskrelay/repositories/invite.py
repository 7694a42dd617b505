"""Repository for ProjectInvite entity.

Owns the invite state machine. Every transition out of PENDING is a single
conditional UPDATE whose affected-row count decides the winner, so two
concurrent accepts of the same token can never both succeed. Expiry is
evaluated lazily at each read or transition; nothing sweeps old rows.
"""

from datetime import timedelta
from typing import Any, NoReturn
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from src.taskrelay.core.config import get_settings
from src.taskrelay.core.exceptions import (
    DuplicatePendingInviteError,
    ExpiredError,
    InvalidStateError,
    NotFoundError,
)
from src.taskrelay.core.security import generate_token, hash_token
from src.taskrelay.models import InviteStatus, ProjectInvite, ProjectRole
from src.taskrelay.models.base import utc_now
from src.taskrelay.repositories.base import BaseRepository


def _default_ttl() -> timedelta:
    return timedelta(days=get_settings().invite_expire_days)


class ProjectInviteRepository(BaseRepository[ProjectInvite]):
    """Invite persistence, lookup and guarded state transitions."""

    model = ProjectInvite

    async def get_by_token_hash(
        self, token_hash: str, *, refresh: bool = False
    ) -> ProjectInvite | None:
        query = select(ProjectInvite).where(ProjectInvite.token_hash == token_hash)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_pending(self, project_id: UUID, email: str) -> ProjectInvite | None:
        """Get the PENDING invite for an email in a project, lapsed or not."""
        result = await self.session.execute(
            select(ProjectInvite).where(
                ProjectInvite.project_id == project_id,
                ProjectInvite.email == email.lower().strip(),
                ProjectInvite.status == InviteStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_project(
        self, project_id: UUID, status: InviteStatus | None = None
    ) -> list[ProjectInvite]:
        """List a project's invites, newest first."""
        query = select(ProjectInvite).where(ProjectInvite.project_id == project_id)
        if status is not None:
            query = query.where(ProjectInvite.status == status.value)
        result = await self.session.execute(
            query.order_by(col(ProjectInvite.created_at).desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        project_id: UUID,
        email: str,
        role: ProjectRole,
        invited_by_user_id: UUID,
        message: str | None = None,
        ttl: timedelta | None = None,
    ) -> tuple[ProjectInvite, str]:
        """Create a PENDING invite. Returns (invite, plaintext_token).

        Raises DuplicatePendingInviteError if a live invite already exists for
        this email. A lapsed PENDING invite is persisted as EXPIRED and
        replaced.
        """
        email = email.lower().strip()
        now = utc_now()

        existing = await self.get_pending(project_id, email)
        if existing is not None:
            if not existing.is_expired(now):
                raise DuplicatePendingInviteError(
                    f"A pending invite already exists for {email}"
                )
            existing.status = InviteStatus.EXPIRED.value
            existing.updated_at = now
            self.session.add(existing)
            await self.session.flush()

        token = generate_token()
        invite = ProjectInvite(
            project_id=project_id,
            email=email,
            token_hash=hash_token(token),
            role=role.value,
            message=message,
            invited_by_user_id=invited_by_user_id,
            expires_at=now + (ttl or _default_ttl()),
            created_at=now,
            updated_at=now,
        )
        self.session.add(invite)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent create for the same email
            raise DuplicatePendingInviteError(
                f"A pending invite already exists for {email}"
            ) from e
        return invite, token

    async def lookup(self, token: str) -> ProjectInvite:
        """Resolve a token for preview or acceptance.

        Raises NotFoundError for an unknown token and ExpiredError for a
        PENDING invite past its deadline. Terminal invites are returned as-is.
        """
        invite = await self.get_by_token_hash(hash_token(token))
        if invite is None:
            raise NotFoundError("Invite not found")
        if invite.effective_status is InviteStatus.EXPIRED:
            raise ExpiredError()
        return invite

    async def mark_accepted(self, token: str, user_id: UUID) -> ProjectInvite:
        now = utc_now()
        return await self._transition_by_token(
            token,
            status=InviteStatus.ACCEPTED.value,
            responded_at=now,
            accepted_by_user_id=user_id,
        )

    async def mark_declined(self, token: str) -> ProjectInvite:
        return await self._transition_by_token(
            token,
            status=InviteStatus.DECLINED.value,
            responded_at=utc_now(),
        )

    async def mark_cancelled(self, invite_id: UUID) -> ProjectInvite:
        rows = await self._conditional_update(
            col(ProjectInvite.id) == invite_id,
            status=InviteStatus.CANCELLED.value,
        )
        invite = await self.reload(invite_id)
        if rows != 1 or invite is None:
            self._raise_transition_failure(invite)
        return invite

    async def resend(
        self, invite_id: UUID, ttl: timedelta | None = None
    ) -> tuple[ProjectInvite, str]:
        """Extend a PENDING invite's deadline and rotate its token.

        The previous link stops working. Lapsed PENDING invites are revived;
        terminal invites raise InvalidStateError.
        """
        now = utc_now()
        token = generate_token()
        result = await self.session.execute(
            update(ProjectInvite)
            .where(
                col(ProjectInvite.id) == invite_id,
                col(ProjectInvite.status) == InviteStatus.PENDING.value,
            )
            .values(
                token_hash=hash_token(token),
                expires_at=now + (ttl or _default_ttl()),
                updated_at=now,
            )
        )
        invite = await self.reload(invite_id)
        if invite is None:
            raise NotFoundError("Invite not found")
        if (result.rowcount or 0) != 1:  # type: ignore[attr-defined]
            raise InvalidStateError(
                f"Cannot resend invite with status: {invite.status.lower()}"
            )
        return invite, token

    async def _transition_by_token(self, token: str, **values: Any) -> ProjectInvite:
        token_hash = hash_token(token)
        rows = await self._conditional_update(
            col(ProjectInvite.token_hash) == token_hash, **values
        )
        invite = await self.get_by_token_hash(token_hash, refresh=True)
        if rows != 1 or invite is None:
            self._raise_transition_failure(invite)
        return invite

    async def _conditional_update(self, criterion: Any, **values: Any) -> int:
        """UPDATE ... WHERE status='PENDING' AND not expired; returns affected rows."""
        now = utc_now()
        result = await self.session.execute(
            update(ProjectInvite)
            .where(
                criterion,
                col(ProjectInvite.status) == InviteStatus.PENDING.value,
                col(ProjectInvite.expires_at) > now,
            )
            .values(updated_at=now, **values)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    @staticmethod
    def _raise_transition_failure(invite: ProjectInvite | None) -> NoReturn:
        if invite is None:
            raise NotFoundError("Invite not found")
        status = invite.effective_status
        if status is InviteStatus.EXPIRED:
            raise ExpiredError()
        raise InvalidStateError(f"Invite has already been {status.value.lower()}")
