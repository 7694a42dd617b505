"""Project invite service."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.ext.asyncio import AsyncSession

from src.taskrelay.core.config import get_settings
from src.taskrelay.core.exceptions import (
    AlreadyMemberError,
    DomainError,
    EmailMismatchError,
    ForbiddenError,
    InvalidEmailError,
    InvalidStateError,
    NotFoundError,
)
from src.taskrelay.core.logging import get_logger
from src.taskrelay.core.notifications import send_invite_email
from src.taskrelay.models import (
    InviteStatus,
    Project,
    ProjectInvite,
    ProjectMember,
    ProjectRole,
    User,
)
from src.taskrelay.repositories import (
    MembershipRepository,
    ProjectInviteRepository,
    ProjectRepository,
    UserRepository,
)
from src.taskrelay.schemas.invite import InviteRowCreate
from src.taskrelay.services import role_policy
from src.taskrelay.services.membership_service import MembershipService

logger = get_logger(__name__)


@dataclass
class CreatedInvite:
    invite: ProjectInvite
    token: str


@dataclass
class BatchInviteError:
    email: str
    error: str
    message: str


@dataclass
class BatchInviteResult:
    results: list[CreatedInvite] = field(default_factory=list)
    errors: list[BatchInviteError] = field(default_factory=list)


@dataclass
class InvitePreview:
    invite: ProjectInvite
    project: Project
    inviter: User | None
    status: InviteStatus


@dataclass
class AcceptResult:
    project: Project
    member: ProjectMember
    invite: ProjectInvite
    email_mismatch: bool = False


EMAIL_MISMATCH_WARNING = (
    "This invite was sent to a different email address than the one you are "
    "signed in with. If this is not you, sign in with the invited account."
)


def normalize_email(email: str) -> str:
    """Validate email syntax and return it lowercased.

    Raises InvalidEmailError.
    """
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidEmailError(f"Invalid email address: {e}") from e
    return result.normalized.lower()


class InviteService:
    """Service for project invite operations."""

    def __init__(
        self,
        invite_repo: ProjectInviteRepository,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        membership_repo: MembershipRepository,
        membership_service: MembershipService,
        session: AsyncSession,
    ):
        self.invite_repo = invite_repo
        self.project_repo = project_repo
        self.user_repo = user_repo
        self.membership_repo = membership_repo
        self.membership_service = membership_service
        self.session = session

    async def create_batch(
        self,
        project_id: UUID,
        actor: ProjectMember,
        rows: Sequence[InviteRowCreate],
    ) -> BatchInviteResult:
        """Issue one invite per row, collecting per-row failures.

        Each successful row commits on its own, so a bad row never undoes a
        good one. Only a caller who cannot invite at all fails the batch.

        Raises:
            ForbiddenError: The actor is not an OWNER or ADMIN
        """
        settings = get_settings()
        actor_role = actor.role_enum
        if actor.project_id != project_id or not role_policy.can_manage_members(actor_role):
            raise ForbiddenError("Only project owners and admins can invite members")
        if len(rows) > settings.invite_batch_max_rows:
            raise ForbiddenError(
                f"At most {settings.invite_batch_max_rows} invites can be sent at once"
            )

        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        inviter = await self.user_repo.get_by_id(actor.user_id)
        project_name = project.name
        inviter_name = inviter.display_name if inviter else "A team member"
        inviter_id = actor.user_id

        batch = BatchInviteResult()
        for row in rows:
            try:
                created = await self._create_one(project_id, actor_role, inviter_id, row)
            except DomainError as e:
                await self.session.rollback()
                batch.errors.append(
                    BatchInviteError(email=row.email, error=e.code, message=e.message)
                )
                logger.info(
                    "Invite row rejected",
                    project_id=str(project_id),
                    error=e.code,
                )
                continue
            except Exception as e:
                await self.session.rollback()
                logger.error("Failed to create invite", project_id=str(project_id), error=str(e))
                raise

            batch.results.append(created)
            send_invite_email(
                to=created.invite.email,
                token=created.token,
                project_name=project_name,
                inviter_name=inviter_name,
                role=created.invite.role,
                expires_at=created.invite.expires_at,
                message=created.invite.message,
            )

        logger.info(
            "Invite batch processed",
            project_id=str(project_id),
            created=len(batch.results),
            failed=len(batch.errors),
        )
        return batch

    async def _create_one(
        self,
        project_id: UUID,
        actor_role: ProjectRole,
        inviter_id: UUID,
        row: InviteRowCreate,
    ) -> CreatedInvite:
        email = normalize_email(row.email)

        if not role_policy.can_invite_with_role(actor_role, row.role):
            raise ForbiddenError(f"You cannot invite members as {row.role.value}")

        existing_user = await self.user_repo.get_by_email(email)
        if existing_user and await self.membership_repo.is_member(project_id, existing_user.id):
            raise AlreadyMemberError(f"{email} is already a member of this project")

        invite, token = await self.invite_repo.create(
            project_id=project_id,
            email=email,
            role=row.role,
            invited_by_user_id=inviter_id,
            message=row.message,
        )
        await self.session.commit()
        # Keep the committed row readable after a later row rolls back
        self.session.expunge(invite)

        logger.info(
            "Invite created",
            project_id=str(project_id),
            invite_id=str(invite.id),
            role=invite.role,
        )
        return CreatedInvite(invite=invite, token=token)

    async def get_invite_info(self, token: str) -> InvitePreview:
        """Resolve a token to what the invitee may see before responding.

        Raises NotFoundError or ExpiredError.
        """
        invite = await self.invite_repo.lookup(token)
        project = await self.project_repo.get_by_id(invite.project_id)
        if project is None:
            raise NotFoundError("Invite not found")
        inviter = None
        if invite.invited_by_user_id is not None:
            inviter = await self.user_repo.get_by_id(invite.invited_by_user_id)
        return InvitePreview(
            invite=invite,
            project=project,
            inviter=inviter,
            status=invite.effective_status,
        )

    async def accept(self, token: str, user_id: UUID, email: str) -> AcceptResult:
        """Join the invite's project as the authenticated user.

        Accepting an invite that this user already accepted returns the
        existing membership instead of failing. An OWNER invite transfers
        ownership: the current owner becomes ADMIN in the same transaction.

        Raises:
            NotFoundError: Unknown token
            ConflictError: The owner changed while an OWNER invite was accepted
            ExpiredError: The invite lapsed
            InvalidStateError: The invite was declined, cancelled or taken by
                someone else
            EmailMismatchError: Only when invite_require_email_match is set
        """
        settings = get_settings()
        invite = await self.invite_repo.lookup(token)
        project_id = invite.project_id
        invite_id = invite.id

        email_mismatch = invite.email != email.lower().strip()
        if email_mismatch:
            if settings.invite_require_email_match:
                raise EmailMismatchError()
            logger.warning(
                "Invite accepted with different email",
                invite_id=str(invite_id),
                user_id=str(user_id),
            )

        try:
            try:
                invite = await self.invite_repo.mark_accepted(token, user_id)
            except InvalidStateError:
                member = await self.membership_repo.get_membership(project_id, user_id)
                if invite.status == InviteStatus.ACCEPTED.value and member is not None:
                    logger.info(
                        "Invite already accepted",
                        invite_id=str(invite_id),
                        user_id=str(user_id),
                    )
                    return await self._accept_result(invite, member, email_mismatch)
                raise

            if invite.role_enum is ProjectRole.OWNER:
                member = await self.membership_service.assume_ownership(project_id, user_id)
            else:
                member = await self.membership_repo.get_membership(project_id, user_id)
                if member is None:
                    member = await self.membership_service.add_member(
                        project_id, user_id, invite.role_enum, commit=False
                    )
            await self.session.commit()

        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to accept invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info(
            "Invite accepted",
            invite_id=str(invite_id),
            project_id=str(project_id),
            user_id=str(user_id),
            role=member.role,
        )
        return await self._accept_result(invite, member, email_mismatch)

    async def _accept_result(
        self, invite: ProjectInvite, member: ProjectMember, email_mismatch: bool
    ) -> AcceptResult:
        project = await self.project_repo.get_by_id(invite.project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return AcceptResult(
            project=project,
            member=member,
            invite=invite,
            email_mismatch=email_mismatch,
        )

    async def decline(self, token: str) -> ProjectInvite:
        """Decline an invite. The token alone is sufficient."""
        try:
            invite = await self.invite_repo.mark_declined(token)
            await self.session.commit()
        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to decline invite", error=str(e))
            raise

        logger.info("Invite declined", invite_id=str(invite.id))
        return invite

    async def get_actor_for_invite(self, invite_id: UUID, user_id: UUID) -> ProjectMember:
        """Resolve the caller's membership in the project an invite belongs to.

        Raises NotFoundError when the invite is unknown or the caller is not a
        member, so invite ids cannot be probed from outside the project.
        """
        invite = await self.invite_repo.get_by_id(invite_id)
        if invite is None:
            raise NotFoundError("Invite not found")
        actor = await self.membership_repo.get_membership(invite.project_id, user_id)
        if actor is None:
            raise NotFoundError("Invite not found")
        return actor

    async def _get_managed_invite(
        self, invite_id: UUID, actor: ProjectMember
    ) -> ProjectInvite:
        if not role_policy.can_manage_members(actor.role_enum):
            raise ForbiddenError("Only project owners and admins can manage invites")
        invite = await self.invite_repo.get_by_id(invite_id)
        if invite is None or invite.project_id != actor.project_id:
            raise NotFoundError("Invite not found")
        return invite

    async def cancel(self, invite_id: UUID, actor: ProjectMember) -> ProjectInvite:
        """Cancel a pending invite."""
        try:
            await self._get_managed_invite(invite_id, actor)
            invite = await self.invite_repo.mark_cancelled(invite_id)
            await self.session.commit()
        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to cancel invite", invite_id=str(invite_id), error=str(e))
            raise

        logger.info("Invite cancelled", invite_id=str(invite_id))
        return invite

    async def resend(self, invite_id: UUID, actor: ProjectMember) -> tuple[ProjectInvite, str]:
        """Re-issue a pending invite with a fresh token and deadline.

        Returns (invite, plaintext_token). The previous link stops working.
        """
        actor_role = actor.role_enum
        try:
            invite = await self._get_managed_invite(invite_id, actor)
            if not role_policy.can_invite_with_role(actor_role, invite.role_enum):
                raise ForbiddenError("Only the project owner can resend owner invites")
            invite, token = await self.invite_repo.resend(invite_id)
            await self.session.commit()
        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to resend invite", invite_id=str(invite_id), error=str(e))
            raise

        project = await self.project_repo.get_by_id(invite.project_id)
        inviter = await self.user_repo.get_by_id(actor.user_id)
        send_invite_email(
            to=invite.email,
            token=token,
            project_name=project.name if project else "a project",
            inviter_name=inviter.display_name if inviter else "A team member",
            role=invite.role,
            expires_at=invite.expires_at,
            message=invite.message,
        )

        logger.info("Invite resent", invite_id=str(invite_id))
        return invite, token

    async def list_project_invites(
        self,
        project_id: UUID,
        actor: ProjectMember,
        status: InviteStatus | None = None,
    ) -> list[ProjectInvite]:
        """List a project's invites (managers only).

        Filtering by PENDING returns only live invites; lapsed ones are
        reported under EXPIRED.
        """
        if actor.project_id != project_id or not role_policy.can_manage_members(
            actor.role_enum
        ):
            raise ForbiddenError("Only project owners and admins can view invites")

        if status is None:
            return await self.invite_repo.list_by_project(project_id)
        if status in (InviteStatus.PENDING, InviteStatus.EXPIRED):
            candidates = await self.invite_repo.list_by_project(project_id)
            return [i for i in candidates if i.effective_status is status]
        return await self.invite_repo.list_by_project(project_id, status)
