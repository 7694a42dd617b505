"""Project membership service - role changes, removal and ownership transfer."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.taskrelay.core.exceptions import (
    AlreadyMemberError,
    ConflictError,
    DomainError,
    ForbiddenError,
    LastOwnerError,
    NotFoundError,
)
from src.taskrelay.core.logging import get_logger
from src.taskrelay.models import ProjectMember, ProjectRole, User
from src.taskrelay.repositories import MembershipRepository, UserRepository
from src.taskrelay.services import role_policy

logger = get_logger(__name__)


class MembershipService:
    """Enforces the role hierarchy on membership mutations.

    Every write is conditional on the role the caller last observed, so a
    concurrent change between read and write surfaces as ConflictError
    instead of silently overwriting it.
    """

    def __init__(
        self,
        membership_repo: MembershipRepository,
        user_repo: UserRepository,
        session: AsyncSession,
    ):
        self.membership_repo = membership_repo
        self.user_repo = user_repo
        self.session = session

    async def get_actor(self, project_id: UUID, user_id: UUID) -> ProjectMember:
        """Get the calling user's membership. Raises ForbiddenError for non-members."""
        membership = await self.membership_repo.get_membership(project_id, user_id)
        if membership is None:
            raise ForbiddenError("You are not a member of this project")
        return membership

    async def get_member(self, project_id: UUID, member_id: UUID) -> ProjectMember:
        member = await self.membership_repo.get_by_id(member_id)
        if member is None or member.project_id != project_id:
            raise NotFoundError("Member not found")
        return member

    async def list_members(self, project_id: UUID) -> list[tuple[ProjectMember, User]]:
        """List members with their user records, oldest first."""
        members = await self.membership_repo.list_by_project(project_id)
        users = await self.user_repo.get_many(m.user_id for m in members)
        return [(m, users[m.user_id]) for m in members if m.user_id in users]

    async def add_member(
        self,
        project_id: UUID,
        user_id: UUID,
        role: ProjectRole = ProjectRole.MEMBER,
        *,
        commit: bool = True,
    ) -> ProjectMember:
        """Add a user to a project.

        With commit=False the insert is only flushed, leaving the caller's
        transaction open.

        Raises:
            AlreadyMemberError: If the user already belongs to the project
        """
        if await self.membership_repo.is_member(project_id, user_id):
            raise AlreadyMemberError()

        member = self.membership_repo.create_membership(project_id, user_id, role)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if commit:
                await self.session.rollback()
            raise AlreadyMemberError() from e

        if commit:
            await self.session.commit()

        logger.info(
            "Member added",
            project_id=str(project_id),
            user_id=str(user_id),
            role=role.value,
        )
        return member

    async def change_role(
        self,
        actor: ProjectMember,
        target: ProjectMember,
        new_role: ProjectRole,
    ) -> ProjectMember:
        """Change the target member's role on behalf of actor.

        Promoting someone else to OWNER transfers ownership: the acting owner
        becomes ADMIN in the same transaction.

        Raises:
            ForbiddenError: The actor may not make this change
            LastOwnerError: The owner tried to step down without a transfer
            ConflictError: The target (or actor) changed role concurrently
        """
        if actor.project_id != target.project_id:
            raise NotFoundError("Member not found")

        actor_role = actor.role_enum
        current_role = target.role_enum
        target_id = target.id
        project_id = target.project_id

        try:
            if new_role is ProjectRole.OWNER and current_role is not ProjectRole.OWNER:
                await self._transfer_ownership(actor, target)
            else:
                if not role_policy.can_change_role(
                    actor_role, current_role, actor.id == target.id
                ):
                    raise ForbiddenError("You cannot change this member's role")
                if new_role is current_role:
                    return target
                if current_role is ProjectRole.OWNER:
                    raise LastOwnerError()
                if new_role not in role_policy.available_target_roles(
                    actor_role, current_role
                ):
                    raise ForbiddenError(f"You cannot assign the {new_role.value} role")
                if not await self.membership_repo.update_role_if(
                    target_id, current_role, new_role
                ):
                    raise ConflictError()

            await self.session.commit()

        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to change member role", member_id=str(target_id), error=str(e))
            raise

        logger.info(
            "Member role changed",
            project_id=str(project_id),
            member_id=str(target_id),
            from_role=current_role.value,
            to_role=new_role.value,
        )
        updated = await self.membership_repo.reload(target_id)
        if updated is None:
            raise NotFoundError("Member not found")
        return updated

    async def _transfer_ownership(self, actor: ProjectMember, target: ProjectMember) -> None:
        """Demote the acting owner and promote the target. Caller commits.

        The demotion runs first: of several concurrent transfers only the one
        whose demotion matches the OWNER row proceeds.
        """
        if actor.role_enum is not ProjectRole.OWNER:
            raise ForbiddenError("Only the project owner can transfer ownership")

        demoted = await self.membership_repo.update_role_if(
            actor.id, ProjectRole.OWNER, ProjectRole.ADMIN
        )
        if not demoted:
            raise ConflictError()

        promoted = await self.membership_repo.update_role_if(
            target.id, target.role_enum, ProjectRole.OWNER
        )
        if not promoted:
            raise ConflictError()

        logger.info(
            "Ownership transferred",
            project_id=str(target.project_id),
            from_member_id=str(actor.id),
            to_member_id=str(target.id),
        )

    async def assume_ownership(self, project_id: UUID, user_id: UUID) -> ProjectMember:
        """Make user_id the project owner, demoting the current owner to ADMIN.

        Adds the user if they are not yet a member. Caller commits.

        Raises:
            ConflictError: The owner changed concurrently
        """
        member = await self.membership_repo.get_membership(project_id, user_id)
        if member is not None and member.role_enum is ProjectRole.OWNER:
            return member

        owner = await self.membership_repo.get_owner(project_id)
        if owner is not None:
            owner_id = owner.id
            if not await self.membership_repo.update_role_if(
                owner_id, ProjectRole.OWNER, ProjectRole.ADMIN
            ):
                raise ConflictError()
        else:
            owner_id = None

        if member is None:
            member = await self.add_member(project_id, user_id, ProjectRole.OWNER, commit=False)
        else:
            if not await self.membership_repo.update_role_if(
                member.id, member.role_enum, ProjectRole.OWNER
            ):
                raise ConflictError()
            reloaded = await self.membership_repo.reload(member.id)
            if reloaded is None:
                raise ConflictError()
            member = reloaded

        logger.info(
            "Ownership transferred",
            project_id=str(project_id),
            from_member_id=str(owner_id) if owner_id else None,
            to_member_id=str(member.id),
        )
        return member

    async def remove_member(self, actor: ProjectMember, target: ProjectMember) -> None:
        """Remove target from the project, or leave it when actor is target.

        Raises:
            LastOwnerError: The target is the owner
            ForbiddenError: The actor may not remove this member
            ConflictError: The target's role changed concurrently
        """
        if actor.project_id != target.project_id:
            raise NotFoundError("Member not found")

        target_role = target.role_enum
        target_id = target.id
        project_id = target.project_id

        try:
            if target_role is ProjectRole.OWNER:
                raise LastOwnerError()
            if not role_policy.can_remove(actor.role_enum, target_role, actor.id == target.id):
                raise ForbiddenError("You cannot remove this member")
            if not await self.membership_repo.delete_if(target_id, target_role):
                raise ConflictError()
            await self.session.commit()

        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to remove member", member_id=str(target_id), error=str(e))
            raise

        logger.info("Member removed", project_id=str(project_id), member_id=str(target_id))
