"""Repository for ProjectMember entity."""

from uuid import UUID

from sqlalchemy import delete, func, update
from sqlmodel import col, select

from src.taskrelay.models import ProjectMember, ProjectRole
from src.taskrelay.models.base import utc_now
from src.taskrelay.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[ProjectMember]):
    """Repository for project memberships.

    Mutations are conditional on the member's previous role and report
    whether a row was affected, so callers can detect lost updates.
    """

    model = ProjectMember

    async def get_membership(self, project_id: UUID, user_id: UUID) -> ProjectMember | None:
        """Get a user's membership in a project."""
        result = await self.session.execute(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def is_member(self, project_id: UUID, user_id: UUID) -> bool:
        membership = await self.get_membership(project_id, user_id)
        return membership is not None

    async def list_by_project(self, project_id: UUID) -> list[ProjectMember]:
        """List members of a project, oldest first."""
        result = await self.session.execute(
            select(ProjectMember)
            .where(ProjectMember.project_id == project_id)
            .order_by(col(ProjectMember.created_at).asc())
        )
        return list(result.scalars().all())

    async def get_owner(self, project_id: UUID) -> ProjectMember | None:
        result = await self.session.execute(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.role == ProjectRole.OWNER.value,
            )
        )
        return result.scalars().first()

    async def count_by_role(self, project_id: UUID, role: ProjectRole) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(ProjectMember)
            .where(
                ProjectMember.project_id == project_id,
                ProjectMember.role == role.value,
            )
        )
        return int(result.scalar_one())

    def create_membership(
        self,
        project_id: UUID,
        user_id: UUID,
        role: ProjectRole = ProjectRole.MEMBER,
    ) -> ProjectMember:
        """Create a new membership (add to session, no commit)."""
        membership = ProjectMember(
            project_id=project_id,
            user_id=user_id,
            role=role.value,
        )
        self.session.add(membership)
        return membership

    async def update_role_if(
        self,
        member_id: UUID,
        expected_role: ProjectRole,
        new_role: ProjectRole,
    ) -> bool:
        """Set a member's role only if it still holds ``expected_role``."""
        result = await self.session.execute(
            update(ProjectMember)
            .where(
                col(ProjectMember.id) == member_id,
                col(ProjectMember.role) == expected_role.value,
            )
            .values(role=new_role.value, updated_at=utc_now())
        )
        return (result.rowcount or 0) == 1  # type: ignore[attr-defined]

    async def delete_if(self, member_id: UUID, expected_role: ProjectRole) -> bool:
        """Delete a member only if it still holds ``expected_role``."""
        result = await self.session.execute(
            delete(ProjectMember).where(
                col(ProjectMember.id) == member_id,
                col(ProjectMember.role) == expected_role.value,
            )
        )
        return (result.rowcount or 0) == 1  # type: ignore[attr-defined]
