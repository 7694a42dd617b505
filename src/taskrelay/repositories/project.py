"""Repository for Project entity."""

from uuid import UUID

from sqlalchemy import delete
from sqlmodel import col, select

from src.taskrelay.models import Project, ProjectMember
from src.taskrelay.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project entity."""

    model = Project

    async def list_for_user(self, user_id: UUID) -> list[Project]:
        """List projects the user is a member of, newest first."""
        result = await self.session.execute(
            select(Project)
            .join(ProjectMember, col(ProjectMember.project_id) == col(Project.id))
            .where(ProjectMember.user_id == user_id)
            .order_by(col(Project.created_at).desc())
        )
        return list(result.scalars().all())

    async def delete_by_id(self, project_id: UUID) -> int:
        """Delete a project. Members and invites go with it (ON DELETE CASCADE)."""
        result = await self.session.execute(
            delete(Project).where(col(Project.id) == project_id)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
