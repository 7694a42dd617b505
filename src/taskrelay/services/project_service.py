"""Project service - creation with an owner, listing and deletion."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.taskrelay.core.exceptions import DomainError, ForbiddenError, NotFoundError
from src.taskrelay.core.logging import get_logger
from src.taskrelay.models import Project, ProjectMember, ProjectRole
from src.taskrelay.repositories import MembershipRepository, ProjectRepository

logger = get_logger(__name__)


class ProjectService:
    def __init__(
        self,
        project_repo: ProjectRepository,
        membership_repo: MembershipRepository,
        session: AsyncSession,
    ):
        self.project_repo = project_repo
        self.membership_repo = membership_repo
        self.session = session

    async def create_project(
        self, user_id: UUID, name: str, description: str | None = None
    ) -> tuple[Project, ProjectMember]:
        """Create a project owned by user_id. Returns (project, owner_membership)."""
        try:
            project = Project(name=name, description=description)
            self.project_repo.add(project)
            await self.session.flush()
            owner = self.membership_repo.create_membership(project.id, user_id, ProjectRole.OWNER)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create project", error=str(e))
            raise

        logger.info("Project created", project_id=str(project.id), owner_id=str(user_id))
        return project, owner

    async def list_for_user(self, user_id: UUID) -> list[tuple[Project, ProjectRole]]:
        """Projects the user belongs to, with the user's role in each."""
        projects = await self.project_repo.list_for_user(user_id)
        result = []
        for project in projects:
            membership = await self.membership_repo.get_membership(project.id, user_id)
            if membership is not None:
                result.append((project, membership.role_enum))
        return result

    async def get_for_member(
        self, project_id: UUID, user_id: UUID
    ) -> tuple[Project, ProjectMember]:
        """Get a project the user belongs to.

        Raises NotFoundError for non-members so project ids are not probeable.
        """
        membership = await self.membership_repo.get_membership(project_id, user_id)
        project = await self.project_repo.get_by_id(project_id)
        if membership is None or project is None:
            raise NotFoundError("Project not found")
        return project, membership

    async def delete_project(self, project_id: UUID, actor: ProjectMember) -> None:
        """Delete a project with its members and invites. Owner only."""
        try:
            if actor.project_id != project_id or actor.role_enum is not ProjectRole.OWNER:
                raise ForbiddenError("Only the project owner can delete the project")
            deleted = await self.project_repo.delete_by_id(project_id)
            if deleted == 0:
                raise NotFoundError("Project not found")
            await self.session.commit()
        except DomainError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to delete project", project_id=str(project_id), error=str(e))
            raise

        logger.info("Project deleted", project_id=str(project_id))
