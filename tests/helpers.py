"""Test helper functions for common data creation patterns."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.taskrelay.core.security import create_access_token
from src.taskrelay.models import Project, ProjectMember, ProjectRole, User
from tests.factories import ProjectFactory, ProjectMemberFactory, UserFactory


async def create_user(session: AsyncSession, **user_kwargs) -> User:
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def add_member(
    session: AsyncSession,
    project: Project,
    role: ProjectRole = ProjectRole.MEMBER,
    **user_kwargs,
) -> tuple[User, ProjectMember]:
    """Create a user and their membership in a project.

    Returns:
        Tuple of (user, membership)
    """
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.flush()

    membership = ProjectMemberFactory.build(
        project_id=project.id,
        user_id=user.id,
        role=role.value,
    )
    session.add(membership)
    await session.commit()
    return user, membership


@dataclass
class Team:
    """A project with one member per role."""

    project: Project
    owner: User
    owner_member: ProjectMember
    admin: User
    admin_member: ProjectMember
    member: User
    member_member: ProjectMember
    viewer: User
    viewer_member: ProjectMember


async def create_team(session: AsyncSession) -> Team:
    project = ProjectFactory.build(name="Apollo")
    session.add(project)
    await session.commit()

    owner, owner_member = await add_member(
        session, project, ProjectRole.OWNER, email="alice@example.com", full_name="Alice"
    )
    admin, admin_member = await add_member(
        session, project, ProjectRole.ADMIN, email="dana@example.com", full_name="Dana"
    )
    member, member_member = await add_member(
        session, project, ProjectRole.MEMBER, email="erin@example.com", full_name="Erin"
    )
    viewer, viewer_member = await add_member(
        session, project, ProjectRole.VIEWER, email="vic@example.com", full_name="Vic"
    )
    return Team(
        project=project,
        owner=owner,
        owner_member=owner_member,
        admin=admin,
        admin_member=admin_member,
        member=member,
        member_member=member_member,
        viewer=viewer,
        viewer_member=viewer_member,
    )


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}
