"""Concurrent ownership transfers and invite accepts on separate sessions.

Each attempt gets its own session and connection on a file-backed SQLite
database. Transactions start with BEGIN IMMEDIATE, so writers queue on the
database lock instead of failing with "database is locked".
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlmodel import SQLModel

from src.taskrelay.core.db import create_engine_from_url, get_session
from src.taskrelay.core.exceptions import ConflictError, ForbiddenError
from src.taskrelay.models import InviteStatus, ProjectMember, ProjectRole
from src.taskrelay.repositories import (
    MembershipRepository,
    ProjectInviteRepository,
    ProjectRepository,
    UserRepository,
)
from src.taskrelay.schemas import InviteRowCreate
from src.taskrelay.services import InviteService, MembershipService
from tests.factories import ProjectMemberFactory, UserFactory
from tests.helpers import Team, create_team, create_user

pytestmark = pytest.mark.integration

CONTENDERS = 100


@pytest.fixture
async def shared_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """A database file that every session opens its own connection to."""
    engine = create_engine_from_url(
        f"sqlite+aiosqlite:///{tmp_path / 'shared.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _manual_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
async def seed(shared_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session used to set up data and to check the outcome."""
    async with get_session(shared_engine) as session:
        yield session


def membership_service(session: AsyncSession) -> MembershipService:
    return MembershipService(MembershipRepository(session), UserRepository(session), session)


def invite_service(session: AsyncSession) -> InviteService:
    return InviteService(
        ProjectInviteRepository(session),
        ProjectRepository(session),
        UserRepository(session),
        MembershipRepository(session),
        membership_service(session),
        session,
    )


async def add_contenders(session: AsyncSession, team: Team) -> list[ProjectMember]:
    users = [UserFactory.build() for _ in range(CONTENDERS)]
    session.add_all(users)
    await session.flush()
    members = [
        ProjectMemberFactory.build(
            project_id=team.project.id, user_id=user.id, role=ProjectRole.MEMBER.value
        )
        for user in users
    ]
    session.add_all(members)
    await session.commit()
    return members


async def test_concurrent_transfers_leave_one_owner(shared_engine, seed):
    team = await create_team(seed)
    project_id = team.project.id
    previous_owner_id = team.owner_member.id
    targets = await add_contenders(seed, team)
    await seed.commit()

    async def transfer_to(target: ProjectMember) -> Exception | None:
        async with get_session(shared_engine) as session:
            try:
                await membership_service(session).change_role(
                    team.owner_member, target, ProjectRole.OWNER
                )
            except (ConflictError, ForbiddenError) as e:
                return e
            return None

    outcomes = await asyncio.gather(*(transfer_to(t) for t in targets))

    winners = [t for t, outcome in zip(targets, outcomes, strict=True) if outcome is None]
    assert len(winners) == 1
    assert all(isinstance(o, ConflictError | ForbiddenError) for o in outcomes if o is not None)

    repo = MembershipRepository(seed)
    assert await repo.count_by_role(project_id, ProjectRole.OWNER) == 1
    assert (await repo.reload(winners[0].id)).role_enum is ProjectRole.OWNER
    assert (await repo.reload(previous_owner_id)).role_enum is ProjectRole.ADMIN


async def test_concurrent_accepts_by_same_user_add_one_member(shared_engine, seed):
    team = await create_team(seed)
    project_id = team.project.id
    batch = await invite_service(seed).create_batch(
        project_id, team.owner_member, [InviteRowCreate(email="bob@example.com")]
    )
    token = batch.results[0].token
    invite_id = batch.results[0].invite.id
    bob = await create_user(seed, email="bob@example.com")
    bob_id = bob.id
    await seed.commit()

    async def accept():
        async with get_session(shared_engine) as session:
            result = await invite_service(session).accept(token, bob_id, "bob@example.com")
            return result.member.id

    first, second = await asyncio.gather(accept(), accept())

    assert first == second
    members = await MembershipRepository(seed).list_by_project(project_id)
    assert len([m for m in members if m.user_id == bob_id]) == 1
    invite = await ProjectInviteRepository(seed).reload(invite_id)
    assert invite.status == InviteStatus.ACCEPTED.value
    assert invite.accepted_by_user_id == bob_id


async def test_concurrent_owner_invite_accepts_leave_one_owner(shared_engine, seed):
    team = await create_team(seed)
    project_id = team.project.id
    batch = await invite_service(seed).create_batch(
        project_id,
        team.owner_member,
        [InviteRowCreate(email=f"heir{i}@example.com", role=ProjectRole.OWNER) for i in range(5)],
    )
    assert not batch.errors
    heirs = [
        (created.token, await create_user(seed, email=created.invite.email))
        for created in batch.results
    ]
    claims = [(token, heir.id, heir.email) for token, heir in heirs]
    await seed.commit()

    async def accept(token, user_id, email):
        async with get_session(shared_engine) as session:
            return await invite_service(session).accept(token, user_id, email)

    results = await asyncio.gather(*(accept(*claim) for claim in claims))

    assert all(r.member.role_enum is ProjectRole.OWNER for r in results)
    assert await MembershipRepository(seed).count_by_role(project_id, ProjectRole.OWNER) == 1
