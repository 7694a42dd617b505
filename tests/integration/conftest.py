"""Integration test fixtures: an in-memory SQLite database per test.

Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from src.taskrelay import models  # noqa: F401 - registers tables on the metadata
from src.taskrelay.api.dependencies.db import get_db_session
from src.taskrelay.core.db import create_engine_from_url, get_session
from src.taskrelay.main import create_app
from src.taskrelay.repositories import (
    MembershipRepository,
    ProjectInviteRepository,
    ProjectRepository,
    UserRepository,
)
from src.taskrelay.services import (
    AuthBridge,
    AuthService,
    InviteService,
    MembershipService,
    ProjectService,
)
from tests.helpers import Team, create_team


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with all tables."""
    test_engine = create_engine_from_url(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session configured like the application's.

    Services commit and roll back on it themselves. A rollback expires every
    loaded object, so tests capture ids before exercising an error path.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
async def team(db_session: AsyncSession) -> Team:
    return await create_team(db_session)


@pytest.fixture
def invite_repo(db_session: AsyncSession) -> ProjectInviteRepository:
    return ProjectInviteRepository(db_session)


@pytest.fixture
def membership_repo(db_session: AsyncSession) -> MembershipRepository:
    return MembershipRepository(db_session)


@pytest.fixture
def membership_service(db_session: AsyncSession) -> MembershipService:
    return MembershipService(
        MembershipRepository(db_session), UserRepository(db_session), db_session
    )


@pytest.fixture
def invite_service(
    db_session: AsyncSession, membership_service: MembershipService
) -> InviteService:
    return InviteService(
        ProjectInviteRepository(db_session),
        ProjectRepository(db_session),
        UserRepository(db_session),
        MembershipRepository(db_session),
        membership_service,
        db_session,
    )


@pytest.fixture
def auth_bridge(db_session: AsyncSession, invite_service: InviteService) -> AuthBridge:
    return AuthBridge(AuthService(UserRepository(db_session), db_session), invite_service)


@pytest.fixture
def project_service(db_session: AsyncSession) -> ProjectService:
    return ProjectService(
        ProjectRepository(db_session), MembershipRepository(db_session), db_session
    )


@pytest.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, with requests bound to the test database."""
    app = create_app()

    async def _get_test_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
