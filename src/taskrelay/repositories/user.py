"""Repository for User entity."""

from collections.abc import Iterable
from uuid import UUID

from sqlmodel import col, select

from src.taskrelay.models import User
from src.taskrelay.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address (case-insensitive)."""
        result = await self.session.execute(
            select(User).where(User.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        user = await self.get_by_email(email)
        return user is not None

    async def get_many(self, ids: Iterable[UUID]) -> dict[UUID, User]:
        """Fetch several users at once, keyed by id."""
        id_list = list(set(ids))
        if not id_list:
            return {}
        result = await self.session.execute(select(User).where(col(User.id).in_(id_list)))
        return {user.id: user for user in result.scalars().all()}
