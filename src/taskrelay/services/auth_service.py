"""Authentication service - credential checks, signup and access tokens."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.taskrelay.core.exceptions import EmailAlreadyRegisteredError
from src.taskrelay.core.logging import get_logger
from src.taskrelay.core.security import (
    DUMMY_PASSWORD_HASH,
    create_access_token,
    hash_password,
    verify_password,
)
from src.taskrelay.models import User
from src.taskrelay.repositories import UserRepository

logger = get_logger(__name__)


class AuthService:
    """Identity boundary: establishes who the caller is, nothing more."""

    def __init__(self, user_repo: UserRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.session = session

    async def authenticate(self, email: str, password: str) -> User | None:
        """Check credentials. Returns None if authentication fails."""
        user = await self.user_repo.get_by_email(email)

        # Always verify so unknown emails cost the same as wrong passwords
        password_hash = user.hashed_password if user else DUMMY_PASSWORD_HASH
        password_valid = verify_password(password, password_hash)

        if user is None or not password_valid:
            return None
        if not user.is_active:
            return None
        return user

    async def signup(self, email: str, password: str, full_name: str) -> User:
        """Create a user account.

        Raises EmailAlreadyRegisteredError if the email is taken.
        """
        email = email.lower().strip()
        if await self.user_repo.exists_by_email(email):
            raise EmailAlreadyRegisteredError()

        user = User(
            email=email,
            hashed_password=hash_password(password),
            full_name=full_name,
        )
        self.user_repo.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise EmailAlreadyRegisteredError() from e

        logger.info("User signed up", user_id=str(user.id))
        return user

    @staticmethod
    def issue_access_token(user: User) -> str:
        return create_access_token(user.id, user.email)
