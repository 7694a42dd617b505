"""Login and signup with optional invite auto-accept."""

from dataclasses import dataclass
from uuid import UUID

from src.taskrelay.core.exceptions import DomainError
from src.taskrelay.core.logging import get_logger
from src.taskrelay.models import Project
from src.taskrelay.services.auth_service import AuthService
from src.taskrelay.services.invite_service import InviteService

logger = get_logger(__name__)


@dataclass
class AuthResult:
    access_token: str
    user_id: UUID
    auto_accepted_project: Project | None = None


class AuthBridge:
    """Runs the auth flow, then tries to accept an invite carried along with it.

    Invite problems never fail a login or signup: the user is signed in
    either way and simply does not join the project.
    """

    def __init__(self, auth_service: AuthService, invite_service: InviteService):
        self.auth_service = auth_service
        self.invite_service = invite_service

    async def login(
        self, email: str, password: str, invite_token: str | None = None
    ) -> AuthResult | None:
        """Returns None if the credentials are rejected."""
        user = await self.auth_service.authenticate(email, password)
        if user is None:
            return None
        access_token = self.auth_service.issue_access_token(user)
        return await self._finish(user.id, user.email, access_token, invite_token)

    async def signup(
        self,
        email: str,
        password: str,
        full_name: str,
        invite_token: str | None = None,
    ) -> AuthResult:
        user = await self.auth_service.signup(email, password, full_name)
        access_token = self.auth_service.issue_access_token(user)
        return await self._finish(user.id, user.email, access_token, invite_token)

    async def _finish(
        self,
        user_id: UUID,
        email: str,
        access_token: str,
        invite_token: str | None,
    ) -> AuthResult:
        result = AuthResult(access_token=access_token, user_id=user_id)
        if not invite_token:
            return result

        try:
            accepted = await self.invite_service.accept(invite_token, user_id, email)
        except DomainError as e:
            logger.warning(
                "Invite auto-accept skipped",
                user_id=str(user_id),
                error=e.code,
                reason=e.message,
            )
            return result
        except Exception as e:
            logger.error("Invite auto-accept failed", user_id=str(user_id), error=str(e))
            return result

        result.auto_accepted_project = accepted.project
        return result
