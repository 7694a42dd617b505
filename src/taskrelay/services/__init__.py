from src.taskrelay.services.auth_bridge import AuthBridge, AuthResult
from src.taskrelay.services.auth_service import AuthService
from src.taskrelay.services.invite_service import InviteService
from src.taskrelay.services.membership_service import MembershipService
from src.taskrelay.services.project_service import ProjectService

__all__ = [
    "AuthBridge",
    "AuthResult",
    "AuthService",
    "InviteService",
    "MembershipService",
    "ProjectService",
]
