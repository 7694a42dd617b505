from src.taskrelay.schemas.auth import AuthResponse, LoginRequest, SignupRequest
from src.taskrelay.schemas.invite import (
    AcceptInviteResponse,
    BatchInviteErrorRead,
    BatchInviteRequest,
    BatchInviteResponse,
    CreatedInviteRead,
    InvitePreviewResponse,
    InviteRead,
    InviteRowCreate,
)
from src.taskrelay.schemas.member import MemberRead, MemberWithUser, RoleChangeRequest
from src.taskrelay.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectSummary,
    ProjectWithRole,
)
from src.taskrelay.schemas.user import UserRead, UserSummary

__all__ = [
    # Auth
    "AuthResponse",
    "LoginRequest",
    "SignupRequest",
    # Invite
    "AcceptInviteResponse",
    "BatchInviteErrorRead",
    "BatchInviteRequest",
    "BatchInviteResponse",
    "CreatedInviteRead",
    "InvitePreviewResponse",
    "InviteRead",
    "InviteRowCreate",
    # Member
    "MemberRead",
    "MemberWithUser",
    "RoleChangeRequest",
    # Project
    "ProjectCreate",
    "ProjectRead",
    "ProjectSummary",
    "ProjectWithRole",
    # User
    "UserRead",
    "UserSummary",
]
