"""Authentication endpoints - login and signup with optional invite auto-accept."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from starlette.requests import Request

from src.taskrelay.api.dependencies import AuthBridgeDep
from src.taskrelay.core.rate_limit import AUTH_RATE_LIMIT, limiter
from src.taskrelay.schemas.auth import AuthResponse, LoginRequest, SignupRequest
from src.taskrelay.schemas.project import ProjectRead
from src.taskrelay.services.auth_bridge import AuthResult

router = APIRouter(prefix="/auth", tags=["auth"])

InviteTokenQuery = Annotated[
    str | None,
    Query(
        alias="inviteToken",
        description="Invite to accept once the caller is authenticated",
    ),
]


def _to_response(result: AuthResult) -> AuthResponse:
    project = result.auto_accepted_project
    return AuthResponse(
        access_token=result.access_token,
        user_id=result.user_id,
        auto_accepted_project=ProjectRead.model_validate(project) if project else None,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        200: {"description": "Authenticated; autoAcceptedProject set if the invite was used"},
        401: {"description": "Invalid credentials"},
    },
)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    bridge: AuthBridgeDep,
    invite_token: InviteTokenQuery = None,
) -> AuthResponse:
    """Authenticate and, if an invite token is given, try to join its project.

    A bad or stale invite never fails the login.
    """
    result = await bridge.login(login_data.email, login_data.password, invite_token)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return _to_response(result)


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created"},
        409: {"description": "Email already registered"},
        422: {"description": "Validation error (e.g. weak password)"},
    },
)
@limiter.limit(AUTH_RATE_LIMIT)
async def signup(
    request: Request,
    signup_data: SignupRequest,
    bridge: AuthBridgeDep,
    invite_token: InviteTokenQuery = None,
) -> AuthResponse:
    """Create an account and, if an invite token is given, try to join its project."""
    result = await bridge.signup(
        signup_data.email,
        signup_data.password,
        signup_data.full_name,
        invite_token,
    )
    return _to_response(result)
