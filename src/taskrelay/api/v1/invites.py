"""Invite endpoints addressed by token (invitee) or by id (project managers)."""

from uuid import UUID

from fastapi import APIRouter, status
from starlette.requests import Request

from src.taskrelay.api.dependencies import CurrentUser, InviteServiceDep
from src.taskrelay.core.notifications import build_invite_url
from src.taskrelay.core.rate_limit import INVITE_TOKEN_RATE_LIMIT, limiter
from src.taskrelay.schemas.invite import (
    AcceptInviteResponse,
    CreatedInviteRead,
    InvitePreviewResponse,
    InviteRead,
)
from src.taskrelay.schemas.member import MemberRead
from src.taskrelay.schemas.project import ProjectRead, ProjectSummary
from src.taskrelay.schemas.user import UserSummary
from src.taskrelay.services.invite_service import EMAIL_MISMATCH_WARNING

router = APIRouter(prefix="/invites", tags=["invites"])


# =============================================================================
# Token endpoints (the token is the capability)
# =============================================================================


@router.get(
    "/{token}",
    response_model=InvitePreviewResponse,
    summary="Preview invite",
    responses={
        404: {"description": "Unknown token"},
        410: {"description": "Invite expired"},
    },
)
@limiter.limit(INVITE_TOKEN_RATE_LIMIT)
async def preview_invite(
    request: Request,
    token: str,
    invite_service: InviteServiceDep,
) -> InvitePreviewResponse:
    """Show who invited whom to what, before the invitee responds."""
    preview = await invite_service.get_invite_info(token)
    invite = preview.invite
    return InvitePreviewResponse(
        id=invite.id,
        email=invite.email,
        role=invite.role_enum,
        status=preview.status,
        message=invite.message,
        expires_at=invite.expires_at,
        project=ProjectSummary.model_validate(preview.project),
        inviter=UserSummary.model_validate(preview.inviter) if preview.inviter else None,
    )


@router.post(
    "/{token}/accept",
    response_model=AcceptInviteResponse,
    summary="Accept invite",
    responses={
        403: {"description": "Email mismatch (only when strict matching is enabled)"},
        404: {"description": "Unknown token"},
        409: {"description": "Invite already declined, cancelled or used"},
        410: {"description": "Invite expired"},
    },
)
@limiter.limit(INVITE_TOKEN_RATE_LIMIT)
async def accept_invite(
    request: Request,
    token: str,
    user: CurrentUser,
    invite_service: InviteServiceDep,
) -> AcceptInviteResponse:
    """Join the project as the signed-in user. Repeating the call is harmless."""
    result = await invite_service.accept(token, user.id, user.email)
    return AcceptInviteResponse(
        project=ProjectRead.model_validate(result.project),
        member=MemberRead.model_validate(result.member),
        warning=EMAIL_MISMATCH_WARNING if result.email_mismatch else None,
    )


@router.post(
    "/{token}/decline",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Decline invite",
    responses={
        404: {"description": "Unknown token"},
        409: {"description": "Invite no longer pending"},
        410: {"description": "Invite expired"},
    },
)
@limiter.limit(INVITE_TOKEN_RATE_LIMIT)
async def decline_invite(
    request: Request,
    token: str,
    invite_service: InviteServiceDep,
) -> None:
    await invite_service.decline(token)


# =============================================================================
# Manager endpoints (OWNER/ADMIN of the invite's project)
# =============================================================================


@router.post(
    "/{invite_id}/resend",
    response_model=CreatedInviteRead,
    summary="Resend invite",
    description="Issue a fresh link and deadline. The previous link stops working.",
    responses={
        403: {"description": "Not an owner or admin"},
        404: {"description": "Invite not found"},
        409: {"description": "Invite no longer pending"},
    },
)
async def resend_invite(
    invite_id: UUID,
    user: CurrentUser,
    invite_service: InviteServiceDep,
) -> CreatedInviteRead:
    actor = await invite_service.get_actor_for_invite(invite_id, user.id)
    invite, token = await invite_service.resend(invite_id, actor)
    return CreatedInviteRead(
        invite=InviteRead.from_invite(invite),
        invite_url=build_invite_url(token),
    )


async def _cancel(invite_id: UUID, user_id: UUID, invite_service: InviteServiceDep) -> None:
    actor = await invite_service.get_actor_for_invite(invite_id, user_id)
    await invite_service.cancel(invite_id, actor)


_CANCEL_RESPONSES: dict[int | str, dict[str, str]] = {
    403: {"description": "Not an owner or admin"},
    404: {"description": "Invite not found"},
    409: {"description": "Invite no longer pending"},
    410: {"description": "Invite expired"},
}


@router.post(
    "/{invite_id}/cancel",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel invite",
    responses=_CANCEL_RESPONSES,
)
async def cancel_invite(
    invite_id: UUID,
    user: CurrentUser,
    invite_service: InviteServiceDep,
) -> None:
    await _cancel(invite_id, user.id, invite_service)


@router.delete(
    "/{invite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel invite",
    responses=_CANCEL_RESPONSES,
)
async def delete_invite(
    invite_id: UUID,
    user: CurrentUser,
    invite_service: InviteServiceDep,
) -> None:
    await _cancel(invite_id, user.id, invite_service)
