"""Invite email delivery using the Resend API."""

import html
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime

import resend

from src.taskrelay.core.config import get_settings
from src.taskrelay.core.logging import get_logger

logger = get_logger(__name__)

_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


def build_invite_url(token: str) -> str:
    return f"{get_settings().app_url}/invites/{token}"


def send_invite_email(
    to: str,
    token: str,
    project_name: str,
    inviter_name: str,
    role: str,
    expires_at: datetime,
    message: str | None = None,
) -> bool:
    """Send a project invite email.

    Args:
        to: Recipient email address
        token: Invite token (plaintext, included in URL)
        project_name: Name of the project being joined
        inviter_name: Name or email of the person who sent the invite
        role: Role the invitee will receive
        expires_at: When the invite link stops working (UTC)
        message: Optional personal note from the inviter

    Returns:
        True if email was sent (or logged in dev mode), False on error
    """
    settings = get_settings()
    invite_url = build_invite_url(token)

    if not settings.resend_api_key:
        logger.warning(
            "RESEND_API_KEY not set - invite email not sent",
            to=to,
            email_type="invite",
        )
        return True

    resend.api_key = settings.resend_api_key

    def _send() -> None:
        resend.Emails.send(
            {
                "from": settings.email_from,
                "to": [to],
                "subject": f"You've been invited to join {project_name}",
                "html": _get_invite_email_html(
                    project_name, inviter_name, role, invite_url, expires_at, message
                ),
            }
        )

    try:
        future = _email_executor.submit(_send)
        future.result(timeout=settings.email_send_timeout_seconds)
        logger.info("Invite email sent", to=to)
        return True
    except FuturesTimeoutError:
        logger.error("Email send timed out", to=to, timeout=settings.email_send_timeout_seconds)
        return False
    except Exception as e:
        logger.error("Failed to send invite email", to=to, error=str(e))
        return False


def _get_invite_email_html(
    project_name: str,
    inviter_name: str,
    role: str,
    invite_url: str,
    expires_at: datetime,
    message: str | None,
) -> str:
    safe_project_name = html.escape(project_name)
    safe_inviter_name = html.escape(inviter_name)
    note = ""
    if message:
        note = (
            f'<blockquote style="{_MUTED_STYLE} border-left: 3px solid #ddd; '
            f'padding-left: 12px;">{html.escape(message)}</blockquote>'
        )
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">You're invited!</h1>
    <p>{safe_inviter_name} has invited you to join <strong>{safe_project_name}</strong>
    as {role.lower()}.</p>
    {note}
    <p style="margin: 32px 0;">
        <a href="{invite_url}" style="{_BUTTON_STYLE}">View Invitation</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{invite_url}" style="{_LINK_STYLE}">{invite_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This invitation expires on {expires_at:%Y-%m-%d %H:%M} UTC. If you didn't expect
        this invitation, you can safely ignore this email.
    </p>
</body>
</html>"""
