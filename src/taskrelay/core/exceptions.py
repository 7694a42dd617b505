"""Domain errors and the exception handlers that render them with request_id."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.taskrelay.core.logging import get_logger

logger = get_logger(__name__)


class DomainError(Exception):
    """Base class for membership and invitation errors.

    Each subclass carries a stable machine-readable ``code`` and the HTTP
    status the API layer answers with.
    """

    code = "domain_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DomainError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ExpiredError(DomainError):
    code = "expired"
    status_code = status.HTTP_410_GONE
    default_message = "This invitation has expired. Ask the project owner for a new invite."


class InvalidStateError(DomainError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This invitation is no longer pending"


class ForbiddenError(DomainError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class ConflictError(DomainError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The member was modified concurrently. Reload and try again."


class LastOwnerError(DomainError):
    code = "last_owner"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A project must keep its owner. Transfer ownership first."


class AlreadyMemberError(DomainError):
    code = "already_member"
    status_code = status.HTTP_409_CONFLICT
    default_message = "User is already a member of this project"


class DuplicatePendingInviteError(DomainError):
    code = "duplicate_pending_invite"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A pending invite already exists for this email"


class InvalidEmailError(DomainError):
    code = "invalid_email"
    status_code = 422
    default_message = "Invalid email address"


class EmailMismatchError(DomainError):
    code = "email_mismatch"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = (
        "This invite was sent to a different email address. "
        "Sign in with the invited account to accept it."
    )


class EmailAlreadyRegisteredError(DomainError):
    code = "email_already_registered"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An account with this email already exists"


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "code": exc.code,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
