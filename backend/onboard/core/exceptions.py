"""
Application error taxonomy and the handlers that render it.

Every error leaves the API in the same envelope:

    {"success": false, "message": "...", "errors": ["..."]}

`message` is always safe to show to an end user. Provider responses and
stack traces go to the logs only.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from onboard.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[str]] = None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request data"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Request conflicts with the current state"


class ProviderError(AppError):
    """An external provider (payment, mail, database) failed or misbehaved."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Payment provider error. Please try again later."


class PaymentDeclinedError(ProviderError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Payment failed. Please check your payment details and try again."


class ProviderUnavailableError(ProviderError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Payment provider is not configured"


class DuplicateEmailError(ConflictError):
    message = "User with this email already exists"


class InvalidCredentialsError(AuthError):
    message = "Invalid email or password"


class InvalidTokenError(AuthError):
    message = "Invalid token"


class UnknownAirportError(NotFoundError):
    # Reported as a bad request: the client sent codes outside the directory
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid airport codes"


def error_body(message: str, errors: Optional[list[str]] = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def format_validation_errors(exc: RequestValidationError) -> list[str]:
    formatted = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix FastAPI adds to every location
        location = [str(part) for part in error.get("loc", ())[1:]]
        path = ".".join(location)
        formatted.append(f"{path}: {error.get('msg')}" if path else error.get("msg", ""))
    return formatted


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "request_error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        error_message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = format_validation_errors(exc)
    logger.info("request_validation_failed", errors=errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request data", errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
