"""
Request-scoped dependencies.

Long-lived collaborators (storage provider, token store, payment
orchestrator...) are built once in the application lifespan and parked on
app.state; these helpers hand them to route functions.
"""

from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from onboard.core.config import Settings, get_settings
from onboard.core.exceptions import AuthError, ForbiddenError
from onboard.core.security import TokenStore
from onboard.models import User
from onboard.services.airport_directory import AirportDirectory
from onboard.services.auth_service import resolve_token
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher
from onboard.services.payment_service import PaymentOrchestrator

bearer_scheme = HTTPBearer(auto_error=False)


async def get_storage(request: Request) -> AsyncIterator[Storage]:
    async with request.app.state.storage.session() as storage:
        yield storage


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.tokens


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_directory(request: Request) -> AirportDirectory:
    return request.app.state.directory


def get_notifier(request: Request) -> NotificationDispatcher:
    return request.app.state.notifier


def get_payments(request: Request) -> PaymentOrchestrator:
    return request.app.state.payments


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
) -> User:
    """Resolve the bearer token to an active user, or fail with 401/403."""
    if not token:
        raise AuthError("No token provided")
    return await resolve_token(storage, tokens, token)


async def get_optional_user(
    token: Optional[str] = Depends(get_bearer_token),
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
) -> Optional[User]:
    if not token:
        return None
    return await resolve_token(storage, tokens, token)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
