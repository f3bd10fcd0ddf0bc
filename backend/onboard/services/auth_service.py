"""
Authentication service handling registration, login and token validation.

Unknown email and wrong password produce the same InvalidCredentialsError so
the response does not reveal which accounts exist.
"""

import secrets

from onboard.core.config import Settings
from onboard.core.exceptions import ForbiddenError, DuplicateEmailError, InvalidCredentialsError, InvalidTokenError
from onboard.core.logging import get_logger
from onboard.core.security import (
    ACCESS,
    EMAIL_VERIFICATION,
    PASSWORD_RESET,
    TokenStore,
    hash_password,
    verify_password,
)
from onboard.models import User
from onboard.schemas.user import ProfileUpdate, UserCreate, UserLogin
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher

logger = get_logger(__name__)


def _ensure_active(user: User) -> None:
    if not user.is_active:
        logger.warning("inactive_user_rejected", user_id=user.id, status=user.status)
        raise ForbiddenError(f"Account is {user.status}")


async def register_user(
    storage: Storage,
    tokens: TokenStore,
    notifier: NotificationDispatcher,
    user_data: UserCreate,
    verification_ttl_seconds: float,
) -> tuple[User, str]:
    """
    Register a new user with a hashed password and issue a bearer token.
    Raises DuplicateEmailError if the email exists in any letter case.
    """
    email = user_data.email.strip().lower()
    if await storage.users.get_by_email(email):
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise DuplicateEmailError()

    user = await storage.users.add(
        User(
            email=email,
            hashed_password=hash_password(user_data.password),
            first_name=user_data.first_name.strip(),
            last_name=user_data.last_name.strip(),
            title=user_data.title,
            status="active",
        )
    )
    await storage.commit()

    token = await tokens.issue(user.id)
    logger.info("user_registered", user_id=user.id, email=user.email)

    verification_token = await tokens.issue(user.id, EMAIL_VERIFICATION, verification_ttl_seconds)
    await notifier.send_welcome_email(user)
    await notifier.send_verification_email(user, verification_token)
    return user, token


async def authenticate_user(storage: Storage, tokens: TokenStore, login_data: UserLogin) -> tuple[User, str]:
    """
    Authenticate user and return a fresh bearer token.
    Raises InvalidCredentialsError if credentials are invalid.
    """
    user = await storage.users.get_by_email(login_data.email)

    if not user or user.is_guest or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise InvalidCredentialsError()

    _ensure_active(user)

    token = await tokens.issue(user.id)
    logger.info("user_logged_in", user_id=user.id)
    return user, token


async def resolve_token(storage: Storage, tokens: TokenStore, token: str) -> User:
    """Map a bearer token to an active user."""
    user_id = await tokens.resolve(token, ACCESS)
    if user_id is None:
        raise InvalidTokenError()

    user = await storage.users.get(user_id)
    if user is None:
        logger.warning("token_user_missing", user_id=user_id)
        raise InvalidTokenError("User not found")

    _ensure_active(user)
    return user


async def logout_user(tokens: TokenStore, token: str) -> None:
    await tokens.revoke(token)


async def verify_email(storage: Storage, tokens: TokenStore, token: str) -> User:
    user_id = await tokens.resolve(token, EMAIL_VERIFICATION)
    user = await storage.users.get(user_id) if user_id is not None else None
    if user is None:
        raise InvalidTokenError("Invalid or expired verification token")

    user.email_verified = True
    await storage.users.save(user)
    await tokens.revoke(token)
    logger.info("email_verified", user_id=user.id)
    return user


async def resend_verification(
    storage: Storage,
    tokens: TokenStore,
    notifier: NotificationDispatcher,
    email: str,
    verification_ttl_seconds: float,
) -> bool:
    """
    Mail a fresh verification link. Returns False when there is nothing to
    send (unknown address, guest identity or already verified); callers
    answer the same way in both cases.
    """
    user = await storage.users.get_by_email(email)
    if user is None or user.is_guest or user.email_verified:
        logger.info("verification_resend_skipped", email=email)
        return False

    token = await tokens.issue(user.id, EMAIL_VERIFICATION, verification_ttl_seconds)
    await notifier.send_verification_email(user, token)
    logger.info("verification_resent", user_id=user.id)
    return True


async def verification_status(storage: Storage, tokens: TokenStore, token: str) -> tuple[bool, bool]:
    """(token still usable, owner's email already verified)"""
    user_id = await tokens.resolve(token, EMAIL_VERIFICATION)
    user = await storage.users.get(user_id) if user_id is not None else None
    if user is None:
        return False, False
    return True, user.email_verified


async def request_password_reset(
    storage: Storage,
    tokens: TokenStore,
    notifier: NotificationDispatcher,
    email: str,
    reset_ttl_seconds: float,
) -> bool:
    """Mail a single-use reset link if the address belongs to a real account."""
    user = await storage.users.get_by_email(email)
    if user is None or user.is_guest:
        logger.info("password_reset_skipped", email=email)
        return False

    token = await tokens.issue(user.id, PASSWORD_RESET, reset_ttl_seconds)
    await notifier.send_password_reset_email(user, token, int(reset_ttl_seconds // 60))
    logger.info("password_reset_requested", user_id=user.id)
    return True


async def reset_password(storage: Storage, tokens: TokenStore, token: str, new_password: str) -> User:
    user_id = await tokens.resolve(token, PASSWORD_RESET)
    user = await storage.users.get(user_id) if user_id is not None else None
    if user is None:
        raise InvalidTokenError("Invalid or expired reset token")

    user.hashed_password = hash_password(new_password)
    await storage.users.save(user)
    await tokens.revoke(token)
    logger.info("password_reset_completed", user_id=user.id)
    return user


async def update_profile(storage: Storage, user: User, data: ProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(user, field, value.strip() if isinstance(value, str) else value)
    await storage.users.save(user)
    logger.info("profile_updated", user_id=user.id, fields=sorted(changes))
    return user


async def ensure_system_users(storage: Storage, settings: Settings) -> None:
    """Seed the administrator and the shared guest identity if missing."""
    if not await storage.users.get_by_email(settings.ADMIN_EMAIL):
        await storage.users.add(
            User(
                email=settings.ADMIN_EMAIL.lower(),
                hashed_password=hash_password(settings.ADMIN_PASSWORD),
                first_name="Onboard",
                last_name="Admin",
                title="Mr",
                is_admin=True,
                email_verified=True,
            )
        )
        logger.info("admin_user_seeded", email=settings.ADMIN_EMAIL)

    if not await storage.users.get_by_email(settings.GUEST_EMAIL):
        await storage.users.add(
            User(
                email=settings.GUEST_EMAIL.lower(),
                # Random password: the guest identity can never log in
                hashed_password=hash_password(secrets.token_urlsafe(32)),
                first_name="Guest",
                last_name="User",
                title="Mr",
                is_guest=True,
            )
        )
        logger.info("guest_user_seeded", email=settings.GUEST_EMAIL)


async def get_guest_user(storage: Storage, settings: Settings) -> User:
    guest = await storage.users.get_by_email(settings.GUEST_EMAIL)
    if guest is None:
        await ensure_system_users(storage, settings)
        guest = await storage.users.get_by_email(settings.GUEST_EMAIL)
    return guest
