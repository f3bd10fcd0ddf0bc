"""
Authentication endpoints: register, login, token validation, email
verification and password reset.

Resend and reset requests answer the same way whether or not the address
belongs to an account.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from onboard.api.deps import (
    get_app_settings,
    get_bearer_token,
    get_current_user,
    get_notifier,
    get_storage,
    get_token_store,
)
from onboard.core.config import Settings
from onboard.core.security import TokenStore
from onboard.models import User
from onboard.schemas.common import MessageResponse
from onboard.schemas.user import (
    AuthResponse,
    EmailRequest,
    EmailVerificationRequest,
    PasswordResetConfirm,
    UserCreate,
    UserEnvelope,
    UserLogin,
    UserResponse,
    VerificationStatusResponse,
)
from onboard.services.auth_service import (
    authenticate_user,
    logout_user,
    register_user,
    request_password_reset,
    resend_verification,
    reset_password,
    verification_status,
    verify_email,
)
from onboard.services.interfaces.storage import Storage
from onboard.services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user account and sign it in."""
    user, token = await register_user(
        storage, tokens, notifier, user_data, settings.VERIFICATION_TOKEN_TTL_HOURS * 3600
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: UserLogin,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
):
    """Authenticate and receive a bearer token."""
    user, token = await authenticate_user(storage, tokens, login_data)
    return AuthResponse(message="Login successful", user=UserResponse.model_validate(user), token=token)


@router.get("/validate", response_model=UserEnvelope)
async def validate(user: User = Depends(get_current_user)):
    """Return the user behind the bearer token."""
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    token: Optional[str] = Depends(get_bearer_token),
    tokens: TokenStore = Depends(get_token_store),
):
    await logout_user(tokens, token)
    return MessageResponse(message="Logged out successfully")


@router.post("/verify-email", response_model=UserEnvelope)
async def verify_email_endpoint(
    payload: EmailVerificationRequest,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
):
    """Confirm an email address with the token from the verification email."""
    user = await verify_email(storage, tokens, payload.token)
    await storage.commit()
    return UserEnvelope(message="Email verified successfully", user=UserResponse.model_validate(user))


@router.post("/verify-email/resend", response_model=MessageResponse)
async def resend_verification_email(
    payload: EmailRequest,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    await resend_verification(
        storage, tokens, notifier, payload.email, settings.VERIFICATION_TOKEN_TTL_HOURS * 3600
    )
    return MessageResponse(message="If the account exists and is unverified, a verification email has been sent")


@router.get("/verify-email/status/{token}", response_model=VerificationStatusResponse)
async def verification_status_endpoint(
    token: str,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
):
    """Whether a verification link is still usable."""
    valid, email_verified = await verification_status(storage, tokens, token)
    return VerificationStatusResponse(valid=valid, email_verified=email_verified)


@router.post("/password-reset", response_model=MessageResponse)
async def password_reset_request(
    payload: EmailRequest,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    await request_password_reset(
        storage, tokens, notifier, payload.email, settings.PASSWORD_RESET_TOKEN_TTL_MINUTES * 60
    )
    return MessageResponse(message="If the account exists, a password reset email has been sent")


@router.post("/password-reset/confirm", response_model=MessageResponse)
async def password_reset_confirm(
    payload: PasswordResetConfirm,
    storage: Storage = Depends(get_storage),
    tokens: TokenStore = Depends(get_token_store),
):
    """Set a new password with the token from the reset email."""
    await reset_password(storage, tokens, payload.token, payload.password)
    await storage.commit()
    return MessageResponse(message="Password has been reset")
