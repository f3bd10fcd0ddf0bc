"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from onboard.schemas.common import CamelModel, Pagination

Title = Literal["Mr", "Ms", "Mrs"]
UserStatus = Literal["active", "suspended", "banned"]


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    title: Title


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    title: Optional[Title] = None


class EmailVerificationRequest(CamelModel):
    token: str = Field(..., min_length=1)


class EmailRequest(CamelModel):
    email: EmailStr


class PasswordResetConfirm(CamelModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)


class VerificationStatusResponse(CamelModel):
    success: bool = True
    valid: bool
    email_verified: bool


class UserStatusUpdate(CamelModel):
    status: UserStatus


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    title: str
    status: str
    is_admin: bool
    email_verified: bool
    created_at: datetime


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    user: UserResponse
    token: str


class UserEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    user: UserResponse


class UserListResponse(CamelModel):
    success: bool = True
    users: list[UserResponse]
    pagination: Pagination
