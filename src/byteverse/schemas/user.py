"""User- and admin-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from byteverse.models import Role

# Same shape the community frontend validates against.
EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def _validate_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please add a valid email")
    return value


class RegisterRequest(BaseModel):
    """Schema for creating a community account."""

    name: str = Field(..., min_length=1, max_length=120)
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _validate_email(value)


class LoginRequest(BaseModel):
    """Email/password login; both fields are checked in the handler."""

    email: str | None = None
    password: str | None = None


class UpdateDetailsRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=120)
    email: str | None = None
    bio: str | None = Field(None, max_length=500)
    website: str | None = None
    is_email_public: bool | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _validate_email(value)


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    """Account details returned to the account owner."""

    id: int
    name: str
    username: str | None
    email: str
    role: Role
    avatar: str | None
    bio: str | None
    website: str | None
    is_email_verified: bool
    is_email_public: bool
    created_at: datetime
    last_active: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicProfileResponse(BaseModel):
    """Profile visible to anyone; email only when the owner opted in."""

    id: int
    name: str
    username: str | None
    avatar: str | None
    bio: str | None
    website: str | None
    email: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Response returned after register, login and password change."""

    success: bool = True
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserResponse


class AdminLoginRequest(BaseModel):
    """Admins may log in with either username or email."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class AdminResponse(BaseModel):
    id: int
    name: str
    username: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class AdminAuthResponse(BaseModel):
    success: bool = True
    token: str
    admin: AdminResponse


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _validate_email(value)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=6)
