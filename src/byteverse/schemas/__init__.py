"""Pydantic schemas for the ByteVerse API."""

from .common import MessageResponse
from .content import BlogContentRequest, ContentReviewResponse, ReviewedBlog
from .security import (
    ActivityResponse,
    BlockEntryResponse,
    BlocklistResponse,
    BlockRequest,
    SourceActivityResponse,
    SweepResponse,
)
from .user import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminResponse,
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    PublicProfileResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserEnvelope,
    UserResponse,
)

__all__ = [
    "ActivityResponse",
    "AdminAuthResponse",
    "AdminLoginRequest",
    "AdminResponse",
    "AuthResponse",
    "ForgotPasswordRequest",
    "BlockEntryResponse",
    "BlockRequest",
    "BlogContentRequest",
    "BlocklistResponse",
    "ContentReviewResponse",
    "LoginRequest",
    "MessageResponse",
    "PublicProfileResponse",
    "RegisterRequest",
    "ReviewedBlog",
    "ResetPasswordRequest",
    "SourceActivityResponse",
    "SweepResponse",
    "UpdateDetailsRequest",
    "UpdatePasswordRequest",
    "UserEnvelope",
    "UserResponse",
]
