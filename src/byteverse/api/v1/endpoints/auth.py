# src/byteverse/api/v1/endpoints/auth.py
"""Authentication endpoints for community members."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from byteverse.api.v1.dependencies import (
    USER_TOKEN_COOKIE,
    CurrentUserDep,
    SessionDep,
    get_user_verifier,
)
from byteverse.core.security import (
    generate_token_pair,
    hash_password,
    hash_token,
    verify_password,
)
from byteverse.core.settings import settings
from byteverse.models import User
from byteverse.schemas.common import MessageResponse
from byteverse.schemas.user import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserEnvelope,
    UserResponse,
)
from byteverse.services.tokens import TokenVerifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

UserVerifierDep = Annotated[TokenVerifier, Depends(get_user_verifier)]


def _avatar_url(name: str) -> str:
    return (
        f"https://ui-avatars.com/api/?name={quote(name)}"
        "&background=random&color=fff&size=200"
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _username_from_email(email: str) -> str:
    return email.split("@", 1)[0].lower()


def _set_token_cookie(response: Response, token: str, verifier: TokenVerifier) -> None:
    response.set_cookie(
        USER_TOKEN_COOKIE,
        token,
        max_age=verifier.expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
    )


def _token_response(
    user: User, response: Response, verifier: TokenVerifier
) -> AuthResponse:
    token = verifier.issue(user.id)
    _set_token_cookie(response, token, verifier)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    summary="Register a community account",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
)
async def register_user(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    db: SessionDep,
    verifier: UserVerifierDep,
) -> AuthResponse:
    """Create an account and sign the member in."""
    if db.query(User).filter(User.email == payload.email).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        )

    username = _username_from_email(payload.email)
    if db.query(User).filter(User.username == username).first() is not None:
        username = None

    raw_token, verification_hash = generate_token_pair()
    user = User(
        name=payload.name,
        email=payload.email,
        username=username,
        password_hash=hash_password(payload.password),
        avatar=_avatar_url(payload.name),
        email_verification_token=verification_hash,
        email_verification_expires=_utcnow()
        + timedelta(hours=settings.email_verification_expire_hours),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    # Email delivery is handled outside this service; the link is logged for it.
    logger.info(
        "Verification link for user %s: %s",
        user.id,
        request.url_for("verify_email", token=raw_token),
    )

    return _token_response(user, response, verifier)


@router.post("/login", summary="Log in with email and password", response_model=AuthResponse)
async def login_user(
    payload: LoginRequest,
    response: Response,
    db: SessionDep,
    verifier: UserVerifierDep,
) -> AuthResponse:
    """Authenticate a member and issue a user-domain token."""
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide email and password",
        )

    user = db.query(User).filter(User.email == payload.email.strip().lower()).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    user.touch()
    db.commit()
    db.refresh(user)
    return _token_response(user, response, verifier)


@router.get("/logout", summary="Clear the session cookie", response_model=MessageResponse)
async def logout_user(response: Response) -> MessageResponse:
    response.delete_cookie(USER_TOKEN_COOKIE, httponly=True, samesite="lax")
    return MessageResponse(message="Logged out")


@router.get("/me", summary="Current member", response_model=UserEnvelope)
async def read_me(current_user: CurrentUserDep) -> UserEnvelope:
    return UserEnvelope(data=UserResponse.model_validate(current_user.record))


@router.put("/updatedetails", summary="Update profile details", response_model=UserEnvelope)
async def update_details(
    payload: UpdateDetailsRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserEnvelope:
    """Apply a partial profile update for the current member."""
    user = current_user.record
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    new_email = changes.get("email")
    if new_email and new_email != user.email:
        clash = db.query(User).filter(User.email == new_email, User.id != user.id).first()
        if clash is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already in use",
            )

    for key, value in changes.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return UserEnvelope(data=UserResponse.model_validate(user))


@router.put("/updatepassword", summary="Change password", response_model=AuthResponse)
async def update_password(
    payload: UpdatePasswordRequest,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
    verifier: UserVerifierDep,
) -> AuthResponse:
    user = current_user.record
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    user.password_hash = hash_password(payload.new_password)
    db.commit()
    db.refresh(user)
    return _token_response(user, response, verifier)


@router.get(
    "/verify/{token}",
    summary="Confirm an email address",
    response_model=MessageResponse,
)
async def verify_email(token: str, db: SessionDep) -> MessageResponse:
    """Mark the account behind a live verification link as verified."""
    user = (
        db.query(User)
        .filter(
            User.email_verification_token == hash_token(token),
            User.email_verification_expires > _utcnow(),
        )
        .first()
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired token",
        )

    user.is_email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    db.commit()
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/forgotpassword",
    summary="Start a password reset",
    response_model=MessageResponse,
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: SessionDep,
) -> MessageResponse:
    """Issue a short-lived reset token for the account with ``email``."""
    user = db.query(User).filter(User.email == payload.email).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="There is no user with that email",
        )

    raw_token, reset_hash = generate_token_pair()
    user.reset_password_token = reset_hash
    user.reset_password_expires = _utcnow() + timedelta(
        minutes=settings.reset_password_expire_minutes
    )
    db.commit()
    logger.info(
        "Password reset link for user %s: %s",
        user.id,
        request.url_for("reset_password", token=raw_token),
    )
    return MessageResponse(message="Password reset link issued")


@router.put(
    "/resetpassword/{token}",
    summary="Finish a password reset",
    response_model=AuthResponse,
)
async def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    response: Response,
    db: SessionDep,
    verifier: UserVerifierDep,
) -> AuthResponse:
    """Set a new password with a live reset token and sign the member in."""
    user = (
        db.query(User)
        .filter(
            User.reset_password_token == hash_token(token),
            User.reset_password_expires > _utcnow(),
        )
        .first()
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired token",
        )

    user.password_hash = hash_password(payload.password)
    user.reset_password_token = None
    user.reset_password_expires = None
    db.commit()
    db.refresh(user)
    return _token_response(user, response, verifier)
