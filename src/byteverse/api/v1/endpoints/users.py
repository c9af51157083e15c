# src/byteverse/api/v1/endpoints/users.py
"""Member profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from byteverse.api.v1.dependencies import OptionalUserDep, PlatformAdminDep, SessionDep
from byteverse.models import User
from byteverse.schemas.user import PublicProfileResponse, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile/{username}", response_model=PublicProfileResponse)
async def get_user_profile(
    username: str,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> PublicProfileResponse:
    """Public profile lookup by username.

    The email address is shown when the owner made it public or is the one
    asking.
    """
    user = db.query(User).filter(User.username == username.lower()).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    profile = PublicProfileResponse.model_validate(user)
    is_owner = viewer is not None and viewer.id == user.id
    if not (user.is_email_public or is_owner):
        profile.email = None
    return profile


@router.get("/", response_model=list[UserResponse])
async def list_users(
    _admin: PlatformAdminDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[User]:
    """List members; requires a member account holding the admin role."""
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()
