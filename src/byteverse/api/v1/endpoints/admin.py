# src/byteverse/api/v1/endpoints/admin.py
"""Administrator login, the abuse monitor console and blog content review."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import or_

from byteverse.api.v1.dependencies import (
    ADMIN_TOKEN_COOKIE,
    CurrentAdminDep,
    SessionDep,
    get_admin_verifier,
)
from byteverse.core.security import verify_password
from byteverse.core.settings import settings
from byteverse.models import Admin
from byteverse.schemas.common import MessageResponse
from byteverse.schemas.content import BlogContentRequest, ContentReviewResponse, ReviewedBlog
from byteverse.schemas.security import (
    ActivityResponse,
    BlockEntryResponse,
    BlocklistResponse,
    BlockRequest,
    SourceActivityResponse,
    SweepResponse,
)
from byteverse.schemas.user import AdminAuthResponse, AdminLoginRequest, AdminResponse
from byteverse.services.abuse import AbuseMonitor, BlockEntry
from byteverse.services.images import (
    HEAD_TIMEOUT_SECONDS,
    sanitize_blog_content,
    validate_blog_images,
)
from byteverse.services.tokens import TokenVerifier
from byteverse.utils.content import create_excerpt, optimize_blog_content

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

AdminVerifierDep = Annotated[TokenVerifier, Depends(get_admin_verifier)]


def get_abuse_monitor(request: Request) -> AbuseMonitor:
    monitor: AbuseMonitor | None = getattr(request.app.state, "abuse_monitor", None)
    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Abuse monitor is not configured",
        )
    return monitor


MonitorDep = Annotated[AbuseMonitor, Depends(get_abuse_monitor)]


async def get_image_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=HEAD_TIMEOUT_SECONDS, follow_redirects=True) as client:
        yield client


ImageClientDep = Annotated[httpx.AsyncClient, Depends(get_image_client)]


def _entry_response(entry: BlockEntry, now: float) -> BlockEntryResponse:
    return BlockEntryResponse(
        address=entry.address,
        reason=entry.reason,
        blocked_seconds_ago=round(now - entry.blocked_at, 3),
        expires_in_seconds=(
            round(entry.expires_at - now, 3) if entry.expires_at is not None else None
        ),
    )


@router.post("/login", summary="Log in as administrator", response_model=AdminAuthResponse)
async def admin_login(
    payload: AdminLoginRequest,
    response: Response,
    db: SessionDep,
    verifier: AdminVerifierDep,
) -> AdminAuthResponse:
    """Authenticate an administrator by username or email."""
    identifier = payload.username or payload.email
    if not identifier or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide username/email and password",
        )

    admin = (
        db.query(Admin)
        .filter(or_(Admin.username == identifier, Admin.email == identifier.lower()))
        .first()
    )
    if admin is None or not verify_password(payload.password, admin.password_hash):
        logger.info("Failed admin login for identifier %s", identifier)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = verifier.issue(admin.id)
    response.set_cookie(
        ADMIN_TOKEN_COOKIE,
        token,
        max_age=verifier.expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="strict",
    )
    return AdminAuthResponse(token=token, admin=AdminResponse.model_validate(admin))


@router.get("/me", response_model=AdminResponse)
async def read_admin_me(current_admin: CurrentAdminDep) -> AdminResponse:
    return AdminResponse.model_validate(current_admin.record)


@router.get("/security/blocklist", response_model=BlocklistResponse)
async def list_blocklist(_admin: CurrentAdminDep, monitor: MonitorDep) -> BlocklistResponse:
    """List source addresses currently denied service."""
    now = monitor.now()
    entries = [_entry_response(entry, now) for entry in monitor.blocklist.entries(now)]
    return BlocklistResponse(count=len(entries), entries=entries)


@router.post(
    "/security/blocklist",
    response_model=BlockEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def block_address(
    payload: BlockRequest,
    current_admin: CurrentAdminDep,
    monitor: MonitorDep,
) -> BlockEntryResponse:
    """Deny service to an address by hand."""
    if monitor.is_exempt(payload.address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Address is exempt from blocking",
        )
    entry = monitor.block(payload.address, ttl=payload.ttl_seconds)
    logger.info("Admin %s blocked %s", current_admin.id, payload.address)
    return _entry_response(entry, monitor.now())


@router.delete("/security/blocklist/{address}", response_model=MessageResponse)
async def unblock_address(
    address: str,
    current_admin: CurrentAdminDep,
    monitor: MonitorDep,
) -> MessageResponse:
    """Lift a block and reset the address's activity record."""
    if not monitor.unblock(address):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Address is not blocked",
        )
    logger.info("Admin %s unblocked %s", current_admin.id, address)
    return MessageResponse(message=f"{address} unblocked")


@router.get("/security/activity", response_model=ActivityResponse)
async def list_activity(_admin: CurrentAdminDep, monitor: MonitorDep) -> ActivityResponse:
    """Snapshot of tracked source addresses, most recent first."""
    now = monitor.now()
    records = [
        SourceActivityResponse(
            address=record.address,
            state=record.state,
            count=record.count,
            distinct_endpoints=len(record.endpoints),
            first_seen_seconds_ago=round(now - record.first_seen, 3),
            last_seen_seconds_ago=round(now - record.last_seen, 3),
        )
        for record in monitor.snapshot()
    ]
    return ActivityResponse(count=len(records), records=records)


@router.post("/security/sweep", response_model=SweepResponse)
async def run_sweep(_admin: CurrentAdminDep, monitor: MonitorDep) -> SweepResponse:
    """Evict idle activity records and expired blocks now."""
    result = monitor.sweep()
    return SweepResponse(
        evicted_records=result.evicted_records,
        expired_blocks=result.expired_blocks,
    )


@router.post("/content/validate", response_model=ContentReviewResponse)
async def review_blog_content(
    payload: BlogContentRequest,
    current_admin: CurrentAdminDep,
    http: ImageClientDep,
) -> ContentReviewResponse:
    """Check a blog draft's images and return the cleaned-up payload.

    Broken content images are swapped for a placeholder, the HTML is
    compacted and an excerpt is derived from the result. A broken remote
    cover image is dropped.
    """
    blog = payload.model_dump()
    report = await validate_blog_images(blog, client=http)
    blog["content"] = sanitize_blog_content(blog["content"], report)
    if report.cover_image is False:
        blog["cover_image"] = None

    optimized = optimize_blog_content(blog)
    if report.invalid_urls:
        logger.info(
            "Admin %s content review replaced %d broken images",
            current_admin.id,
            len(report.invalid_urls),
        )
    return ContentReviewResponse(
        cover_image_valid=report.cover_image,
        invalid_images=report.invalid_urls,
        blog=ReviewedBlog(
            title=optimized.get("title"),
            content=optimized.get("content") or "",
            excerpt=create_excerpt(optimized.get("content")),
            cover_image=optimized.get("cover_image"),
            author_name=optimized["author_name"],
        ),
    )
