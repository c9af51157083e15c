# src/byteverse/main.py
"""Main entry point for the ByteVerse API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from byteverse.api.errors import register_exception_handlers
from byteverse.api.middleware import AbuseGuardMiddleware, SecurityHeadersMiddleware
from byteverse.api.v1 import admin_router, auth_router, users_router
from byteverse.core.logging import configure_logging
from byteverse.core.settings import settings
from byteverse.db.session import create_tables
from byteverse.services.abuse import AbuseMonitor
from byteverse.services.sweeper import AbuseSweepWorker

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

if settings.shares_jwt_secret:
    logger.warning(
        "JWT_SECRET and ADMIN_JWT_SECRET are identical; "
        "token domains are then separated only by the scope claim"
    )

# Initialize FastAPI app
app = FastAPI(
    title="ByteVerse API",
    description="Community, blog and events platform API",
    version=settings.app_version,
)

app.state.abuse_monitor = AbuseMonitor.from_settings(settings)
app.state.sweep_worker = None

register_exception_handlers(app)

# Middleware added last runs first. The abuse guard still runs before routing
# and authentication, while its 403s pass back out through the security
# headers and CORS layers like any other response.
app.add_middleware(AbuseGuardMiddleware, trust_proxy_headers=settings.trust_proxy_headers)
if settings.security_headers_enabled:
    app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.database_url.startswith("sqlite"):
        create_tables()
    if settings.abuse_sweep_enabled:
        worker = AbuseSweepWorker(
            app.state.abuse_monitor,
            interval=settings.abuse_sweep_interval_seconds,
        )
        await worker.start()
        app.state.sweep_worker = worker


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: AbuseSweepWorker | None = getattr(app.state, "sweep_worker", None)
    if worker:
        await worker.stop()
        app.state.sweep_worker = None


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("byteverse.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
