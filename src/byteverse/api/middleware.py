"""ASGI middleware guarding every request before routing."""
from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from byteverse.core.errors import AccessError, SourceBlockedError
from byteverse.services.abuse import AbuseMonitor

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data:; font-src 'self' data:;"
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


def error_response(err: AccessError) -> JSONResponse:
    return JSONResponse(
        status_code=err.status_code,
        content={"success": False, "message": err.message},
    )


def resolve_source_address(request: Request, trust_proxy_headers: bool = False) -> str:
    """Return the client address used as the abuse-tracking key."""
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


class AbuseGuardMiddleware(BaseHTTPMiddleware):
    """Blocklist gate followed by the abuse monitor.

    The monitor is read from ``app.state.abuse_monitor`` on every request so
    that the application owns it and tests can swap or reset it.
    """

    def __init__(self, app, trust_proxy_headers: bool = False):
        super().__init__(app)
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(self, request, call_next):
        monitor: AbuseMonitor | None = getattr(request.app.state, "abuse_monitor", None)
        address = resolve_source_address(request, self.trust_proxy_headers)
        request.state.source_address = address

        if monitor is None:
            return await call_next(request)

        if monitor.is_blocked(address):
            return error_response(SourceBlockedError())

        verdict = monitor.observe(address, request.url.path)
        if not verdict.allowed:
            return error_response(SourceBlockedError("Suspicious activity detected"))

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach browser hardening headers to every response."""

    async def dispatch(self, request, call_next):
        response: Response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
