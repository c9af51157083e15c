"""Exception handlers rendering every error as ``{"success": false, "message": ...}``."""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from byteverse.api.middleware import error_response
from byteverse.core.errors import AccessError

_LOCATION_LABELS = {
    "body": "Invalid request body",
    "query": "Invalid query parameters",
    "path": "Invalid path parameters",
}


async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
    return error_response(exc)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = tuple(first.get("loc", ()))
        label = _LOCATION_LABELS.get(str(loc[0]) if loc else "body", "Invalid request body")
        location = ".".join(str(part) for part in loc[1:])
        message = f"{label}: {location} {first.get('msg', '')}".strip()
    else:  # pragma: no cover - pydantic always reports at least one error
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccessError, access_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
