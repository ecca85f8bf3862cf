"""Exception handlers mapping domain errors to JSON responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tixbridge.domain.exceptions import (
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
    StorageError,
    TixBridgeError,
    UpstreamError,
    UserAlreadyExistsError,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES: dict[type[TixBridgeError], int] = {
    UserAlreadyExistsError: 409,
    StorageError: 500,
    AuthenticationError: 401,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    InvalidRequestError: 400,
}


def _status_for(exc: TixBridgeError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 500


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Install the JSON error handlers on an application."""

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"error": exc.message, "retryAfter": exc.retry_after},
        )

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning(
            "upstream_error",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code or 500,
            content={
                "error": exc.message,
                "details": exc.details if exc.details is not None else "Internal server error",
            },
        )

    @app.exception_handler(TixBridgeError)
    async def domain_handler(request: Request, exc: TixBridgeError) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_exception", path=request.url.path)
        content = {"error": "Internal server error"}
        if debug:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)


__all__ = ["register_exception_handlers"]
