"""Translate core errors into HTTP responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from meeting_maestro.errors import MaestroError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

TROUBLESHOOTING = [
    "Check your .env file",
    "Verify the configured API key is correct",
    "Ensure the key follows the provider's key format",
]


def to_http_exception(exc: MaestroError) -> HTTPException:
    """Build the HTTPException a route should raise for *exc*."""
    detail: dict[str, Any] = {"error": exc.message}
    if isinstance(exc, UpstreamUnavailableError):
        if exc.validation is not None:
            detail["validation"] = exc.validation.to_dict()
        detail["troubleshooting"] = TROUBLESHOOTING
    return HTTPException(status_code=exc.status_code, detail=detail)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": {"error": "Something went wrong"}},
        )
