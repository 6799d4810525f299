"""
Error mapping between the service layer and HTTP.

Endpoints translate service errors with ``map_error``; application-wide
handlers turn request validation failures into 400 responses and any
unhandled exception into a 500 carrying only a message string.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from social_graph_api.app.services.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    SocialGraphError,
)

logger = logging.getLogger(__name__)


def map_error(exc: SocialGraphError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=exc.reason)
    if isinstance(exc, ConflictError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=exc.reason)
    if isinstance(exc, InvalidInputError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, detail=exc.reason)
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.reason)


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": _describe(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})
