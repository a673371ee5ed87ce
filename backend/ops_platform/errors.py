"""Error taxonomy shared by services and routes.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request. ``register_error_handlers`` maps them 1:1 onto responses with the
same ``{"detail": ...}`` body FastAPI uses for its own errors.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(AppError):
    """Entity absent, or the caller has no access to the tenant it lives in."""

    status_code = 404


class InvalidInput(AppError):
    status_code = 400


class InvalidState(AppError):
    """Operation not allowed given the current state of the entity."""

    status_code = 400


class SlotUnavailable(InvalidState):
    status_code = 409


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
