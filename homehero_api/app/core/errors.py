"""
Error taxonomy and HTTP error rendering.

Services raise subclasses of ``HomeHeroError``; the handlers registered
by ``register_exception_handlers`` turn them into the JSON envelope the
web client expects::

    {"error": true, "message": "Forbidden access"}

Storage faults never leak to clients.  Endpoints wrap service calls in
``translate_store_errors`` which logs the original traceback and
re-raises an ``InternalError`` carrying a generic, per-operation
message.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class HomeHeroError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(HomeHeroError):
    """No credential was presented."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized access"


class ForbiddenError(HomeHeroError):
    """Bad credential, or an authenticated caller acting on someone else's data."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden access"


class NotFoundError(HomeHeroError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidOperationError(HomeHeroError):
    """Business-rule violation such as self-booking or a second review."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid operation"


class InternalError(HomeHeroError):
    pass


def error_body(message: str) -> dict:
    return {"error": True, "message": message}


@contextmanager
def translate_store_errors(message: str) -> Iterator[None]:
    """Convert ``sqlite3`` faults raised inside the block to ``InternalError``.

    Domain errors pass through untouched so that business-rule
    violations keep their 4xx status.
    """
    try:
        yield
    except sqlite3.Error as exc:
        logger.exception("%s: %s", message, exc)
        raise InternalError(message) from exc


async def _homehero_error_handler(request: Request, exc: HomeHeroError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message), headers=headers)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation error for %s: %s", request.url.path, exc.errors())
    body = error_body("Invalid request")
    body["details"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(InternalError.default_message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HomeHeroError, _homehero_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
