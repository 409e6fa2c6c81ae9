"""
Exception handlers that render every error as {"success": false, "error": ...}.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.database import DatabaseNotConfigured

logger = logging.getLogger(__name__)

AVAILABLE_ROUTES = [
    "GET /",
    "GET /health",
    "GET /api/notifications",
    "GET /api/notifications/:id",
    "GET /api/notifications/:id/logs",
    "POST /api/notifications",
    "PUT /api/notifications/:id",
    "DELETE /api/notifications/:id",
    "POST /api/notifications/:id/toggle",
    "GET /api/scheduler/jobs",
    "POST /api/scheduler/refresh",
    "POST /api/scheduler/test-message",
]


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = {"success": False, "error": exc.detail}
    if exc.status_code == 404 and exc.detail == "Not Found":
        content["error"] = "Route not found"
        content["availableRoutes"] = AVAILABLE_ROUTES
    return JSONResponse(content, status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": _format_validation_error(exc)},
        status_code=400,
    )


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Store failures: query errors, an unreachable server (asyncpg raises
    OSError subclasses such as ConnectionRefusedError) or no DATABASE_URL.
    """
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        {"success": False, "error": str(exc) or type(exc).__name__},
        status_code=500,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    for exc_class in (SQLAlchemyError, OSError, DatabaseNotConfigured):
        app.add_exception_handler(exc_class, database_exception_handler)
