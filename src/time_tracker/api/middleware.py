"""Middleware and error handlers for the FastAPI application.

This module provides CORS, request logging, and the translation of
tracker errors into JSON error bodies.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status  # type: ignore[import-untyped]
from fastapi.exceptions import RequestValidationError  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]
from starlette.exceptions import HTTPException as StarletteHTTPException

from time_tracker.core.config import ConfigManager
from time_tracker.core.errors import TrackerError

logger = logging.getLogger(__name__)


def internal_error_response(exc: Exception) -> JSONResponse:
    """Build the 500 body ``{error, message, timestamp}``."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": str(exc),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


def describe_validation_error(exc: RequestValidationError) -> str:
    """Condense pydantic validation errors into a single message.

    Missing fields are listed together; otherwise the first problem wins.
    """
    missing = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if error.get("type") == "missing":
            missing.append(loc[-1] if loc else "request body")
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    first = exc.errors()[0] if exc.errors() else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc) or "request body"
    return f"Invalid value for {field}: {first.get('msg', 'invalid input')}"


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Note:
        The browser extension calls the API from its own origin, so CORS
        is on by default.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["*"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI) -> None:
    """Log every request and turn unhandled exceptions into JSON 500s."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            response = internal_error_response(e)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response


def setup_error_handlers(app: FastAPI) -> None:
    """Register handlers mapping errors to ``{error: ...}`` bodies."""

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"Internal fault on {request.method} {request.url.path}: {exc}")
            return internal_error_response(exc)
        logger.debug(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": describe_validation_error(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware for the application.

    Note:
        This function configures:
        - CORS middleware
        - Request logging with a catch-all for unhandled errors
        - Error handlers for tracker, validation and HTTP errors
    """
    setup_request_logging(app)
    setup_cors(app, config)
    setup_error_handlers(app)
