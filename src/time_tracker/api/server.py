"""FastAPI application server.

This module contains the main FastAPI application setup and server runner.
"""

import logging
from typing import Optional

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from time_tracker import __version__
from time_tracker.api.middleware import setup_middleware
from time_tracker.api.models import InternalErrorResponse
from time_tracker.core.config import ConfigManager
from time_tracker.core.storage import StorageManager

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ConfigManager] = None,
    storage: Optional[StorageManager] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)
        storage: Optional store (created from ``general.data_dir`` if None)

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app()
        >>> # Or with custom config
        >>> config = ConfigManager()
        >>> app = create_app(config)
    """
    if config is None:
        config = ConfigManager()
    if storage is None:
        storage = StorageManager(config.data_dir, default_projects=config.default_projects)

    app = FastAPI(
        title="Time Tracker API",
        description="Projects, time entries, statistics and extension timer control",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Shared by every request; see api.dependencies
    app.state.config = config
    app.state.storage = storage

    setup_middleware(app, config)

    from time_tracker.api.endpoints import entries, extension, projects, stats, system

    # Any route can fail with a storage or unexpected error
    internal_error = {500: {"model": InternalErrorResponse}}
    routers = [
        (projects.router, "/api/projects", "projects"),
        (entries.router, "/api/time-entries", "entries"),
        (stats.router, "/api", "stats"),
        (system.router, "/api", "system"),
        (extension.router, "/api/extension", "extension"),
    ]
    for router, prefix, tag in routers:
        app.include_router(router, prefix=prefix, tags=[tag], responses=internal_error)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint - points at the docs."""
        return JSONResponse(
            {
                "message": "Time Tracker API",
                "version": __version__,
                "docs": "/docs",
                "ping": "/api/extension/ping",
            }
        )

    logger.info(f"Application created with data directory {storage.data_dir}")
    return app


def run_server(
    host: str = "localhost",
    port: int = 3000,
    reload: bool = False,
    config: Optional[ConfigManager] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address to bind to
        port: Port number to bind to
        reload: Enable auto-reload for development
        config: Optional configuration manager

    Note:
        This function blocks until the server is stopped. A single worker
        process is used so the store has exactly one writer.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()

    if reload:
        uvicorn.run(
            "time_tracker.api.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=config.get("api.advanced.log_level", "info"),
            access_log=config.get("api.advanced.access_log", True),
        )
        return

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        workers=1,
        log_level=config.get("api.advanced.log_level", "info"),
        access_log=config.get("api.advanced.access_log", True),
    )
