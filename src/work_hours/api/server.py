"""Build the FastAPI app and serve it with uvicorn."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from work_hours import __version__
from work_hours.api.middleware import setup_middleware
from work_hours.core.config import CONFIG_ENV_VAR, ConfigManager

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(config: Optional[ConfigManager] = None) -> FastAPI:
    """App factory; uvicorn workers call it with no arguments.

    Without ``config`` the settings file comes from ``$WORK_HOURS_CONFIG``
    or the default location.
    """
    config = config or ConfigManager()

    app = FastAPI(
        title="Work Hours API",
        description="REST API for tracking shifts and salary per job",
        version=__version__,
    )
    app.state.config = config
    setup_middleware(app, config)

    from work_hours.api.endpoints import entries, jobs, reports, system

    app.include_router(system.router, prefix=API_PREFIX, tags=["system"])
    for name, module in (("jobs", jobs), ("entries", entries), ("reports", reports)):
        app.include_router(module.router, prefix=f"{API_PREFIX}/{name}", tags=[name])

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {
                "message": "Work Hours API",
                "version": __version__,
                "docs": "/docs",
                "health": f"{API_PREFIX}/health",
            }
        )

    logger.debug(f"API application created (data dir {config.data_dir})")
    return app


def run_server(
    host: str = "localhost",
    port: int = 8000,
    reload: bool = False,
    workers: int = 1,
    ssl_certfile: Optional[Path] = None,
    ssl_keyfile: Optional[Path] = None,
    config: Optional[ConfigManager] = None,
) -> None:
    """Serve the API until interrupted.

    TLS is enabled only when both ``ssl_certfile`` and ``ssl_keyfile`` are given.
    Reload mode always runs a single worker.
    """
    import uvicorn  # type: ignore[import-untyped]

    config = config or ConfigManager()
    # Worker processes rebuild the app from this path
    os.environ[CONFIG_ENV_VAR] = str(config.config_path)

    options: dict[str, Any] = {
        "factory": True,
        "host": host,
        "port": port,
        "reload": reload,
        "workers": 1 if reload else workers,
        "log_level": config.get("api.advanced.log_level", "info"),
        "access_log": config.get("api.advanced.access_log", True),
    }
    if ssl_certfile and ssl_keyfile:
        options["ssl_certfile"] = str(ssl_certfile)
        options["ssl_keyfile"] = str(ssl_keyfile)

    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("work_hours.api.server:create_app", **options)
