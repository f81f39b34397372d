"""FastAPI application factory for the dbmonitor status API.

Usage::

    from dbmonitor.api.app import create_app

    app = create_app(poll_loop=poll_loop, config=config)

The API is read-only: it reports the reconciler state and the latest poll
cycle, and exposes Prometheus metrics under ``/metrics``.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from dbmonitor.api.routes import router
from dbmonitor.api.schemas import ErrorResponse

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(poll_loop: Any, config: Any) -> FastAPI:
    """Create and configure the status API.

    Args:
        poll_loop: PollLoop whose reconciler state and last cycle are reported.
        config:    MonitorConfig, used for the polled GVR and interval.
    """
    from dbmonitor import __version__

    app = FastAPI(
        title="dbmonitor",
        summary="KubeBlocks database status monitor",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.poll_loop = poll_loop
    app.state.config = config

    app.include_router(router, prefix=_API_PREFIX)
    app.mount("/metrics", make_asgi_app())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
