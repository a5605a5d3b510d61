"""
Energy Analytics - API Server
FastAPI application exposing the analytics engine over HTTP
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from energy_analytics import __version__
from energy_analytics.errors import EngineError
from energy_analytics.utils.config import resolve_config

from . import routes

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        logger.info(f"Response: {response.status_code} Time: {process_time:.2f}ms")
        response.headers["X-Process-Time"] = f"{process_time:.2f}"
        return response


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    """Map engine precondition failures to client errors."""
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app(config: dict | None = None) -> FastAPI:
    """Build the application with the given engine configuration."""
    app = FastAPI(
        title="Energy Analytics API",
        description="Trend, anomaly, forecast, backtest and scenario engine for monthly energy consumption",
        version=__version__,
    )
    app.state.config = resolve_config(config)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(EngineError, engine_error_handler)
    app.include_router(routes.router, tags=["analytics"])
    return app


app = create_app()
