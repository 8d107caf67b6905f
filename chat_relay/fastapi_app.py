"""
FastAPI Application Factory.
Creates and configures the FastAPI application with all routers, middleware, and DI.

Endpoints:
- /, /health          liveness
- /conversations      discovery and message history
- /ws/{id}            relay session
- /metrics            Prometheus exposition
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka

from chat_relay import __version__
from chat_relay.config.logging_config import (
    NO_CORRELATION_ID,
    correlation_id_var,
    setup_logging,
)
from chat_relay.config.settings import Config, get_config
from chat_relay.domain.exceptions import (
    DataAccessError,
    DomainValidationError,
    UnauthorizedError,
)
from chat_relay.observability import (
    increment_error,
    observe_request_latency,
    MetricsErrorType,
)
from chat_relay.presentation.api import conversations_router, metrics_router, ws_router
from chat_relay.setup.ioc.container import create_container

# Setup logging
setup_logging(Config.LOG_LEVEL, Config.LOG_PATH)

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to extract and set correlation ID from request headers."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", NO_CORRELATION_ID)

        # Set in contextvars (propagates to async tasks and logging)
        correlation_id_var.set(correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        return response


class RequestLatencyMiddleware(BaseHTTPMiddleware):
    """Records every HTTP request in the latency histogram, labelled by route template."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        route = request.scope.get("route")
        observe_request_latency(
            request.method,
            getattr(route, "path", request.url.path),
            response.status_code,
            time.perf_counter() - start,
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: nothing to open, adapters connect lazily on first resolve.
    Shutdown: close the DI container (disconnects Prisma, closes Redis).
    """
    logger.info("FastAPI application started. DI container initialized.")
    yield
    await app.state.dishka_container.close()
    logger.info("FastAPI application shutdown. DI container closed.")


def create_fastapi_app(container: Optional[AsyncContainer] = None) -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Args:
        container: DI container to use; the production container by default

    Returns:
        FastAPI application instance
    """
    settings = get_config()
    app = FastAPI(
        title="Chat Relay API",
        debug=settings.DEBUG,
        description="Real-time message relay for direct conversations",
        version=__version__,
        lifespan=lifespan,
    )

    # Setup Dishka BEFORE app starts (must add middleware before startup)
    setup_dishka(container or create_container(), app)

    app.add_middleware(RequestLatencyMiddleware)

    # Correlation ID middleware (must be added before CORS)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials="*" not in Config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validation error handler - shows detailed Pydantic errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning(f"[VALIDATION ERROR] {errors}")
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "details": jsonable_encoder(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.info(f"[HTTP ERROR {exc.status_code}] {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return JSONResponse(status_code=401, content={"error": str(exc)})

    @app.exception_handler(DomainValidationError)
    async def domain_validation_handler(request: Request, exc: DomainValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(DataAccessError)
    async def data_access_handler(request: Request, exc: DataAccessError):
        logger.error(f"[DATA ACCESS ERROR] {exc}")
        increment_error(MetricsErrorType.DATA_ACCESS)
        return JSONResponse(status_code=502, content={"error": str(exc)})

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[GLOBAL ERROR] {type(exc).__name__}: {exc}")
        increment_error(MetricsErrorType.UNHANDLED)
        return JSONResponse(
            status_code=500,
            content={"error": f"Internal server error: {str(exc)}"},
        )

    # Health check routes
    @app.get("/", tags=["health"])
    async def root():
        return {"message": "FastAPI server is running."}

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "healthy"}

    # Register routers
    app.include_router(conversations_router)  # /conversations
    app.include_router(ws_router)  # WS /ws/{conversation_id}
    app.include_router(metrics_router)  # GET /metrics

    return app


# Create the app instance
app = create_fastapi_app()
