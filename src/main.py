"""
RadioManager Dialog Service - Main Application Entry Point

- FastAPI app with lifespan handler
- uvicorn src.main:app starts successfully

Patterns Applied:
- Lifespan context manager for startup/shutdown hooks
- One-time configure_logging() at startup

Anti-Patterns Avoided:
- Deprecated @app.on_event - using modern lifespan pattern
- New httpx.AsyncClient per request - one pooled client, closed on shutdown
"""

import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.gzip import GZipMiddleware

from src.api.dependencies import close_request_client, get_request_client
from src.api.dialog import dialog_router
from src.api.health import router as health_router
from src.core.config import get_settings
from src.core.logging import configure_logging, get_logger
from src.core.tracing import configure_tracing

settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_output=settings.log_json,
    service_name=settings.service_name,
)

logger = get_logger(__name__)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup/shutdown events."""
    # STARTUP
    logger.info(
        "startup",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
        api_url=settings.api_url,
    )

    if settings.tracing_enabled:
        configure_tracing(
            service_name=settings.service_name,
            service_version=settings.version,
            console_export=settings.tracing_console_export,
        )
        logger.info("tracing_configured")

    # Fail fast on incomplete auth / HMAC / TLS configuration
    get_request_client()

    app.state.initialized = True
    app.state.environment = settings.environment

    yield

    # SHUTDOWN
    logger.info("shutdown", service=settings.service_name)
    await close_request_client()
    app.state.initialized = False


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="RadioManager-Dialog-Service",
    description="Dialog engine adapter for the RadioManager content backend",
    version=settings.version,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware)


@app.middleware("http")
async def access_log(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log one line per handled request."""
    start_time = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return response


app.include_router(health_router)
app.include_router(dialog_router)


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
