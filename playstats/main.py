"""FastAPI application entry point for the stats dashboard."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, AsyncGenerator

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from playstats.api import stats_router
from playstats.core.config import get_settings
from playstats.core.errors import StatsError
from playstats.core.middleware import SecurityHeadersMiddleware
from playstats.core.observability import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    setup_observability,
)
from playstats.core.rate_limit import limiter
from playstats.schemas import ErrorResponse
from playstats.services import FirebaseSnapshotStore, close_store, get_store

settings = get_settings()
logger = structlog.get_logger()

STATIC_DIR = Path(settings.static_dir) if settings.static_dir else Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Playstats", version=settings.app_version)
    if not settings.firebase_database_url:
        logger.warning("FIREBASE_DATABASE_URL is not set; every stats request will fail")
    yield
    logger.info("Shutting down Playstats")
    await close_store()
    logger.info("Snapshot store closed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Read-only statistics for users and custom entries",
    lifespan=lifespan,
)

# Set up observability (logging, tracing, metrics, Sentry)
setup_observability(app)

app.state.limiter = limiter


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@app.exception_handler(StatsError)
async def stats_error_handler(request: Request, exc: StatsError) -> JSONResponse:
    """Report a failed snapshot read as a failed envelope."""
    logger.error(
        "Stats request failed",
        error_type=type(exc).__name__,
        error=exc.message,
        store_path=exc.path,
    )
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid query parameters as a failed envelope."""
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Report a rate-limited request as a failed envelope."""
    logger.warning("Rate limit exceeded", limit=str(exc.detail))
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        f"Rate limit exceeded: {exc.detail}",
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report any other failure as a failed envelope."""
    logger.exception("Unhandled error", error=str(exc))
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


# Middleware stack (first added = innermost)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    SecurityHeadersMiddleware,
    enable_hsts=not settings.debug,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(stats_router)


@app.get("/health")
async def health_check(
    store: Annotated[FirebaseSnapshotStore, Depends(get_store)],
) -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy" if store.database_url else "degraded",
        "service": "playstats",
        "version": settings.app_version,
        "store": store.stats,
    }


# Dashboard - mounted last so API, health and metrics routes take precedence
app.mount(
    "/",
    StaticFiles(directory=STATIC_DIR, html=True, check_dir=False),
    name="dashboard",
)


def run() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "playstats.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
