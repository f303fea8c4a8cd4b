"""
FastAPI Application Entry Point.

Builds the LogyTrack API: logging, error envelopes, request
observability and the v1 routes.
"""

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from logytrack.app.core.config import settings
from logytrack.app.core.dependencies import get_backend
from logytrack.app.core.observability import ObservabilityMiddleware, configure_logging
from logytrack.app.api.v1.router import router as api_v1_router
from logytrack.app.db.backend import ProcedureBackend
from logytrack.app.db.session import engine, Base
from logytrack.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Register tables on Base.metadata
from logytrack.app.models import driver, product, user, vehicle  # noqa: F401

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup; release pooled connections on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Tracks drivers, vehicles and products and their assignments",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/health", tags=["Health"])
async def health_check(backend: ProcedureBackend = Depends(get_backend)):
    """
    Health check endpoint.

    Returns 503 with ``status: degraded`` when the database cannot be reached.
    """
    database_ok = await backend.ping()
    body = {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unavailable",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }
    if not database_ok:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "docs": "/docs",
        "health": "/health",
    }
