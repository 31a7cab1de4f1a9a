"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clubdash import __version__
from clubdash.api.routers import cache_router, dashboard_router, ledger_router
from clubdash.app_context import get_app_context
from clubdash.config.logging_config import setup_logging
from clubdash.config.settings import get_settings
from clubdash.core.exceptions import AppError, NotFoundError
from clubdash.repositories.sqlalchemy.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    yield
    # Shutdown: let scheduled loads finish
    await get_app_context().close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Club dashboard with prioritized, cached dataset loading",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(dashboard_router)
app.include_router(ledger_router)
app.include_router(cache_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=404 if isinstance(exc, NotFoundError) else 400,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
