"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chainxchange.config.settings import get_settings
from chainxchange.config.logging_config import setup_logging
from chainxchange.app_context import get_app_context
from chainxchange.api.routers import accounts_router, portfolio_router, market_router
from chainxchange.core.exceptions import AppError, NotFoundError, UpstreamError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    context = get_app_context()
    if not context.is_initialized:
        context.initialize()
    yield
    context.close()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Simulated cryptocurrency trading against live market data",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(accounts_router)
app.include_router(portfolio_router)
app.include_router(market_router)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, UpstreamError):
        return 502
    return 400


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=_status_for(exc),
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
        "version": settings.app_version,
        "docs": "/docs",
    }
