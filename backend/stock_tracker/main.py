"""
Stock Portfolio Tracker - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from loguru import logger

from stock_tracker import __version__
from stock_tracker.config import settings
from stock_tracker.api.v1.router import api_router
from stock_tracker.db.database import (
    DatabaseHealth,
    build_session_maker,
    engine as default_engine,
    init_db,
)
from stock_tracker.utils.exceptions import StorageError, TrackerException
from stock_tracker.utils.logger import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events handler."""
    setup_logging()
    logger.info("🚀 Starting Stock Portfolio Tracker...")

    # Keep serving without a database; requests fail with 503 until it is back
    try:
        await init_db(app.state.engine)
        logger.info("✅ Database initialized")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"⚠️ Database initialization failed (continuing without storage): {e}")

    await app.state.db_health.check()

    yield

    logger.info("🛑 Shutting down Stock Portfolio Tracker...")
    await app.state.engine.dispose()
    logger.info("👋 Goodbye!")


async def tracker_exception_handler(request: Request, exc: TrackerException) -> JSONResponse:
    """Render application exceptions as JSON error responses."""
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.code})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, **({"details": exc.details} if exc.details else {})},
    )


def create_application(bind: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        bind: Engine to use instead of the one built from settings
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Personal stock portfolio, watchlist and closed-position tracker",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Storage handles shared by every request
    app.state.engine = bind or default_engine
    app.state.session_maker = build_session_maker(app.state.engine)
    app.state.db_health = DatabaseHealth(app.state.engine)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TrackerException, tracker_exception_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": __version__,
            "environment": settings.APP_ENV,
            "database_available": app.state.db_health.available,
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "stock_tracker.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
