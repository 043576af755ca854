"""
Main FastAPI application module.
Handles application lifecycle, middleware setup, and router registration.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from codemocklab.api.router import api_router
from codemocklab.core.config import get_settings
from codemocklab.core.logger import logger
from codemocklab.db.session import init_db
from codemocklab.middleware.rate_limit import RateLimitMiddleware
from codemocklab.middleware.monitoring_middleware import (
    PerformanceMiddleware,
    CorrelationMiddleware,
)
from codemocklab.utils.error_handlers import register_exception_handlers

# Load environment variables
load_dotenv()

# Rate-limited endpoints
PROTECTED_ENDPOINTS = [
    "/api/resume/upload",
    "/api/resume/analyze",
    "/api/interview/generate",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    if settings.AUTO_CREATE_TABLES:
        try:
            init_db()
            logger.info("Database tables verified")
        except Exception as e:
            logger.error(f"Critical error during database initialization: {str(e)}")
            raise

    missing = settings.missing_required_env()
    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")

    logger.info("Application startup completed successfully")

    # Application is running
    yield

    logger.info("Application shutdown completed successfully")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="AI mock interview service: resume analysis, interviews and reports",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Add middleware in correct order (reverse order of execution)
    _configure_middleware(app)

    # Include API routers
    app.include_router(api_router)

    return app


def _configure_middleware(app: FastAPI) -> None:
    """
    Configure middleware for the FastAPI application.
    Middleware is executed in reverse order of addition.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    # Rate limiting middleware
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
        protected_endpoints=PROTECTED_ENDPOINTS,
    )

    app.add_middleware(PerformanceMiddleware, slow_request_threshold_ms=10000)
    app.add_middleware(CorrelationMiddleware)

    # CORS middleware (executed first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "x-correlation-id"],
        max_age=600,
    )


# Create application instance
app = create_application()


if __name__ == "__main__":
    """
    Development server entry point.
    For production deployment, use a proper ASGI server like uvicorn or gunicorn.
    """
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
