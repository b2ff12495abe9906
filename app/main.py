"""
School mail organizer API.
Application factory wiring: logging, lifespan resources, middleware and routers.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import db_pool
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.middleware import CORSMiddleware, RequestContextMiddleware
from app.routes import calendars, children, connections, health, internal
from app.routes import settings as settings_routes
from app.services.calendar.google_client import google_calendar_service
from app.services.gmail.google_client import google_gmail_client
from app.services.infrastructure.encryption_service import validate_encryption_config

# Setup logging before creating the app
setup_logging(log_level="DEBUG" if settings.debug else "INFO", json_logs=settings.environment != "development")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    if not validate_encryption_config():
        logger.warning("Encryption not configured, stored Google connections are unavailable")

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    yield

    logger.info("Application shutting down")

    shutdown_errors = []

    for name, client in (("gmail", google_gmail_client), ("calendar", google_calendar_service)):
        try:
            await client.close()
        except Exception as e:
            logger.error("Error closing Google client", client=name, error=str(e))
            shutdown_errors.append(f"{name}: {e}")

    # Close database pool last (may have active connections)
    try:
        logger.info("Closing database pool")
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="School Mail Organizer",
    description="Organizes children's school email into Gmail labels and drives the automation workflow",
    version="0.1.0",
    lifespan=lifespan,
)


async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


# Registration order matters: the last middleware added runs first
app.middleware("http")(log_requests)
app.add_middleware(CORSMiddleware, allowed_origins=settings.cors_origins(), allow_credentials=True)
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(children.router)
app.include_router(settings_routes.router)
app.include_router(calendars.router)
app.include_router(connections.router)
app.include_router(internal.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
