"""
FastAPI application entry point.
hostlog - Syslog Host Visibility Service
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hostlog import __version__
from hostlog.config import get_settings
from hostlog.exceptions import StorageError
from hostlog.api.dependencies import get_database, get_ingestion_pipeline
from hostlog.api.routes import router


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: Initialize database
    await get_database().init()
    yield
    # Shutdown: let in-flight field frequency updates finish
    await get_ingestion_pipeline().drain()


app = FastAPI(
    title=settings.app_name,
    description="Stores syslog records from remote hosts and ranks hosts "
                "by a visibility score built from recency, volume and severity.",
    version=__version__,
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Storage unavailable"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "hostlog.main:app",
        host="0.0.0.0",
        port=settings.http_port,
        reload=settings.debug,
    )
