"""FastAPI application entry point."""

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from campus_energy import models  # noqa: F401
from campus_energy.api.routes import (
    alerts,
    auth,
    blocks,
    control,
    devices,
    health,
    payments,
    predictions,
    users,
)
from campus_energy.core.config import settings
from campus_energy.core.database import Base, engine
from campus_energy.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    configure_logging()
    # Startup: Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Campus energy quota ledger and device control API",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log method, path, status and duration of API calls."""
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        logger.info(
            "%s %s %s in %.0fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
    return response


# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(blocks.router, prefix="/api")
app.include_router(devices.router, prefix="/api")
app.include_router(control.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(predictions.router, prefix="/api")
app.include_router(alerts.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campus_energy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
