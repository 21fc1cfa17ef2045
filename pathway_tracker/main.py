"""
Pathway Tracker API application
"""

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from pathway_tracker import __version__
from pathway_tracker.api.v1.router import api_router
from pathway_tracker.core.config import settings
from pathway_tracker.core.database import AsyncSessionLocal, check_database_health, close_database, init_database
from pathway_tracker.core.logging import setup_logging
from pathway_tracker.middleware.logging import REQUEST_ID_HEADER, LoggingMiddleware
from pathway_tracker.middleware.security import RateLimitMiddleware, SecurityHeadersMiddleware
from pathway_tracker.services.bootstrap_admin import ensure_bootstrap_admin_exists

setup_logging()
logger = structlog.get_logger()

SERVICE_NAME = "pathway-tracker-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Pathway Tracker API starting", version=__version__, environment=settings.ENVIRONMENT)
    await init_database()
    async with AsyncSessionLocal() as session:
        await ensure_bootstrap_admin_exists(session)

    yield

    logger.info("Pathway Tracker API stopping")
    await close_database()


async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; details go to the log, never to the client"""
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": "An unexpected error occurred"},
    )


def create_app() -> FastAPI:
    docs_enabled = settings.ENVIRONMENT == "development"
    application = FastAPI(
        title="Pathway Tracker API",
        description="Church member integration tracking with role-based access control",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Added last runs first: logging wraps throttling, which wraps the headers
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(RateLimitMiddleware)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "X-RateLimit-Remaining"],
        max_age=600,
    )
    if settings.is_production:
        application.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

    application.include_router(api_router, prefix="/api/v1")
    application.add_exception_handler(Exception, unhandled_exception)
    return application


app = create_app()


@app.get("/health")
async def health():
    """Unauthenticated probe for load balancers: 503 when the database is unreachable"""
    db_ok = await check_database_health()
    body = {
        "status": "healthy" if db_ok else "unhealthy",
        "service": SERVICE_NAME,
        "version": __version__,
        "timestamp": time.time(),
        "database": "connected" if db_ok else "unavailable",
    }
    return JSONResponse(status_code=200 if db_ok else 503, content=body)


@app.get("/")
async def root():
    return {
        "message": "Pathway Tracker API",
        "version": __version__,
        "docs": app.docs_url or "disabled",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pathway_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
