"""
FastAPI Main Application

Entry point for the Tech Post Cast API.
Following official FastAPI documentation:
https://fastapi.tiangolo.com/
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from postcast.api import (
    dashboard_router,
    personalized_feeds_router,
    qiita_posts_router,
    subscription_router,
    user_settings_router,
    webhooks_router,
)
from postcast.config import get_logger, settings, setup_logging
from postcast.db import close_db, init_db
from postcast.errors import PostcastError

setup_logging()
logger = get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup, optionally create tables, dispose connections on shutdown."""
    logger.info(
        "Starting Tech Post Cast API",
        environment=settings.app_env,
        debug=settings.debug,
    )
    if settings.db_create_tables:
        await init_db()
        logger.info("Database tables created")

    yield

    logger.info("Shutting down Tech Post Cast API")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="""
    API backend for personalized tech podcasts.

    ## Features
    - **Personalized Feeds**: Feeds with tag, author, date and likes filters
    - **Personal RSS**: Per-user podcast RSS with rotatable tokens
    - **Subscription**: Plan limits and usage
    - **Program Attempts**: Generation history and statistics
    - **Dashboard**: Stats, generated programs and generation history
    - **User Sync**: Clerk user webhooks provision accounts on the Free plan

    ## Authentication
    All endpoints except `/health` and `/api/v1/webhooks/*` require an
    identity-provider session JWT as a Bearer token. Webhooks are verified
    by their Svix signature.
    """,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

logger.info("CORS origins configured", origins=settings.cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(PostcastError)
async def domain_exception_handler(request: Request, exc: PostcastError) -> JSONResponse:
    """Map domain errors onto their HTTP status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        method=request.method,
        error_code=exc.error_code,
        error=exc.message,
        **{k: v for k, v in exc.context.items() if isinstance(v, (str, int, float, bool))},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An unexpected error occurred. Please try again later.",
            "error_code": "INTERNAL_ERROR",
        },
    )


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    return {
        "status": "healthy",
        "environment": settings.app_env,
        "version": API_VERSION,
    }


# API v1 routers
app.include_router(personalized_feeds_router, prefix="/api/v1")
app.include_router(user_settings_router, prefix="/api/v1")
app.include_router(subscription_router, prefix="/api/v1")
app.include_router(qiita_posts_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(webhooks_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "postcast.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
