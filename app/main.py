"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI  # The FastAPI framework
from fastapi.middleware.cors import CORSMiddleware  # Cross-Origin Resource Sharing

from app.core.config import settings  # Application settings
from app.core.logging_config import configure_logging
from app.routers import dashboard  # Dashboard data API
from app.routers import google_token  # OAuth code exchange relay
from app.services.studio_service import studio_service


configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("studio.main")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# The Google client is initialized lazily by the first API call; on shutdown
# the shared HTTP client is closed and the bootstrap reset.
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} starting")
    yield
    await studio_service.bootstrap.reset()
    logger.info(f"{settings.APP_NAME} stopped")


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
# - docs_url: Swagger UI at http://localhost:8000/docs
# - redoc_url: ReDoc at http://localhost:8000/redoc
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Only the dashboard front-ends in CORS_ALLOWED_ORIGINS may call the API from
# a browser. Requests from other origins get no Access-Control-Allow-Origin
# header, so the browser blocks the response.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# dashboard.router: /dashboard session, projects, schedule, drive upload
# google_token.router: /api/google/token code-for-token exchange
app.include_router(dashboard.router)
app.include_router(google_token.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Does NOT check Google connectivity (the client is initialized lazily).

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
