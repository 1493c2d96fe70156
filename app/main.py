"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import get_settings
from app.core.llm import create_llm_client
from app.api import alerts, chat, health, listings, users
from app.api.deps import limiter
from app.services.whatsapp import WhatsAppNotifier

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup: Initialize Redis connection pool
    app.state.redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    app.state.llm = create_llm_client(settings)
    app.state.notifier = WhatsAppNotifier(settings)

    if not settings.whatsapp_configured:
        logger.warning("WhatsApp not configured - alert notifications will not be delivered")

    logger.info(f"{settings.public_site_name} API started (env={settings.app_env})")

    yield
    # Shutdown: Close connections
    if app.state.llm is not None:
        await app.state.llm.close()
    await app.state.notifier.close()
    await app.state.redis.close()


app = FastAPI(
    title="AutoNinja Marketplace API",
    description="Used car listings, saved-search alerts and a conversational search assistant",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else ["https://autoninja.ie"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(users.router)
app.include_router(listings.router)
app.include_router(alerts.router)
app.include_router(chat.router)
