"""API dependencies for dependency injection."""

import logging
import uuid
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, HTTPException, Header, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.llm import LLMClient
from app.db.session import get_db
from app.models.user import User
from app.services.whatsapp import WhatsAppNotifier

logger = logging.getLogger(__name__)
settings = get_settings()

# Rate limiter - uses client IP address
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)


async def get_redis(request: Request) -> redis.Redis:
    """Get Redis client from app state."""
    return request.app.state.redis


async def get_llm(request: Request) -> LLMClient | None:
    """LLM client built at startup; None when no API key is configured."""
    return getattr(request.app.state, "llm", None)


async def get_notifier(request: Request) -> WhatsAppNotifier:
    """WhatsApp notifier built at startup."""
    return request.app.state.notifier


# =============================================================================
# Identity Dependencies
# =============================================================================


def _parse_user_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        logger.warning(f"Request with malformed X-User-Id: {raw!r}")
        raise HTTPException(status_code=401, detail="Invalid user id")


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> User:
    """Resolve the caller from the X-User-Id header set by the auth gateway."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await db.get(User, _parse_user_id(x_user_id))
    if user is None:
        logger.warning(f"Request for unknown user {x_user_id}")
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


async def get_optional_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> User | None:
    """Like ``get_current_user`` but anonymous callers are allowed."""
    if not x_user_id:
        return None
    return await get_current_user(db, x_user_id)


# =============================================================================
# Type Aliases
# =============================================================================

DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis, Depends(get_redis)]
LLM = Annotated[LLMClient | None, Depends(get_llm)]
Notifier = Annotated[WhatsAppNotifier, Depends(get_notifier)]
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
