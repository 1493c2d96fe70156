"""Liveness and dependency health endpoints."""

import time
from datetime import datetime, timezone
from typing import Awaitable, Callable

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from app.api.deps import LLM, DbSession, RedisClient, settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ServiceHealth(BaseModel):
    status: str
    latency_ms: float | None = None
    error: str | None = None


class DetailedHealthResponse(BaseModel):
    """Per-dependency status. Unconfigured integrations report ``disabled``."""

    status: str
    timestamp: str
    services: dict[str, ServiceHealth]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _probe(check: Callable[[], Awaitable[object]]) -> ServiceHealth:
    start = time.perf_counter()
    try:
        await check()
    except Exception as e:
        return ServiceHealth(status="unhealthy", error=str(e))
    return ServiceHealth(status="healthy", latency_ms=round((time.perf_counter() - start) * 1000, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=_now())


@router.get("/health/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    db: DbSession,
    redis_client: RedisClient,
    llm: LLM,
) -> DetailedHealthResponse:
    """Database and Redis round trips, plus which integrations are switched on.

    The assistant and alert notifications degrade rather than fail without
    their integrations, so ``disabled`` does not make the service degraded.
    """
    services = {
        "database": await _probe(lambda: db.execute(text("SELECT 1"))),
        "redis": await _probe(redis_client.ping),
        "llm": ServiceHealth(status="healthy" if llm is not None else "disabled"),
        "whatsapp": ServiceHealth(status="healthy" if settings.whatsapp_configured else "disabled"),
    }

    degraded = any(s.status == "unhealthy" for s in services.values())
    return DetailedHealthResponse(
        status="degraded" if degraded else "healthy",
        timestamp=_now(),
        services=services,
    )
