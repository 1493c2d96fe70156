"""Shared fixtures: in-memory database, fakes for external collaborators."""

import json
import os
import uuid
from collections.abc import AsyncIterator
from typing import Any

# Settings are cached on first import, so the environment must be in place first
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LLM_API_KEY"] = ""
os.environ["WHATSAPP_ACCESS_TOKEN"] = ""
os.environ["WHATSAPP_PHONE_NUMBER_ID"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.llm import LLMError
from app.db import session as db_session
from app.db.base import Base
from app.models.listing import FuelType, Listing, ListingStatus, Transmission
from app.models.user import User
from app.services.whatsapp import MessageSendError


class RawContent:
    """Queued reply returned as ``content`` exactly as given, without encoding."""

    def __init__(self, value: Any) -> None:
        self.value = value


class FakeLLM:
    """Stands in for ``LLMClient``.

    Each queued reply is either a string (returned as content), a dict
    (serialised to JSON), a ``RawContent`` (returned untouched) or an
    exception (raised).
    """

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def chat_completion(self, messages: list[dict[str, Any]], **kwargs: Any) -> dict[str, Any]:
        self.calls.append({"messages": messages, **kwargs})
        if not self.replies:
            raise LLMError("no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, RawContent):
            reply = reply.value
        elif isinstance(reply, dict):
            reply = json.dumps(reply)
        return {"content": reply, "finish_reason": "stop", "usage": {}}

    async def close(self) -> None:
        pass


class FakeNotifier:
    """Stands in for ``WhatsAppNotifier``; records every send."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.sent: list[tuple[str, str]] = []
        self.attempts: list[str] = []
        self.fail_for = fail_for or set()

    async def send_text_message(self, to: str, text: str) -> dict[str, Any]:
        self.attempts.append(to)
        if to in self.fail_for:
            raise MessageSendError(f"refused: {to}")
        self.sent.append((to, text))
        return {"messages": [{"id": f"wamid.{len(self.sent)}"}]}

    async def close(self) -> None:
        pass


@pytest.fixture
async def engine() -> AsyncIterator[Any]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: Any, monkeypatch: pytest.MonkeyPatch) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database.

    Also installed as the application's factory, so request sessions and
    background-task sessions both land in the same in-memory database.
    """
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_session, "async_session_maker", maker)
    return maker


@pytest.fixture
async def db(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    fake_llm: FakeLLM,
    notifier: FakeNotifier,
) -> AsyncIterator[AsyncClient]:
    from app.main import app

    app.state.llm = fake_llm
    app.state.notifier = notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def make_user(db: AsyncSession, phone: str | None = "087 123 4567", **kwargs: Any) -> User:
    user = User(
        email=kwargs.pop("email", f"{uuid.uuid4().hex[:8]}@example.ie"),
        first_name=kwargs.pop("first_name", "Aoife"),
        phone_number=phone,
        **kwargs,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def listing_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = dict(
        make="BMW",
        model="3 Series",
        year=2022,
        price=20000,
        mileage=30000,
        location="Dublin",
        fuel_type=FuelType.DIESEL,
        transmission=Transmission.AUTOMATIC,
        status=ListingStatus.ACTIVE,
    )
    data.update(overrides)
    return data


async def make_listing(db: AsyncSession, **overrides: Any) -> Listing:
    listing = Listing(**listing_data(**overrides))
    db.add(listing)
    await db.commit()
    await db.refresh(listing)
    return listing
