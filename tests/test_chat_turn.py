"""Chat turn processor tests."""

import pytest

from app.core.llm import LLMConnectionError
from app.core.prompts import FALLBACK_REPLY
from app.models.chat import ChatSessionStatus, MessageRole
from app.models.listing import ListingStatus
from app.schemas.filters import ListingFilters
from app.services.chat import (
    CHAT_HISTORY_LIMIT,
    ChatStore,
    ChatTurnProcessor,
    ListingSearchError,
    SessionClosedError,
)
from app.services.extraction import SearchExtractor
from app.services.listings import ListingStore
from tests.conftest import FakeLLM, RawContent, make_listing


class BrokenListingStore:
    async def query(self, filters, active_only=True, limit=None):
        raise RuntimeError("connection reset")


def processor(db, llm, listings=None):
    return ChatTurnProcessor(ChatStore(db), SearchExtractor(llm), listings or ListingStore(db))


async def new_session(db, **filters):
    store = ChatStore(db)
    session = await store.create_session()
    if filters:
        await store.update_filters(session, ListingFilters(**filters))
    return session


async def test_turn_merges_delta_into_session_filters(db):
    session = await new_session(db, make="BMW", max_price=20000)
    llm = FakeLLM({"message": "Audi it is.", "filters": {"make": "Audi"}, "shouldSearch": False})

    result = await processor(db, llm).process_turn(session, "actually an audi")

    assert result.filters.as_dict() == {"make": "Audi", "max_price": 20000}
    assert session.active_filters == {"make": "Audi", "max_price": 20000}
    assert result.message.role == MessageRole.ASSISTANT
    assert result.message.content == "Audi it is."
    assert result.should_search is False
    assert result.listings == []


async def test_extraction_failure_falls_back_and_keeps_filters(db):
    session = await new_session(db, make="BMW", max_price=20000)

    result = await processor(db, FakeLLM(LLMConnectionError("timeout"))).process_turn(session, "hello?")

    assert result.message.content == FALLBACK_REPLY
    assert result.filters == ListingFilters(make="BMW", max_price=20000)
    assert result.should_search is False
    assert result.listings == []


async def test_malformed_reply_falls_back(db):
    session = await new_session(db, location="Cork")

    result = await processor(db, FakeLLM("Sure! Here are some cars")).process_turn(session, "cars")

    assert result.message.content == FALLBACK_REPLY
    assert result.filters.as_dict() == {"location": "Cork"}
    assert result.should_search is False


async def test_non_text_reply_falls_back(db):
    session = await new_session(db, make="BMW")
    llm = FakeLLM(RawContent([{"type": "text", "text": "{\"message\": \"hi\"}"}]))

    result = await processor(db, llm).process_turn(session, "cars")

    assert result.message.content == FALLBACK_REPLY
    assert result.filters.as_dict() == {"make": "BMW"}
    assert result.should_search is False


async def test_no_llm_falls_back(db):
    session = await new_session(db)
    result = await processor(db, None).process_turn(session, "hi")
    assert result.message.content == FALLBACK_REPLY


async def test_both_sides_of_the_turn_are_persisted(db):
    session = await new_session(db)
    llm = FakeLLM({"message": "What's your budget?"})

    await processor(db, llm).process_turn(session, "I want a BMW")

    messages = await ChatStore(db).all_messages(session.id)
    assert [(m.role, m.content) for m in messages] == [
        (MessageRole.USER, "I want a BMW"),
        (MessageRole.ASSISTANT, "What's your budget?"),
    ]


async def test_history_is_bounded_to_most_recent_messages(db):
    session = await new_session(db)
    store = ChatStore(db)
    for i in range(15):
        role = MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT
        await store.add_message(session.id, role, f"message {i}")
    llm = FakeLLM({"message": "ok"})

    await processor(db, llm).process_turn(session, "latest")

    sent = llm.calls[0]["messages"]
    history = sent[1:-1]
    assert len(history) == CHAT_HISTORY_LIMIT
    assert [m["content"] for m in history] == [f"message {i}" for i in range(5, 15)]
    assert sent[-1] == {"role": "user", "content": "latest"}


async def test_search_runs_on_merged_filters(db):
    await make_listing(db, make="Audi", price=18000)
    await make_listing(db, make="Audi", price=26000)
    await make_listing(db, make="BMW", price=15000)
    await make_listing(db, make="Audi", price=17000, status=ListingStatus.SOLD)
    session = await new_session(db, max_price=20000)
    llm = FakeLLM({"message": "Searching Audis.", "filters": {"make": "Audi"}, "shouldSearch": True})

    result = await processor(db, llm).process_turn(session, "audi")

    assert result.should_search is True
    assert [(car.make, car.price) for car in result.listings] == [("Audi", 18000)]


async def test_search_failure_is_reported(db):
    session = await new_session(db)
    llm = FakeLLM({"message": "Searching.", "filters": {"make": "BMW"}, "shouldSearch": True})

    with pytest.raises(ListingSearchError):
        await processor(db, llm, BrokenListingStore()).process_turn(session, "bmw")


async def test_voice_turn_uses_transcript(db):
    session = await new_session(db)
    llm = FakeLLM({"message": "Nice."})

    await processor(db, llm).process_turn(
        session, "[voice message]", transcript_text="a red golf", is_voice=True
    )

    user_message = (await ChatStore(db).all_messages(session.id))[0]
    assert user_message.content == "a red golf"
    assert user_message.transcript_text == "a red golf"
    assert llm.calls[0]["messages"][-1]["content"] == "a red golf"


async def test_transcript_is_not_stored_for_typed_messages(db):
    session = await new_session(db)

    await processor(db, FakeLLM({"message": "ok"})).process_turn(session, "typed", transcript_text="stray")

    user_message = (await ChatStore(db).all_messages(session.id))[0]
    assert user_message.content == "typed"
    assert user_message.transcript_text is None


async def test_completed_session_rejects_turns(db):
    session = await new_session(db)
    session.status = ChatSessionStatus.COMPLETED
    llm = FakeLLM({"message": "ok"})

    with pytest.raises(SessionClosedError):
        await processor(db, llm).process_turn(session, "hello")
    assert llm.calls == []
