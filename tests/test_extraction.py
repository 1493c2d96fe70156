"""Search extraction tests."""

import pytest

from app.core.llm import LLMConnectionError
from app.models.chat import ChatMessage, MessageRole
from app.schemas.filters import ListingFilters
from app.services.extraction import ExtractionFailure, ExtractionSuccess, SearchExtractor
from tests.conftest import FakeLLM, RawContent


async def test_successful_extraction():
    llm = FakeLLM({"message": "Diesel BMWs, got it.", "filters": {"make": "BMW", "fuelType": "Diesel"}, "shouldSearch": True})

    result = await SearchExtractor(llm).extract(ListingFilters(), [], "diesel bmw please")

    assert isinstance(result, ExtractionSuccess)
    assert result.extraction.message == "Diesel BMWs, got it."
    assert result.extraction.filters.as_dict() == {"make": "BMW", "fuel_type": "Diesel"}
    assert result.extraction.should_search is True
    assert llm.calls[0]["json_mode"] is True


async def test_request_carries_filters_history_and_utterance():
    llm = FakeLLM({"message": "ok"})
    history = [
        ChatMessage(role=MessageRole.USER, content="hi"),
        ChatMessage(role=MessageRole.ASSISTANT, content="hello"),
    ]

    await SearchExtractor(llm, site_name="AutoNinja").extract(ListingFilters(make="BMW"), history, "under 20k")

    messages = llm.calls[0]["messages"]
    assert messages[0]["role"] == "system"
    assert '"make": "BMW"' in messages[0]["content"]
    assert "AutoNinja" in messages[0]["content"]
    assert messages[1:] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "under 20k"},
    ]


async def test_optional_fields_default():
    result = await SearchExtractor(FakeLLM({"message": "Tell me more", "filters": None, "shouldSearch": None})).extract(
        ListingFilters(), [], "a car"
    )
    assert isinstance(result, ExtractionSuccess)
    assert result.extraction.filters.is_empty()
    assert result.extraction.should_search is False


@pytest.mark.parametrize(
    "reply",
    [
        "not json at all",
        "[1, 2, 3]",
        '"just a string"',
        "",
        {"filters": {"make": "BMW"}, "shouldSearch": True},
        {"message": "", "filters": {}},
        {"message": "   ", "filters": {"make": "BMW"}},
        {"message": "ok", "filters": {"maxPrice": "cheap"}},
        {"message": "ok", "filters": "BMW"},
        RawContent([{"type": "text", "text": "{}"}]),
        RawContent({"message": "ok"}),
        RawContent(42),
    ],
)
async def test_malformed_replies_become_failures(reply):
    result = await SearchExtractor(FakeLLM(reply)).extract(ListingFilters(), [], "hello")
    assert isinstance(result, ExtractionFailure)
    assert result.reason


async def test_llm_errors_become_failures():
    result = await SearchExtractor(FakeLLM(LLMConnectionError("down"))).extract(ListingFilters(), [], "hello")
    assert isinstance(result, ExtractionFailure)
    assert result.reason.startswith("llm_error")


async def test_unexpected_errors_become_failures():
    result = await SearchExtractor(FakeLLM(RuntimeError("boom"))).extract(ListingFilters(), [], "hello")
    assert isinstance(result, ExtractionFailure)


async def test_without_llm_always_fails():
    result = await SearchExtractor(None).extract(ListingFilters(), [], "hello")
    assert result == ExtractionFailure("llm_not_configured")


async def test_non_text_content_is_reported():
    result = await SearchExtractor(FakeLLM(RawContent([{"type": "text", "text": "{}"}]))).extract(
        ListingFilters(), [], "hello"
    )
    assert result == ExtractionFailure("invalid_content")
