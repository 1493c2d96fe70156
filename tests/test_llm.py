"""LLM client tests against a mocked completions endpoint."""

import json

import httpx
import pytest

from app.config import Settings
from app.core.llm import LLMClient, LLMError, LLMRateLimitError, create_llm_client


def settings(**overrides) -> Settings:
    values = dict(llm_api_key="sk-test", llm_base_url="https://llm.example/v1/", llm_model="test-model")
    values.update(overrides)
    return Settings(**values)


def client_with(handler) -> LLMClient:
    return LLMClient(settings(), http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def test_json_mode_request_and_parsed_response():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": '{"message": "hi"}'}, "finish_reason": "stop"}],
                "usage": {"total_tokens": 12},
            },
        )

    result = await client_with(handler).chat_completion([{"role": "user", "content": "hello"}], json_mode=True)

    assert result["content"] == '{"message": "hi"}'
    assert result["usage"]["total_tokens"] == 12
    request = seen[0]
    assert str(request.url) == "https://llm.example/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert body["response_format"] == {"type": "json_object"}


async def test_rate_limit_is_retried_then_raised():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, json={})

    with pytest.raises(LLMRateLimitError):
        await client_with(handler).chat_completion([{"role": "user", "content": "hello"}])
    assert len(calls) == 2


async def test_server_error_raises_without_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, text="upstream down")

    with pytest.raises(LLMError):
        await client_with(handler).chat_completion([{"role": "user", "content": "hello"}])
    assert len(calls) == 1


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        LLMClient(settings(llm_api_key=""))


def test_factory_returns_none_without_key():
    assert create_llm_client(settings(llm_api_key="")) is None
    assert isinstance(create_llm_client(settings()), LLMClient)
