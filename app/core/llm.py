"""LLM client for OpenAI-compatible chat completion endpoints.

The client is constructed once at application startup and handed to the
services that need it (see ``app.api.deps.get_llm``); nothing in this module
holds a global instance.
"""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from app.config import Settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for language model calls."""
    pass


class LLMConnectionError(LLMError):
    """Network failure or timeout talking to the completions endpoint."""
    pass


class LLMRateLimitError(LLMError):
    """Endpoint answered 429."""
    pass


class LLMResponseError(LLMError):
    """Endpoint answered with something that is not a completion."""
    pass


def _parse_completion(data: dict[str, Any]) -> dict[str, Any]:
    """Reduce a completions payload to content, finish reason and usage."""
    choices = data.get("choices") or []
    first = choices[0] if choices else {}
    return {
        "content": (first.get("message") or {}).get("content"),
        "finish_reason": first.get("finish_reason", "stop"),
        "usage": data.get("usage") or {},
    }


class LLMClient:
    """Async client for an OpenAI-compatible ``/chat/completions`` API.

    Used in JSON mode by the search assistant and, with image content parts,
    by the logbook reader.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize the client.

        Args:
            settings: Application settings (API key, base URL, model, timeout).
            http_client: Optional pre-built HTTP client, mainly for tests.

        Raises:
            ValueError: If no API key is configured.
        """
        if not settings.llm_api_key:
            raise ValueError("LLM_API_KEY is not configured")

        self._model = settings.llm_model
        self._url = f"{settings.llm_base_url.rstrip('/')}/chat/completions"
        self._headers = {
            "Authorization": f"Bearer {settings.llm_api_key}",
            "Content-Type": "application/json",
        }
        self._client = http_client or httpx.AsyncClient(timeout=settings.llm_timeout_seconds)

    @retry(
        retry=retry_if_exception_type((LLMConnectionError, LLMRateLimitError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def chat_completion(
        self,
        messages: list[dict[str, Any]],
        json_mode: bool = False,
        temperature: float | None = None,
        max_tokens: int = 1024,
    ) -> dict[str, Any]:
        """Run one completion.

        Args:
            messages: Chat messages; ``content`` may be a string or a list of
                content parts (text / image_url).
            json_mode: Ask the model for a single JSON object as content.
            temperature: Optional sampling temperature.
            max_tokens: Completion token cap.

        Returns:
            ``{"content": str | None, "finish_reason": str, "usage": dict}``

        Raises:
            LLMConnectionError: Network failure or timeout (retried once).
            LLMRateLimitError: Endpoint rate limited the call (retried once).
            LLMResponseError: Unreadable response body.
            LLMError: Any other non-200 answer.
        """
        body: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        logger.debug(f"LLM request: model={self._model}, messages={len(messages)}, json_mode={json_mode}")

        try:
            response = await self._client.post(self._url, headers=self._headers, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling LLM API: {e}")
            raise LLMConnectionError(f"Timeout calling LLM API: {e}") from e
        except httpx.TransportError as e:
            logger.error(f"Connection error to LLM API: {e}")
            raise LLMConnectionError(f"Failed to connect to LLM API: {e}") from e

        if response.status_code == 429:
            raise LLMRateLimitError("LLM API rate limit exceeded")
        if response.status_code != 200:
            logger.error(f"LLM API error: {response.status_code} - {response.text}")
            raise LLMError(f"LLM API error: {response.status_code}")

        try:
            result = _parse_completion(response.json())
        except (ValueError, AttributeError, TypeError) as e:
            logger.exception(f"Unreadable LLM response: {e}")
            raise LLMResponseError(f"Unreadable LLM response: {e}") from e

        logger.debug(
            f"LLM response: finish_reason={result['finish_reason']}, "
            f"tokens={result['usage'].get('total_tokens', 0)}"
        )
        return result

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def create_llm_client(settings: Settings) -> LLMClient | None:
    """Build the client if an API key is configured.

    Returns None otherwise; the assistant then answers every turn with its
    fallback reply.
    """
    if not settings.llm_configured:
        logger.warning("LLM_API_KEY not configured - search assistant will run in fallback mode")
        return None
    return LLMClient(settings)
