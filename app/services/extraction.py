"""Natural-language extraction for the search assistant.

One call per chat turn: the language model sees the session's current
filters, the recent conversation and the new utterance, and answers with a
JSON object holding its reply, a filter delta and a search-readiness flag.

Every way the call can go wrong collapses into ``ExtractionFailure``; the
caller decides what to say to the user.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from pydantic import ValidationError

from app.core.llm import LLMClient, LLMError
from app.core.prompts import get_search_system_prompt
from app.models.chat import MessageRole
from app.schemas.chat import SearchExtraction
from app.schemas.filters import ListingFilters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionSuccess:
    extraction: SearchExtraction


@dataclass(frozen=True)
class ExtractionFailure:
    reason: str


ExtractionResult = ExtractionSuccess | ExtractionFailure


def _role_name(role: Any) -> str:
    if isinstance(role, MessageRole):
        return role.value
    return str(role)


class SearchExtractor:
    """Turns a buyer's utterance into a reply plus a filter delta."""

    def __init__(self, llm: LLMClient | None, site_name: str = "AutoNinja") -> None:
        self._llm = llm
        self._site_name = site_name

    def build_messages(
        self,
        current_filters: ListingFilters,
        history: Sequence[Any],
        utterance: str,
    ) -> list[dict[str, str]]:
        """System prompt, then prior turns oldest first, then the utterance."""
        messages = [
            {
                "role": "system",
                "content": get_search_system_prompt(current_filters.as_dict(), self._site_name),
            }
        ]
        for item in history:
            messages.append({"role": _role_name(item.role), "content": item.content})
        messages.append({"role": "user", "content": utterance})
        return messages

    async def extract(
        self,
        current_filters: ListingFilters,
        history: Sequence[Any],
        utterance: str,
    ) -> ExtractionResult:
        """Run one extraction. Never raises."""
        if self._llm is None:
            return ExtractionFailure("llm_not_configured")

        messages = self.build_messages(current_filters, history, utterance)

        try:
            response = await self._llm.chat_completion(messages=messages, json_mode=True)
        except LLMError as e:
            logger.error(f"Search extraction LLM call failed: {e}")
            return ExtractionFailure(f"llm_error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error during search extraction: {e}")
            return ExtractionFailure(f"unexpected_error: {e}")

        content = response.get("content")
        if not content:
            logger.warning("Search extraction returned empty content")
            return ExtractionFailure("empty_response")
        if not isinstance(content, str):
            logger.warning(f"Search extraction returned {type(content).__name__} content, expected text")
            return ExtractionFailure("invalid_content")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Search extraction returned non-JSON content: {e}")
            return ExtractionFailure("invalid_json")

        if not isinstance(payload, dict):
            logger.warning(f"Search extraction returned {type(payload).__name__}, expected object")
            return ExtractionFailure("not_an_object")

        try:
            extraction = SearchExtraction.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Search extraction failed validation: {e.error_count()} error(s)")
            return ExtractionFailure("invalid_shape")

        logger.debug(
            f"Extracted filters={extraction.filters.as_dict()}, should_search={extraction.should_search}"
        )
        return ExtractionSuccess(extraction)
