"""Core utilities for the LLM client, prompts and listing matching.

- LLM client for OpenAI-compatible chat completions
- System prompts for the search assistant and logbook reader
- Alert matching predicate
"""

from app.core.llm import (
    LLMClient,
    LLMError,
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    create_llm_client,
)
from app.core.prompts import (
    SEARCH_ASSISTANT_SYSTEM_PROMPT,
    LOGBOOK_EXTRACTION_PROMPT,
    FALLBACK_REPLY,
    get_search_system_prompt,
)
from app.core.matching import listing_matches_alert

__all__ = [
    # LLM Client
    "LLMClient",
    "LLMError",
    "LLMConnectionError",
    "LLMRateLimitError",
    "LLMResponseError",
    "create_llm_client",
    # Prompts
    "SEARCH_ASSISTANT_SYSTEM_PROMPT",
    "LOGBOOK_EXTRACTION_PROMPT",
    "FALLBACK_REPLY",
    "get_search_system_prompt",
    # Matching
    "listing_matches_alert",
]
