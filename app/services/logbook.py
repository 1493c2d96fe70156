"""Logbook reading and listing verification.

The logbook image goes to the language model's vision input; the fields it
reads back are compared with what the seller typed into the listing.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from app.core.llm import LLMClient, LLMError
from app.core.prompts import LOGBOOK_EXTRACTION_PROMPT
from app.schemas.logbook import LogbookData, LogbookVerification

logger = logging.getLogger(__name__)

# Share of compared fields that must agree, with no disagreement at all
VERIFICATION_THRESHOLD = 75

_WHITESPACE = re.compile(r"\s+")


class LogbookExtractionError(Exception):
    """Raised when a logbook image cannot be read."""
    pass


def image_url_for(image: str, mime_type: str) -> str:
    """URL to hand to the vision model; bare base64 becomes a data URL."""
    if image.startswith(("data:", "http://", "https://")):
        return image
    return f"data:{mime_type};base64,{image}"


class LogbookReader:
    """Reads vehicle details from a logbook image."""

    def __init__(self, llm: LLMClient | None) -> None:
        self._llm = llm

    async def extract(self, image: str, mime_type: str = "image/jpeg") -> LogbookData:
        """Extract logbook fields from an image.

        Raises:
            LogbookExtractionError: If no model is configured, the call fails
                or the answer is not a usable JSON object.
        """
        if self._llm is None:
            raise LogbookExtractionError("Logbook reading is not configured")

        messages: list[dict[str, Any]] = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": LOGBOOK_EXTRACTION_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_url_for(image, mime_type)}},
                ],
            }
        ]

        try:
            response = await self._llm.chat_completion(messages=messages, json_mode=True)
            content = response.get("content") or ""
            if not isinstance(content, str):
                raise LogbookExtractionError("Logbook extraction did not return text")
            payload = json.loads(content)
            if not isinstance(payload, dict):
                raise LogbookExtractionError("Logbook extraction did not return an object")
            data = LogbookData.model_validate(payload)
        except LogbookExtractionError:
            raise
        except (LLMError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Logbook extraction failed: {e}")
            raise LogbookExtractionError("Failed to extract logbook data from image") from e

        logger.info(f"Logbook extracted: make={data.make}, model={data.model}, confidence={data.confidence}")
        return data


def _normalize_registration(value: str) -> str:
    return _WHITESPACE.sub("", value).upper()


def verify_logbook_data(logbook: LogbookData, listing: Any) -> LogbookVerification:
    """Compare logbook fields with a listing.

    Only fields present on both sides are compared. Make is compared
    case-insensitively, model passes when either contains the other, year
    must be equal and registrations are compared without whitespace.
    """
    mismatches: list[str] = []
    matches = 0
    checks = 0

    if logbook.make and listing.make:
        checks += 1
        if logbook.make.lower() == listing.make.lower():
            matches += 1
        else:
            mismatches.append(f"Make mismatch: {logbook.make} vs {listing.make}")

    if logbook.model and listing.model:
        checks += 1
        logbook_model = logbook.model.lower()
        listing_model = listing.model.lower()
        if logbook_model in listing_model or listing_model in logbook_model:
            matches += 1
        else:
            mismatches.append(f"Model mismatch: {logbook.model} vs {listing.model}")

    if logbook.year_of_manufacture and listing.year:
        checks += 1
        if logbook.year_of_manufacture == listing.year:
            matches += 1
        else:
            mismatches.append(f"Year mismatch: {logbook.year_of_manufacture} vs {listing.year}")

    if logbook.registration_number and listing.registration:
        checks += 1
        if _normalize_registration(logbook.registration_number) == _normalize_registration(listing.registration):
            matches += 1
        else:
            mismatches.append(
                f"Registration mismatch: {logbook.registration_number} vs {listing.registration}"
            )

    match_percentage = round(matches / checks * 100) if checks else 0
    return LogbookVerification(
        is_verified=match_percentage >= VERIFICATION_THRESHOLD and not mismatches,
        match_percentage=match_percentage,
        mismatches=mismatches,
    )
