"""Search assistant conversation handling.

A chat session accumulates listing filters over many turns. Each turn
persists the buyer's utterance, asks the extractor for a reply and a filter
delta, merges the delta into the session and, when the assistant says it has
enough to go on, searches active listings with the merged filters.
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.prompts import FALLBACK_REPLY
from app.models.chat import ChatMessage, ChatSession, ChatSessionStatus, MessageRole
from app.models.listing import Listing
from app.schemas.filters import ListingFilters
from app.services.extraction import ExtractionSuccess, SearchExtractor
from app.services.listings import ListingStore

logger = logging.getLogger(__name__)

# Prior messages forwarded to the extractor on each turn
CHAT_HISTORY_LIMIT = 10


class ChatError(Exception):
    """Base exception for chat turn errors."""
    pass


class SessionClosedError(ChatError):
    """Raised when a turn is posted to a session that no longer accepts them."""
    pass


class ListingSearchError(ChatError):
    """Raised when the listing search for a turn fails."""
    pass


def merge_filters(current: ListingFilters, delta: ListingFilters) -> ListingFilters:
    """Overlay ``delta`` on ``current``.

    Fields set in the delta replace the current value; everything else is
    kept. A null in the delta never clears a filter.
    """
    changes = delta.model_dump(exclude_unset=True, exclude_none=True)
    return current.model_copy(update=changes)


class ChatStore:
    """Session and message persistence. Messages are append-only."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create_session(self, user_id: uuid.UUID | None = None) -> ChatSession:
        session = ChatSession(user_id=user_id, active_filters={}, status=ChatSessionStatus.ACTIVE)
        self._db.add(session)
        await self._db.flush()
        await self._db.refresh(session)
        logger.info(f"Created chat session {session.id} (user_id={user_id})")
        return session

    async def get_session(self, session_id: int) -> ChatSession | None:
        return await self._db.get(ChatSession, session_id)

    async def update_filters(self, session: ChatSession, filters: ListingFilters) -> None:
        session.active_filters = filters.as_dict()
        await self._db.flush()

    async def add_message(
        self,
        session_id: int,
        role: MessageRole,
        content: str,
        transcript_text: str | None = None,
    ) -> ChatMessage:
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
            transcript_text=transcript_text,
        )
        self._db.add(message)
        await self._db.flush()
        await self._db.refresh(message)
        return message

    async def recent_messages(self, session_id: int, limit: int = CHAT_HISTORY_LIMIT) -> list[ChatMessage]:
        """The ``limit`` most recent messages of a session, oldest first."""
        result = await self._db.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        messages = list(result.scalars().all())
        messages.reverse()
        return messages

    async def all_messages(self, session_id: int) -> list[ChatMessage]:
        result = await self._db.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        return list(result.scalars().all())


@dataclass
class ChatTurnResult:
    message: ChatMessage
    filters: ListingFilters
    should_search: bool
    listings: list[Listing] = field(default_factory=list)


def _message_body(content: str, transcript_text: str | None, is_voice: bool) -> str:
    transcript = (transcript_text or "").strip()
    if transcript and (is_voice or not content.strip()):
        return transcript
    return content


class ChatTurnProcessor:
    """Processes one buyer utterance against a session."""

    def __init__(
        self,
        store: ChatStore,
        extractor: SearchExtractor,
        listings: ListingStore,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._listings = listings

    async def process_turn(
        self,
        session: ChatSession,
        content: str,
        transcript_text: str | None = None,
        is_voice: bool = False,
    ) -> ChatTurnResult:
        """Run a full turn and return the assistant's answer.

        Extraction problems never escape: the reply falls back to a fixed
        prompt and the filters stay as they were.

        Raises:
            SessionClosedError: If the session is completed.
            ListingSearchError: If the listing search itself fails.
        """
        if session.status == ChatSessionStatus.COMPLETED:
            raise SessionClosedError(f"Chat session {session.id} is completed")

        current = ListingFilters.model_validate(session.active_filters or {})
        history = await self._store.recent_messages(session.id, CHAT_HISTORY_LIMIT)

        body = _message_body(content, transcript_text, is_voice)
        await self._store.add_message(
            session.id,
            MessageRole.USER,
            body,
            transcript_text=transcript_text if is_voice else None,
        )

        result = await self._extractor.extract(current, history, body)

        if isinstance(result, ExtractionSuccess):
            reply = result.extraction.message
            filters = merge_filters(current, result.extraction.filters)
            should_search = result.extraction.should_search
        else:
            logger.warning(f"Chat session {session.id}: extraction failed ({result.reason}), using fallback")
            reply = FALLBACK_REPLY
            filters = current
            should_search = False

        if filters != current:
            await self._store.update_filters(session, filters)

        assistant_message = await self._store.add_message(session.id, MessageRole.ASSISTANT, reply)

        listings: list[Listing] = []
        if should_search:
            try:
                listings = await self._listings.query(filters, active_only=True)
            except Exception as e:
                logger.exception(f"Listing search failed for chat session {session.id}: {e}")
                raise ListingSearchError("Listing search is temporarily unavailable") from e

        logger.info(
            f"Chat session {session.id} turn: filters={filters.as_dict()}, "
            f"should_search={should_search}, results={len(listings)}"
        )
        return ChatTurnResult(
            message=assistant_message,
            filters=filters,
            should_search=should_search,
            listings=listings,
        )
