"""Search assistant chat endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import LLM, DbSession, OptionalUser, limiter, settings
from app.core.llm import LLMClient
from app.models.chat import ChatSession
from app.models.user import User
from app.schemas.chat import (
    ChatMessageIn,
    ChatMessageOut,
    ChatSessionDetail,
    ChatSessionOut,
    ChatTurnResponse,
)
from app.schemas.listing import PublicListing
from app.services.chat import (
    ChatStore,
    ChatTurnProcessor,
    ListingSearchError,
    SessionClosedError,
)
from app.services.extraction import SearchExtractor
from app.services.listings import ListingStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/chat", tags=["Chat"])


async def _load_session(store: ChatStore, session_id: int, user: User | None) -> ChatSession:
    """Fetch a session; one tied to a user is invisible to everyone else."""
    session = await store.get_session(session_id)
    if session is None or (session.user_id is not None and (user is None or user.id != session.user_id)):
        raise HTTPException(status_code=404, detail="Chat session not found")
    return session


@router.post("/sessions", response_model=ChatSessionOut, status_code=status.HTTP_201_CREATED)
async def create_session(db: DbSession, user: OptionalUser) -> ChatSession:
    return await ChatStore(db).create_session(user.id if user else None)


@router.get("/sessions/{session_id}", response_model=ChatSessionDetail)
async def get_session(session_id: int, db: DbSession, user: OptionalUser) -> ChatSessionDetail:
    store = ChatStore(db)
    session = await _load_session(store, session_id, user)
    messages = await store.all_messages(session.id)
    return ChatSessionDetail(
        session=ChatSessionOut.model_validate(session),
        messages=[ChatMessageOut.model_validate(m) for m in messages],
    )


def build_turn_processor(db: AsyncSession, llm: LLMClient | None) -> ChatTurnProcessor:
    return ChatTurnProcessor(
        store=ChatStore(db),
        extractor=SearchExtractor(llm, site_name=settings.public_site_name),
        listings=ListingStore(db),
    )


@router.post("/sessions/{session_id}/messages", response_model=ChatTurnResponse)
@limiter.limit(settings.chat_rate_limit)
async def post_message(
    request: Request,
    session_id: int,
    payload: ChatMessageIn,
    db: DbSession,
    user: OptionalUser,
    llm: LLM,
) -> ChatTurnResponse:
    """Send one utterance to the assistant and get its reply."""
    session = await _load_session(ChatStore(db), session_id, user)
    processor = build_turn_processor(db, llm)

    try:
        result = await processor.process_turn(
            session,
            payload.content,
            transcript_text=payload.transcript_text,
            is_voice=payload.is_voice,
        )
    except SessionClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ListingSearchError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return ChatTurnResponse(
        message=ChatMessageOut.model_validate(result.message),
        filters=result.filters.as_dict(),
        should_search=result.should_search,
        listings=[PublicListing.model_validate(listing) for listing in result.listings],
    )
