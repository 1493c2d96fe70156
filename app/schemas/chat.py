"""Search assistant chat schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.chat import ChatSessionStatus, MessageRole
from app.schemas.filters import ListingFilters
from app.schemas.listing import PublicListing


class ChatMessageIn(BaseModel):
    """Inbound user utterance.

    Voice clients send the transcription in ``transcript_text``; it replaces
    ``content`` (usually a placeholder) as the message body.
    """

    content: str = ""
    is_voice: bool = False
    transcript_text: str | None = None

    @model_validator(mode="after")
    def require_text(self) -> "ChatMessageIn":
        if not (self.transcript_text or "").strip() and not self.content.strip():
            raise ValueError("content or transcript_text is required")
        return self


class ChatMessageOut(BaseModel):
    """Message as returned to clients. Internal columns are never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    role: MessageRole
    content: str
    created_at: datetime | None = None


class ChatSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: ChatSessionStatus


class ChatSessionDetail(BaseModel):
    session: ChatSessionOut
    messages: list[ChatMessageOut] = Field(default_factory=list)


class ChatTurnResponse(BaseModel):
    message: ChatMessageOut
    filters: dict[str, str | int]
    should_search: bool
    listings: list[PublicListing] = Field(default_factory=list)


class SearchExtraction(BaseModel):
    """Structured answer expected from the language model for one turn."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str = Field(min_length=1)
    filters: ListingFilters = Field(default_factory=ListingFilters)
    should_search: bool = Field(default=False, alias="shouldSearch")

    @field_validator("message")
    @classmethod
    def message_has_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value

    @field_validator("filters", mode="before")
    @classmethod
    def null_filters_mean_no_change(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("should_search", mode="before")
    @classmethod
    def null_means_not_ready(cls, value: Any) -> Any:
        return False if value is None else value
