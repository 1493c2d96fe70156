"""Logbook (vehicle registration document) schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LogbookData(BaseModel):
    """Fields read off a logbook image. Anything unreadable is left unset."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    vin: str | None = None
    registration_number: str | None = None
    make: str | None = None
    model: str | None = None
    year_of_manufacture: int | None = None
    owners: int | None = None
    color: str | None = None
    engine_size: str | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    confidence: int | None = Field(default=None, ge=0, le=100)


class LogbookVerifyRequest(BaseModel):
    """Image as an http(s) or data URL, or bare base64 with its MIME type."""

    image: str = Field(min_length=1)
    mime_type: str = "image/jpeg"


class LogbookVerification(BaseModel):
    is_verified: bool
    match_percentage: int
    mismatches: list[str] = Field(default_factory=list)


class LogbookVerifyResponse(BaseModel):
    logbook: LogbookData
    verification: LogbookVerification
    logbook_verified: bool
