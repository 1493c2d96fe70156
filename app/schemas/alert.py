"""Alert request/response schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AlertCreate(BaseModel):
    """New alert. Omitted constraints impose no restriction."""

    make: str | None = Field(default=None, min_length=1, max_length=50)
    model: str | None = Field(default=None, min_length=1, max_length=50)
    min_price: int | None = Field(default=None, ge=0)
    max_price: int | None = Field(default=None, ge=0)
    min_year: int | None = Field(default=None, ge=1900, le=2100)
    max_year: int | None = Field(default=None, ge=1900, le=2100)
    fuel_type: str | None = Field(default=None, min_length=1, max_length=20)
    transmission: str | None = Field(default=None, min_length=1, max_length=20)
    max_mileage: int | None = Field(default=None, ge=0)
    location: str | None = Field(default=None, min_length=1, max_length=100)
    notify_via_whatsapp: bool = True
    is_active: bool = True

    @model_validator(mode="after")
    def check_ranges(self) -> "AlertCreate":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        if self.min_year is not None and self.max_year is not None and self.min_year > self.max_year:
            raise ValueError("min_year must not exceed max_year")
        return self


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: uuid.UUID
    make: str | None = None
    model: str | None = None
    min_price: int | None = None
    max_price: int | None = None
    min_year: int | None = None
    max_year: int | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    max_mileage: int | None = None
    location: str | None = None
    notify_via_whatsapp: bool
    is_active: bool
    created_at: datetime | None = None


class AlertToggle(BaseModel):
    is_active: bool
