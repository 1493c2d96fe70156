"""Listing request/response schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.listing import FuelType, ListingStatus, MileageUnit, Transmission


class ListingBase(BaseModel):
    vehicle_type: str = "Car"
    registration: str | None = Field(default=None, max_length=20)
    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    derivative: str | None = None
    year: int = Field(ge=1900, le=2100)
    price: int = Field(ge=0)
    mileage: int = Field(ge=0)
    mileage_unit: MileageUnit = MileageUnit.KM
    location: str = Field(min_length=1, max_length=100)
    county: str | None = None
    fuel_type: FuelType
    transmission: Transmission
    engine_size: str | None = None
    title: str | None = None
    description: str | None = None
    body_type: str | None = None
    color: str | None = None
    condition: str | None = None
    owners: int = Field(default=1, ge=0)
    image_url: str | None = None


class ListingCreate(ListingBase):
    """Payload for creating a listing.

    Without a payment step in front of it, a new listing goes live
    immediately unless the seller saves it as a draft.
    """

    status: ListingStatus = ListingStatus.ACTIVE


class ListingUpdate(BaseModel):
    """Partial edit of a listing. Status changes go through the status endpoint."""

    registration: str | None = None
    make: str | None = Field(default=None, min_length=1)
    model: str | None = Field(default=None, min_length=1)
    derivative: str | None = None
    year: int | None = Field(default=None, ge=1900, le=2100)
    price: int | None = Field(default=None, ge=0)
    mileage: int | None = Field(default=None, ge=0)
    mileage_unit: MileageUnit | None = None
    location: str | None = Field(default=None, min_length=1)
    county: str | None = None
    fuel_type: FuelType | None = None
    transmission: Transmission | None = None
    engine_size: str | None = None
    title: str | None = None
    description: str | None = None
    body_type: str | None = None
    color: str | None = None
    condition: str | None = None
    owners: int | None = Field(default=None, ge=0)
    image_url: str | None = None


class ListingStatusUpdate(BaseModel):
    status: ListingStatus


class ListingOut(ListingBase):
    """Full listing as seen by its seller."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: uuid.UUID | None = None
    verification_score: int = 0
    logbook_verified: bool = False
    mileage_verified: bool = False
    photos_verified: bool = False
    price_good: bool = False
    status: ListingStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicListing(BaseModel):
    """Listing as shown to buyers: no seller reference or internal fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    make: str
    model: str
    year: int
    price: int
    mileage: int
    mileage_unit: MileageUnit
    location: str
    fuel_type: FuelType
    transmission: Transmission
    image_url: str | None = None
    verification_score: int = 0
    logbook_verified: bool = False
    mileage_verified: bool = False
    photos_verified: bool = False
    price_good: bool = False
    body_type: str | None = None
    color: str | None = None
    condition: str | None = None
