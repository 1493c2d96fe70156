"""Listing model - a vehicle for sale."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class FuelType(str, enum.Enum):
    """Fuel type."""

    PETROL = "Petrol"
    DIESEL = "Diesel"
    HYBRID = "Hybrid"
    ELECTRIC = "Electric"
    PLUG_IN_HYBRID = "Plug-in Hybrid"
    LPG = "LPG"


class Transmission(str, enum.Enum):
    """Gearbox type."""

    MANUAL = "Manual"
    AUTOMATIC = "Automatic"
    SEMI_AUTOMATIC = "Semi-Automatic"
    CVT = "CVT"


class MileageUnit(str, enum.Enum):
    KM = "km"
    MILES = "miles"


class ListingStatus(str, enum.Enum):
    """Listing lifecycle status."""

    DRAFT = "draft"
    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    SOLD = "sold"
    EXPIRED = "expired"


class Listing(Base):
    """A used vehicle offered for sale by a seller."""

    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    seller_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    vehicle_type: Mapped[str] = mapped_column(String(20), default="Car")
    registration: Mapped[str | None] = mapped_column(String(20), nullable=True)
    make: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    derivative: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False)
    mileage_unit: Mapped[MileageUnit] = mapped_column(
        Enum(MileageUnit, values_callable=_enum_values), default=MileageUnit.KM
    )
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    county: Mapped[str | None] = mapped_column(String(50), nullable=True)
    fuel_type: Mapped[FuelType] = mapped_column(
        Enum(FuelType, values_callable=_enum_values), nullable=False
    )
    transmission: Mapped[Transmission] = mapped_column(
        Enum(Transmission, values_callable=_enum_values), nullable=False
    )
    engine_size: Mapped[str | None] = mapped_column(String(10), nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    color: Mapped[str | None] = mapped_column(String(30), nullable=True)
    condition: Mapped[str | None] = mapped_column(String(30), nullable=True)
    owners: Mapped[int] = mapped_column(Integer, default=1)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Trust signals
    verification_score: Mapped[int] = mapped_column(Integer, default=0)
    logbook_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    mileage_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    photos_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    price_good: Mapped[bool] = mapped_column(Boolean, default=False)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, values_callable=_enum_values),
        default=ListingStatus.ACTIVE,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
