"""Listing store.

Persistence and filtered search over vehicle listings. Seller-scoped writes
match on both the listing id and the seller id, so a seller can never touch
another seller's listing; a miss simply returns None / False.
"""

import enum
import logging
import uuid
from typing import Any

from sqlalchemy import delete, false, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.listing import FuelType, Listing, ListingStatus, Transmission
from app.schemas.filters import ListingFilters
from app.schemas.listing import ListingCreate, ListingUpdate

logger = logging.getLogger(__name__)


def _enum_equals(column: Any, enum_cls: type[enum.Enum], value: str) -> Any:
    """Exact match on an enum column; a value outside the enum matches nothing.

    Postgres rejects unknown labels for native enums, so they never reach SQL.
    """
    if value not in {member.value for member in enum_cls}:
        return false()
    return column == enum_cls(value)


def build_filter_conditions(filters: ListingFilters) -> list[Any]:
    """Translate set filters into SQL conditions (ANDed by the caller)."""
    conditions: list[Any] = []

    if filters.make is not None:
        conditions.append(Listing.make == filters.make)
    if filters.model is not None:
        conditions.append(Listing.model == filters.model)
    if filters.min_price is not None:
        conditions.append(Listing.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Listing.price <= filters.max_price)
    if filters.min_year is not None:
        conditions.append(Listing.year >= filters.min_year)
    if filters.max_year is not None:
        conditions.append(Listing.year <= filters.max_year)
    if filters.fuel_type is not None:
        conditions.append(_enum_equals(Listing.fuel_type, FuelType, filters.fuel_type))
    if filters.transmission is not None:
        conditions.append(_enum_equals(Listing.transmission, Transmission, filters.transmission))
    if filters.max_mileage is not None:
        conditions.append(Listing.mileage <= filters.max_mileage)
    if filters.location is not None:
        conditions.append(Listing.location == filters.location)
    if filters.body_type is not None:
        conditions.append(Listing.body_type == filters.body_type)
    if filters.color is not None:
        conditions.append(Listing.color == filters.color)

    return conditions


class ListingStore:
    """Database access for listings."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create(self, data: ListingCreate, seller_id: uuid.UUID | None) -> Listing:
        listing = Listing(**data.model_dump(), seller_id=seller_id)
        self._db.add(listing)
        await self._db.flush()
        await self._db.refresh(listing)
        logger.info(
            f"Created listing: id={listing.id}, seller_id={seller_id}, status={listing.status.value}"
        )
        return listing

    async def get(self, listing_id: int) -> Listing | None:
        return await self._db.get(Listing, listing_id)

    async def query(
        self,
        filters: ListingFilters,
        active_only: bool = True,
        limit: int | None = None,
    ) -> list[Listing]:
        """Listings satisfying every set filter, newest first.

        Unset filters impose no constraint; an empty filter object returns
        every (active) listing.
        """
        conditions = build_filter_conditions(filters)
        if active_only:
            conditions.append(Listing.status == ListingStatus.ACTIVE)

        stmt = select(Listing).where(*conditions).order_by(Listing.created_at.desc(), Listing.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._db.execute(stmt)
        listings = list(result.scalars().all())
        logger.debug(f"Listing query: filters={filters.as_dict()}, results={len(listings)}")
        return listings

    async def for_seller(self, seller_id: uuid.UUID) -> list[Listing]:
        result = await self._db.execute(
            select(Listing)
            .where(Listing.seller_id == seller_id)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        return list(result.scalars().all())

    async def get_owned(self, listing_id: int, seller_id: uuid.UUID) -> Listing | None:
        result = await self._db.execute(
            select(Listing).where(Listing.id == listing_id, Listing.seller_id == seller_id)
        )
        return result.scalar_one_or_none()

    async def update(
        self,
        listing_id: int,
        seller_id: uuid.UUID,
        data: ListingUpdate,
    ) -> Listing | None:
        listing = await self.get_owned(listing_id, seller_id)
        if listing is None:
            return None

        # null in a partial update means "leave as is"
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(listing, field, value)
        await self._db.flush()
        await self._db.refresh(listing)
        return listing

    async def set_status(
        self,
        listing_id: int,
        seller_id: uuid.UUID,
        status: ListingStatus,
    ) -> tuple[Listing | None, bool]:
        """Change a listing's status.

        Returns:
            (listing, became_active) - ``became_active`` is True only when the
            listing moved into ACTIVE from some other status.
        """
        listing = await self.get_owned(listing_id, seller_id)
        if listing is None:
            return None, False

        became_active = status == ListingStatus.ACTIVE and listing.status != ListingStatus.ACTIVE
        listing.status = status
        await self._db.flush()
        await self._db.refresh(listing)
        logger.info(f"Listing {listing_id} status -> {status.value}")
        return listing, became_active

    async def delete(self, listing_id: int, seller_id: uuid.UUID) -> bool:
        result = await self._db.execute(
            delete(Listing).where(Listing.id == listing_id, Listing.seller_id == seller_id)
        )
        return result.rowcount > 0

    async def mark_logbook_verified(self, listing: Listing) -> Listing:
        listing.logbook_verified = True
        await self._db.flush()
        await self._db.refresh(listing)
        return listing
