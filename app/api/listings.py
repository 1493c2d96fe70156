"""Listing endpoints.

Creating a live listing, or moving one into ``active``, schedules alert
matching as a background task; the seller's response never waits on it.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Response, status

from app.api.deps import LLM, CurrentUser, DbSession, Notifier
from app.models.listing import Listing, ListingStatus
from app.schemas.filters import ListingFilters
from app.schemas.listing import (
    ListingCreate,
    ListingOut,
    ListingStatusUpdate,
    ListingUpdate,
    PublicListing,
)
from app.schemas.logbook import LogbookVerifyRequest, LogbookVerifyResponse
from app.services.alerts import dispatch_listing_alerts
from app.services.listings import ListingStore
from app.services.logbook import LogbookExtractionError, LogbookReader, verify_logbook_data

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/listings", tags=["Listings"])


def _schedule_alerts(background_tasks: BackgroundTasks, listing: Listing, notifier: Notifier) -> None:
    # Snapshot now: the request session is gone by the time the task runs
    background_tasks.add_task(dispatch_listing_alerts, ListingOut.model_validate(listing), notifier)
    logger.info(f"Scheduled alert matching for listing {listing.id}")


@router.get("", response_model=list[PublicListing])
async def search_listings(
    db: DbSession,
    make: str | None = None,
    model: str | None = None,
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    min_year: int | None = Query(None, ge=1900),
    max_year: int | None = Query(None, ge=1900),
    fuel_type: str | None = None,
    transmission: str | None = None,
    max_mileage: int | None = Query(None, ge=0),
    location: str | None = None,
    body_type: str | None = None,
    color: str | None = None,
    limit: int = Query(50, ge=1, le=200),
) -> list[Listing]:
    """Search active listings. Every given parameter must match."""
    filters = ListingFilters(
        make=make,
        model=model,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        fuel_type=fuel_type,
        transmission=transmission,
        max_mileage=max_mileage,
        location=location,
        body_type=body_type,
        color=color,
    )
    return await ListingStore(db).query(filters, active_only=True, limit=limit)


@router.get("/mine", response_model=list[ListingOut])
async def my_listings(user: CurrentUser, db: DbSession) -> list[Listing]:
    return await ListingStore(db).for_seller(user.id)


@router.get("/{listing_id}", response_model=PublicListing)
async def get_listing(listing_id: int, db: DbSession) -> Listing:
    listing = await ListingStore(db).get(listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    return listing


@router.post("", response_model=ListingOut, status_code=status.HTTP_201_CREATED)
async def create_listing(
    payload: ListingCreate,
    user: CurrentUser,
    db: DbSession,
    notifier: Notifier,
    background_tasks: BackgroundTasks,
) -> Listing:
    listing = await ListingStore(db).create(payload, seller_id=user.id)
    if listing.status == ListingStatus.ACTIVE:
        _schedule_alerts(background_tasks, listing, notifier)
    return listing


@router.patch("/{listing_id}", response_model=ListingOut)
async def update_listing(
    listing_id: int,
    payload: ListingUpdate,
    user: CurrentUser,
    db: DbSession,
) -> Listing:
    listing = await ListingStore(db).update(listing_id, user.id, payload)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    return listing


@router.patch("/{listing_id}/status", response_model=ListingOut)
async def update_listing_status(
    listing_id: int,
    payload: ListingStatusUpdate,
    user: CurrentUser,
    db: DbSession,
    notifier: Notifier,
    background_tasks: BackgroundTasks,
) -> Listing:
    listing, became_active = await ListingStore(db).set_status(listing_id, user.id, payload.status)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")
    if became_active:
        _schedule_alerts(background_tasks, listing, notifier)
    return listing


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(listing_id: int, user: CurrentUser, db: DbSession) -> Response:
    if not await ListingStore(db).delete(listing_id, user.id):
        raise HTTPException(status_code=404, detail="Listing not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{listing_id}/logbook", response_model=LogbookVerifyResponse)
async def verify_logbook(
    listing_id: int,
    payload: LogbookVerifyRequest,
    user: CurrentUser,
    db: DbSession,
    llm: LLM,
) -> LogbookVerifyResponse:
    """Read the seller's logbook image and check it against the listing."""
    store = ListingStore(db)
    listing = await store.get_owned(listing_id, user.id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Listing not found")

    try:
        logbook = await LogbookReader(llm).extract(payload.image, payload.mime_type)
    except LogbookExtractionError as e:
        raise HTTPException(status_code=502, detail=str(e))

    verification = verify_logbook_data(logbook, listing)
    if verification.is_verified and not listing.logbook_verified:
        listing = await store.mark_logbook_verified(listing)
        logger.info(f"Listing {listing_id} logbook verified ({verification.match_percentage}%)")

    return LogbookVerifyResponse(
        logbook=logbook,
        verification=verification,
        logbook_verified=listing.logbook_verified,
    )
