#!/usr/bin/env python3
"""Demo Listing Seed Script

Inserts a handful of live listings so search, alerts and the chat assistant
have something to work with in development. Listings already present (same
make, model and year, no seller) are skipped.

Usage:
    python scripts/seed_listings.py
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.db.session import session_scope
from app.models.listing import FuelType, Listing, ListingStatus, Transmission

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_IMAGE_BASE = "https://images.unsplash.com"

DEMO_LISTINGS: list[dict[str, Any]] = [
    dict(make="BMW", model="5 Series 520d M Sport", year=2023, price=54950, mileage=12500,
         location="Dublin", fuel_type=FuelType.DIESEL, transmission=Transmission.AUTOMATIC,
         body_type="Saloon", color="Black", owners=1, verification_score=98,
         logbook_verified=True, mileage_verified=True, photos_verified=True, price_good=True,
         image_url=f"{_IMAGE_BASE}/photo-1555215695-3004980adade?auto=format&fit=crop&q=80&w=1000"),
    dict(make="Audi", model="A6 S Line Black Edition", year=2021, price=42000, mileage=45000,
         location="Cork", fuel_type=FuelType.DIESEL, transmission=Transmission.AUTOMATIC,
         body_type="Saloon", color="Grey", owners=1, verification_score=92,
         logbook_verified=True, mileage_verified=True, photos_verified=True, price_good=False,
         image_url=f"{_IMAGE_BASE}/photo-1603584173870-7b2310d618c6?auto=format&fit=crop&q=80&w=1000"),
    dict(make="Tesla", model="Model 3 Long Range", year=2022, price=38500, mileage=28000,
         location="Galway", fuel_type=FuelType.ELECTRIC, transmission=Transmission.AUTOMATIC,
         body_type="Saloon", color="White", owners=1, verification_score=100,
         logbook_verified=True, mileage_verified=True, photos_verified=True, price_good=True,
         image_url=f"{_IMAGE_BASE}/photo-1560958089-b8a1929cea89?auto=format&fit=crop&q=80&w=1000"),
    dict(make="Volkswagen", model="Golf R-Line", year=2020, price=24950, mileage=62000,
         location="Limerick", fuel_type=FuelType.PETROL, transmission=Transmission.MANUAL,
         body_type="Hatchback", color="Blue", owners=2, verification_score=85,
         logbook_verified=True, mileage_verified=False, photos_verified=True, price_good=True,
         image_url=f"{_IMAGE_BASE}/photo-1541899481282-d53bffe3c35d?auto=format&fit=crop&q=80&w=1000"),
]


async def seed_listings() -> int:
    """Insert missing demo listings. Returns the number inserted."""
    inserted = 0
    async with session_scope() as db:
        for data in DEMO_LISTINGS:
            existing = await db.execute(
                select(Listing.id).where(
                    Listing.seller_id.is_(None),
                    Listing.make == data["make"],
                    Listing.model == data["model"],
                    Listing.year == data["year"],
                )
            )
            if existing.first() is not None:
                logger.info(f"Skipping existing: {data['year']} {data['make']} {data['model']}")
                continue

            db.add(Listing(**data, status=ListingStatus.ACTIVE))
            inserted += 1
            logger.info(f"✓ Added: {data['year']} {data['make']} {data['model']}")

    return inserted


async def main() -> None:
    """Main entry point."""
    count = await seed_listings()
    logger.info(f"✅ Seed complete! Inserted {count} listings")


if __name__ == "__main__":
    asyncio.run(main())
