"""Alert matching predicate.

A listing matches an alert when every constraint set on the alert holds for
the listing. Constraints left as ``None`` never reject. String constraints
compare exactly as stored: no case folding, no trimming.
"""

from typing import Any


def listing_matches_alert(listing: Any, alert: Any) -> bool:
    """Return True if ``listing`` satisfies every constraint set on ``alert``.

    Args:
        listing: Object exposing listing attributes (ORM ``Listing`` or
            ``ListingOut``).
        alert: Object exposing alert constraint attributes (ORM ``Alert`` or
            ``AlertOut``).
    """
    if alert.make is not None and listing.make != alert.make:
        return False
    if alert.model is not None and listing.model != alert.model:
        return False

    if alert.min_price is not None and listing.price < alert.min_price:
        return False
    if alert.max_price is not None and listing.price > alert.max_price:
        return False

    if alert.min_year is not None and listing.year < alert.min_year:
        return False
    if alert.max_year is not None and listing.year > alert.max_year:
        return False

    # FuelType/Transmission are str enums, so they compare equal to their value
    if alert.fuel_type is not None and listing.fuel_type != alert.fuel_type:
        return False
    if alert.transmission is not None and listing.transmission != alert.transmission:
        return False

    if alert.max_mileage is not None and listing.mileage > alert.max_mileage:
        return False

    if alert.location is not None and listing.location != alert.location:
        return False

    return True
