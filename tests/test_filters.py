"""Listing filter object and merge tests."""

from app.schemas.filters import ListingFilters
from app.services.chat import merge_filters


def test_delta_overwrites_clashing_field_and_keeps_the_rest():
    current = ListingFilters(make="BMW", max_price=20000)
    merged = merge_filters(current, ListingFilters(make="Audi"))
    assert merged.as_dict() == {"make": "Audi", "max_price": 20000}


def test_null_in_delta_never_unsets():
    current = ListingFilters(make="BMW", max_price=20000)
    delta = ListingFilters.model_validate({"make": None, "maxPrice": None, "location": "Cork"})
    merged = merge_filters(current, delta)
    assert merged.as_dict() == {"make": "BMW", "max_price": 20000, "location": "Cork"}


def test_empty_delta_leaves_filters_untouched():
    current = ListingFilters(fuel_type="Diesel", min_year=2018)
    assert merge_filters(current, ListingFilters()) == current


def test_merge_does_not_mutate_inputs():
    current = ListingFilters(make="BMW")
    merge_filters(current, ListingFilters(make="Audi"))
    assert current.make == "BMW"


def test_accepts_camel_and_snake_case_and_ignores_unknown_keys():
    filters = ListingFilters.model_validate(
        {"make": "Toyota", "maxPrice": 15000, "min_year": 2015, "sunroof": True}
    )
    assert filters.as_dict() == {"make": "Toyota", "max_price": 15000, "min_year": 2015}


def test_is_empty():
    assert ListingFilters().is_empty()
    assert not ListingFilters(color="Red").is_empty()
