"""Phone normalisation tests."""

import pytest

from app.utils.phone import is_notifiable, normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("087 123 4567", "+353871234567"),
        ("+353 87 123 4567", "+353871234567"),
        ("+353 (0)87 123 4567", "+353871234567"),
        ("00353871234567", "+353871234567"),
        ("353871234567", "+353871234567"),
        ("+3530871234567", "+353871234567"),
        ("871234567", "+353871234567"),
        ("+44 7700 900123", "+447700900123"),
        ("087-123-4567", "+353871234567"),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "123", "abc", "+1234567890123456"])
def test_unusable_numbers_normalise_to_empty(raw):
    assert normalize_phone(raw) == ""
    assert not is_notifiable(raw)


def test_country_code_override():
    assert normalize_phone("07700 900123", country_code="44") == "+447700900123"
