from __future__ import annotations

import pytest
from pydantic import ValidationError

from campus_market.models import PriceRange
from campus_market.utils.pricing import extract_numbers, parse_price_text


@pytest.mark.parametrize(
    "text, expected",
    [
        ("KSh 3500.0", (3500.0, 3500.0)),
        ("5000-7000", (5000.0, 7000.0)),
        ("1,200 - 1,500 per month", (1200.0, 1500.0)),
        ("from 800 to 300", (300.0, 800.0)),
        ("100 200 300", (100.0, 200.0)),
    ],
)
def test_parse_price_text(text, expected):
    assert parse_price_text(text) == expected


def test_parse_price_without_number():
    with pytest.raises(ValueError):
        parse_price_text("negotiable")


def test_extract_numbers_limit():
    assert extract_numbers("1 2 3 4", limit=3) == [1.0, 2.0, 3.0]
    assert extract_numbers("no digits here") == []


def test_price_range_accepts_legacy_values():
    assert PriceRange.model_validate("KSh 5000-7000") == PriceRange(min=5000, max=7000)
    assert PriceRange.model_validate(250) == PriceRange(min=250, max=250)
    assert PriceRange.model_validate({"min": 10}).max is None


def test_price_range_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        PriceRange(min=10, max=5)
    with pytest.raises(ValidationError):
        PriceRange.model_validate("free")


def test_price_range_overlap():
    price = PriceRange(min=500, max=800)
    assert price.overlaps(600, 700)
    assert price.overlaps(None, 500)
    assert price.overlaps(800, None)
    assert not price.overlaps(801, None)
    assert not price.overlaps(None, 499)
    assert PriceRange(min=1000).overlaps(5000, 6000)


def test_price_range_str():
    assert str(PriceRange(min=500, max=800)) == "500-800"
    assert str(PriceRange(min=500, max=500)) == "500"
    assert str(PriceRange(min=500)) == "500+"
