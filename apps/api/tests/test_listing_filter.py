"""Tests for the search and price-range projection."""
from __future__ import annotations

from copy import deepcopy
from decimal import Decimal
from types import SimpleNamespace

import pytest

from hostel_finder.services.listing_filter import filter_listings


def make_listing(name, price, description=None, owner_name="Owner"):
    return SimpleNamespace(name=name, price=price, description=description, owner_name=owner_name)


@pytest.fixture
def listings():
    return [
        make_listing("Alpha Hostel", 1000, description="Close to the library", owner_name="Kwame"),
        make_listing("Beta Lodge", 2500, description=None, owner_name="Ama Owusu"),
        make_listing("Gamma Rooms", Decimal("1800.50"), description="Quiet HOSTEL annex", owner_name=None),
    ]


def test_text_query_matches_name_case_insensitively(listings):
    result = filter_listings(listings[:2], "hostel", "", "")

    assert [item.name for item in result] == ["Alpha Hostel"]


def test_min_price_only(listings):
    result = filter_listings(listings[:2], "", "1500", "")

    assert [item.name for item in result] == ["Beta Lodge"]


def test_empty_criteria_is_identity(listings):
    assert filter_listings(listings, "", "", "") == listings
    assert filter_listings(listings, None, None, None) == listings


def test_query_matches_description_and_owner(listings):
    assert [item.name for item in filter_listings(listings, "library")] == ["Alpha Hostel"]
    assert [item.name for item in filter_listings(listings, "OWUSU")] == ["Beta Lodge"]
    assert [item.name for item in filter_listings(listings, "hostel")] == ["Alpha Hostel", "Gamma Rooms"]


def test_bounds_are_inclusive(listings):
    result = filter_listings(listings, "", "1000", "2500")

    assert [item.name for item in result] == ["Alpha Hostel", "Beta Lodge", "Gamma Rooms"]
    assert filter_listings(listings, "", "1000", "1000") == [listings[0]]


def test_numeric_bounds_and_whitespace(listings):
    assert filter_listings(listings, "", 2000, None) == [listings[1]]
    assert filter_listings(listings, "", "  ", " 1900 ") == [listings[0], listings[2]]


def test_text_and_price_must_both_match(listings):
    assert filter_listings(listings, "hostel", "1500", "") == [listings[2]]


def test_uncoercible_price_does_not_match():
    broken = [
        make_listing("Alpha Hostel", "n/a"),
        make_listing("Beta Lodge", None),
        make_listing("Gamma Rooms", float("nan")),
        make_listing("Delta House", "1200"),
    ]

    assert filter_listings(broken, "", "", "") == [broken[3]]


def test_non_numeric_bound_matches_nothing(listings):
    assert filter_listings(listings, "", "cheap", "") == []


def test_filter_is_pure_and_idempotent(listings):
    snapshot = deepcopy(listings)

    first = filter_listings(listings, "a", "500", "2000")
    second = filter_listings(listings, "a", "500", "2000")

    assert first == second
    assert first is not listings
    assert all(item in listings for item in first)
    assert listings == snapshot


def test_result_is_a_new_list_even_when_everything_matches(listings):
    result = filter_listings(listings)

    result.clear()
    assert len(listings) == 3
