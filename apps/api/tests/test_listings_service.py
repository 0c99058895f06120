"""Tests for fetching, joining and filtering listings."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from hostel_finder.models.hostel import Hostel
from hostel_finder.models.room_type import HostelRoomType
from hostel_finder.repositories import hostels as hostels_repo
from hostel_finder.schemas import hostels as schemas
from hostel_finder.services import listings as listings_service


def make_hostel(hostel_id: str, name: str, price: str, **overrides) -> Hostel:
    values = {
        "id": hostel_id,
        "name": name,
        "description": None,
        "owner_name": "Owner",
        "owner_contact": "0244000000",
        "price": Decimal(price),
        "available_rooms": 3,
        "thumbnail": None,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Hostel(**values)


def make_room_type(row_id: str, hostel_id: str, room_type: str, price: str) -> HostelRoomType:
    return HostelRoomType(id=row_id, hostel_id=hostel_id, room_type=room_type, price=Decimal(price))


def db_error() -> OperationalError:
    return OperationalError("SELECT", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_fetch_listings_joins_room_types_by_hostel(monkeypatch):
    hostels = [make_hostel("h2", "Beta Lodge", "2500"), make_hostel("h1", "Alpha Hostel", "1000")]
    room_types = [
        make_room_type("r1", "h1", "single", "1500"),
        make_room_type("r2", "h2", "suite", "3200"),
        make_room_type("r3", "h1", "double", "1000"),
    ]
    list_room_types = AsyncMock(return_value=room_types)
    monkeypatch.setattr(hostels_repo, "list_hostels", AsyncMock(return_value=hostels))
    monkeypatch.setattr(hostels_repo, "list_room_types", list_room_types)

    result = await listings_service.fetch_listings(AsyncMock())

    assert result.error is None
    assert [listing.id for listing in result.listings] == ["h2", "h1"]
    assert [row.room_type for row in result.listings[0].room_types] == ["suite"]
    assert [row.room_type for row in result.listings[1].room_types] == ["single", "double"]
    assert list_room_types.await_args.args[1] == ["h2", "h1"]


@pytest.mark.asyncio
async def test_fetch_listings_hostel_failure_degrades_to_empty(monkeypatch):
    list_room_types = AsyncMock()
    monkeypatch.setattr(hostels_repo, "list_hostels", AsyncMock(side_effect=db_error()))
    monkeypatch.setattr(hostels_repo, "list_room_types", list_room_types)

    result = await listings_service.fetch_listings(AsyncMock())

    assert result.listings == []
    assert result.error == listings_service.HOSTELS_FETCH_ERROR
    list_room_types.assert_not_awaited()


@pytest.mark.asyncio
async def test_fetch_listings_room_type_failure_keeps_hostels(monkeypatch):
    monkeypatch.setattr(
        hostels_repo, "list_hostels", AsyncMock(return_value=[make_hostel("h1", "Alpha Hostel", "1000")])
    )
    monkeypatch.setattr(hostels_repo, "list_room_types", AsyncMock(side_effect=db_error()))

    result = await listings_service.fetch_listings(AsyncMock())

    assert [listing.name for listing in result.listings] == ["Alpha Hostel"]
    assert result.listings[0].room_types == []
    assert result.error == listings_service.ROOM_TYPES_FETCH_ERROR


@pytest.mark.asyncio
async def test_search_listings_filters_fetched_set(monkeypatch):
    hostels = [
        make_hostel("h1", "Alpha Hostel", "1000"),
        make_hostel("h2", "Beta Lodge", "2500", description="Self-contained rooms"),
    ]
    monkeypatch.setattr(hostels_repo, "list_hostels", AsyncMock(return_value=hostels))
    monkeypatch.setattr(hostels_repo, "list_room_types", AsyncMock(return_value=[]))

    by_text = await listings_service.search_listings(schemas.ListingCriteria(q="hostel"), AsyncMock())
    by_price = await listings_service.search_listings(
        schemas.ListingCriteria(min_price="1500", max_price=""), AsyncMock()
    )

    assert [listing.name for listing in by_text.results] == ["Alpha Hostel"]
    assert [listing.name for listing in by_price.results] == ["Beta Lodge"]
    assert by_text.total == 2
    assert by_text.error is None
