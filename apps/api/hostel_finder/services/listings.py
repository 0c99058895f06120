"""Fetch hostels with their room types and project the visitor's search."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.room_type import HostelRoomType
from ..repositories import hostels as hostels_repo
from ..schemas import hostels as schemas
from .listing_filter import filter_listings

logger = logging.getLogger(__name__)

HOSTELS_FETCH_ERROR = "Failed to fetch hostels"
ROOM_TYPES_FETCH_ERROR = "Failed to fetch room types"


@dataclass(slots=True)
class ListingFetchResult:
    """Joined listings, possibly degraded, plus what went wrong."""

    listings: list[schemas.HostelListing] = field(default_factory=list)
    error: str | None = None


async def fetch_listings(session: AsyncSession) -> ListingFetchResult:
    """Read hostels newest first and attach their room types.

    Never raises for data-store failures: a failed hostel read yields an
    empty result, a failed room-type read yields hostels without room types.
    """

    try:
        hostels = await hostels_repo.list_hostels(session)
    except SQLAlchemyError:
        logger.exception("Fetching hostels failed")
        return ListingFetchResult(error=HOSTELS_FETCH_ERROR)

    try:
        room_types = await hostels_repo.list_room_types(session, [hostel.id for hostel in hostels])
    except SQLAlchemyError:
        logger.exception("Fetching room types failed")
        return ListingFetchResult(
            listings=[schemas.HostelListing.from_row(hostel) for hostel in hostels],
            error=ROOM_TYPES_FETCH_ERROR,
        )

    by_hostel: dict[str, list[HostelRoomType]] = defaultdict(list)
    for row in room_types:
        by_hostel[row.hostel_id].append(row)

    return ListingFetchResult(
        listings=[schemas.HostelListing.from_row(hostel, by_hostel.get(hostel.id, [])) for hostel in hostels]
    )


async def search_listings(
    criteria: schemas.ListingCriteria,
    session: AsyncSession,
) -> schemas.ListingsResponse:
    """Fetch the listing set and return the subset matching ``criteria``."""

    fetched = await fetch_listings(session)
    results = filter_listings(fetched.listings, criteria.q, criteria.min_price, criteria.max_price)
    return schemas.ListingsResponse(results=results, total=len(fetched.listings), error=fetched.error)
