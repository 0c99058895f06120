"""Search and price-range filtering over an already fetched listing set."""
from __future__ import annotations

import math
from typing import Iterable, Protocol, Sequence, TypeVar


class FilterableListing(Protocol):
    """Attributes the filter reads from a listing."""

    name: str
    description: str | None
    owner_name: str | None
    price: object


ListingT = TypeVar("ListingT", bound=FilterableListing)


def filter_listings(
    listings: Iterable[ListingT],
    query: str | None = "",
    price_min: str | float | None = None,
    price_max: str | float | None = None,
) -> list[ListingT]:
    """Return the listings matching the search text and price range.

    A listing matches the text when its name, description or owner name
    contains ``query`` case-insensitively; an empty query matches everything.
    Its price must fall within ``[price_min, price_max]`` where an empty
    minimum is 0 and an empty maximum is unbounded. The input is never
    modified and source order is kept.
    """

    needle = (query or "").lower()
    lower = _bound(price_min, default=0.0)
    upper = _bound(price_max, default=math.inf)

    return [
        listing
        for listing in listings
        if _matches_text(listing, needle) and _matches_price(listing, lower, upper)
    ]


def _matches_text(listing: FilterableListing, needle: str) -> bool:
    fields: Sequence[str | None] = (
        listing.name,
        getattr(listing, "description", None),
        getattr(listing, "owner_name", None),
    )
    return any(value is not None and needle in value.lower() for value in fields)


def _matches_price(listing: FilterableListing, lower: float, upper: float) -> bool:
    price = _to_number(listing.price)
    if price is None:
        return False
    return lower <= price <= upper


def _bound(value: str | float | None, *, default: float) -> float:
    """Parse a price bound; blank means ``default``, garbage is NaN."""

    if value is None:
        return default
    if isinstance(value, str):
        if not value.strip():
            return default
        number = _to_number(value)
        return math.nan if number is None else number
    return float(value)


def _to_number(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number
