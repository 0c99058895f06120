"""Public listing search for signed-in visitors."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..dependencies import require_session
from ..schemas import hostels as hostels_schema
from ..services import listings as listings_service
from ..services.auth import AuthSession

router = APIRouter()


@router.get("", response_model=hostels_schema.ListingsResponse)
async def list_listings(
    q: str = Query(default=""),
    min_price: str | None = Query(default=None),
    max_price: str | None = Query(default=None),
    _: AuthSession = Depends(require_session),
    session: AsyncSession = Depends(get_session),
) -> hostels_schema.ListingsResponse:
    """Return hostels matching the search text and price range."""

    criteria = hostels_schema.ListingCriteria(q=q, min_price=min_price, max_price=max_price)
    return await listings_service.search_listings(criteria, session)
