"""Profile repository helpers."""
from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.profile import Profile


async def get_by_user_id(session: AsyncSession, user_id: str) -> Profile | None:
    """Return the profile for an auth user, or None.

    More than one row for the same id raises ``MultipleResultsFound``.
    """

    stmt: Select[tuple[Profile]] = select(Profile).where(Profile.id == user_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
