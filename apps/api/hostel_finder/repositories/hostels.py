"""Data access helpers for hostels and their room types."""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence
from uuid import uuid4

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.hostel import Hostel
from ..models.room_type import HostelRoomType


async def list_hostels(session: AsyncSession) -> list[Hostel]:
    """Return every hostel, newest first."""

    stmt: Select[tuple[Hostel]] = select(Hostel).order_by(Hostel.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_room_types(session: AsyncSession, hostel_ids: Sequence[str]) -> list[HostelRoomType]:
    """Return room-type rows belonging to any of ``hostel_ids``."""

    if not hostel_ids:
        return []
    stmt: Select[tuple[HostelRoomType]] = select(HostelRoomType).where(
        HostelRoomType.hostel_id.in_(list(hostel_ids))
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_by_id(session: AsyncSession, hostel_id: str) -> Hostel | None:
    """Return a hostel by identifier."""

    return await session.get(Hostel, hostel_id)


async def create_hostel(
    session: AsyncSession,
    *,
    hostel_id: str | None = None,
    name: str,
    description: str | None,
    owner_name: str,
    owner_contact: str,
    price: Decimal,
    available_rooms: int,
    thumbnail: str | None,
) -> Hostel:
    hostel = Hostel(
        id=hostel_id or str(uuid4()),
        name=name,
        description=description,
        owner_name=owner_name,
        owner_contact=owner_contact,
        price=price,
        available_rooms=available_rooms,
        thumbnail=thumbnail,
    )
    session.add(hostel)
    await session.flush()
    return hostel


async def replace_room_types(
    session: AsyncSession,
    hostel_id: str,
    prices: Iterable[tuple[str, Decimal]],
) -> list[HostelRoomType]:
    """Swap the hostel's room-type rows for ``prices``."""

    await session.execute(delete(HostelRoomType).where(HostelRoomType.hostel_id == hostel_id))
    rows = [
        HostelRoomType(id=str(uuid4()), hostel_id=hostel_id, room_type=room_type, price=price)
        for room_type, price in prices
    ]
    for row in rows:
        session.add(row)
    await session.flush()
    return rows


async def delete_hostel(session: AsyncSession, hostel_id: str) -> bool:
    """Remove a hostel and its room types; False when it did not exist."""

    await session.execute(delete(HostelRoomType).where(HostelRoomType.hostel_id == hostel_id))
    result = await session.execute(delete(Hostel).where(Hostel.id == hostel_id))
    return bool(result.rowcount)
