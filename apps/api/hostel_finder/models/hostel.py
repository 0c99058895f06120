"""Hostel listing model."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .room_type import HostelRoomType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hostel(Base):
    """A hostel accommodation record."""

    __tablename__ = "hostels"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    owner_name: Mapped[str] = mapped_column(String, nullable=False)
    owner_contact: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    available_rooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    thumbnail: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    room_types: Mapped[list["HostelRoomType"]] = relationship(
        "HostelRoomType", back_populates="hostel", passive_deletes=True
    )
