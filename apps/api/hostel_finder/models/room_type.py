"""Room type pricing rows attached to a hostel."""
from __future__ import annotations

import enum
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .hostel import Hostel


class RoomType(str, enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"
    SUITE = "suite"
    APARTMENT = "apartment"


class HostelRoomType(Base):
    """Price of one room type offered by a hostel."""

    __tablename__ = "hostel_room_types"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    hostel_id: Mapped[str] = mapped_column(ForeignKey("hostels.id", ondelete="CASCADE"), nullable=False, index=True)
    room_type: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    hostel: Mapped["Hostel"] = relationship("Hostel", back_populates="room_types")
