"""Schemas for hostel listings and the admin hostel form."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.room_type import RoomType

if TYPE_CHECKING:
    from ..models.hostel import Hostel
    from ..models.room_type import HostelRoomType


class RoomTypePrice(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    hostel_id: str
    room_type: str
    price: Decimal


class HostelListing(BaseModel):
    """A hostel with its room types joined in, as shown to visitors."""

    id: str
    name: str
    description: str | None = None
    owner_name: str
    owner_contact: str
    price: Decimal
    available_rooms: int = 0
    thumbnail: str | None = None
    created_at: datetime | None = None
    room_types: list[RoomTypePrice] = Field(default_factory=list)

    @classmethod
    def from_row(cls, hostel: "Hostel", room_types: list["HostelRoomType"] | None = None) -> "HostelListing":
        return cls(
            id=hostel.id,
            name=hostel.name,
            description=hostel.description,
            owner_name=hostel.owner_name,
            owner_contact=hostel.owner_contact,
            price=hostel.price,
            available_rooms=hostel.available_rooms,
            thumbnail=hostel.thumbnail,
            created_at=hostel.created_at,
            room_types=[RoomTypePrice.model_validate(row) for row in room_types or []],
        )


class ListingCriteria(BaseModel):
    """Search box and price range, kept as typed by the visitor."""

    q: str = ""
    min_price: str | None = None
    max_price: str | None = None


class ListingsResponse(BaseModel):
    results: list[HostelListing]
    total: int
    error: str | None = None


class FieldError(BaseModel):
    field: str
    message: str


def _is_number(value: str) -> bool:
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return False
    return number.is_finite() and number >= 0


class HostelForm(BaseModel):
    """Admin submission for creating or updating a hostel."""

    name: str
    price: str
    room_types: list[RoomType]
    room_prices: dict[str, str] = Field(default_factory=dict)
    owner_name: str
    owner_contact: str
    description: str | None = None
    available_rooms: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Hostel name must be at least 2 characters.")
        return value.strip()

    @field_validator("price")
    @classmethod
    def _check_price(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Base price is required.")
        if not _is_number(value):
            raise ValueError("Base price must be a number.")
        return value.strip()

    @field_validator("room_types")
    @classmethod
    def _check_room_types(cls, value: list[RoomType]) -> list[RoomType]:
        if not value:
            raise ValueError("Select at least one room type.")
        # Keep first occurrence order, drop repeats.
        return list(dict.fromkeys(value))

    @field_validator("room_prices")
    @classmethod
    def _check_room_prices(cls, value: dict[str, str]) -> dict[str, str]:
        for price in value.values():
            if not price.strip():
                raise ValueError("Price is required for each room type")
            if not _is_number(price):
                raise ValueError("Room type prices must be numbers.")
        return {key: price.strip() for key, price in value.items()}

    @field_validator("owner_name")
    @classmethod
    def _check_owner_name(cls, value: str) -> str:
        if len(value.strip()) < 2:
            raise ValueError("Owner name is required.")
        return value.strip()

    @field_validator("owner_contact")
    @classmethod
    def _check_owner_contact(cls, value: str) -> str:
        if len(value.strip()) < 10:
            raise ValueError("Valid contact number is required.")
        return value.strip()

    @field_validator("description")
    @classmethod
    def _blank_description(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("available_rooms")
    @classmethod
    def _check_available_rooms(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Number of available rooms is required")
        if not value.strip().isdigit():
            raise ValueError("Available rooms must be a whole number.")
        return value.strip()

    def price_for(self, room_type: RoomType) -> Decimal:
        """Price of a room type, falling back to the base price."""

        return Decimal(self.room_prices.get(room_type.value) or self.price)

    @classmethod
    def from_listing(cls, listing: HostelListing) -> "HostelForm":
        """Form defaults for editing an existing listing."""

        return cls.model_construct(
            name=listing.name,
            price=str(listing.price),
            room_types=[RoomType(row.room_type) for row in listing.room_types],
            room_prices={row.room_type: str(row.price) for row in listing.room_types},
            owner_name=listing.owner_name,
            owner_contact=listing.owner_contact,
            description=listing.description or "",
            available_rooms=str(listing.available_rooms),
        )


class HostelMutationResponse(BaseModel):
    hostel: HostelListing
    uploaded_images: list[str] = Field(default_factory=list)


class DeleteHostelResponse(BaseModel):
    id: str
    status: str = "deleted"
