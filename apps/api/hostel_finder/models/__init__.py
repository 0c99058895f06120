"""Expose ORM models."""
from .hostel import Hostel
from .profile import Profile
from .room_type import HostelRoomType, RoomType

__all__ = [
    "Hostel",
    "HostelRoomType",
    "Profile",
    "RoomType",
]
