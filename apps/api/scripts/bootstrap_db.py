"""Create database schema and seed sample hostels for development."""
from __future__ import annotations

import argparse
import asyncio
from decimal import Decimal

from sqlalchemy import delete

from hostel_finder.db.session import SessionLocal, engine
from hostel_finder.models.base import Base
from hostel_finder.models.hostel import Hostel
from hostel_finder.models.profile import Profile
from hostel_finder.models.room_type import HostelRoomType

HOSTELS = [
	{
		"id": "hostel-alpha",
		"name": "Alpha Hostel",
		"description": "Five minutes from the main gate with a study room on every floor.",
		"owner_name": "Kwame Mensah",
		"owner_contact": "0244123456",
		"price": Decimal("1000"),
		"available_rooms": 12,
		"thumbnail": "https://picsum.photos/seed/alpha/800/600",
		"room_types": [
			("single", Decimal("1500")),
			("double", Decimal("1000")),
		],
	},
	{
		"id": "hostel-beta-lodge",
		"name": "Beta Lodge",
		"description": "Quiet self-contained rooms with backup water and power.",
		"owner_name": "Ama Owusu",
		"owner_contact": "0209876543",
		"price": Decimal("2500"),
		"available_rooms": 4,
		"thumbnail": "https://picsum.photos/seed/beta/800/600",
		"room_types": [
			("suite", Decimal("3200")),
			("apartment", Decimal("2500")),
		],
	},
	{
		"id": "hostel-campus-view",
		"name": "Campus View Residence",
		"description": None,
		"owner_name": "Yaw Boateng",
		"owner_contact": "0551112222",
		"price": Decimal("1800"),
		"available_rooms": 0,
		"thumbnail": None,
		"room_types": [
			("triple", Decimal("1800")),
			("quad", Decimal("1400")),
		],
	},
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_hostels() -> None:
	"""Insert or update demo hostels and their room types."""

	async with SessionLocal() as session:
		async with session.begin():
			for data in HOSTELS:
				hostel = await session.get(Hostel, data["id"])
				if hostel is None:
					hostel = Hostel(id=data["id"])
				hostel.name = data["name"]
				hostel.description = data["description"]
				hostel.owner_name = data["owner_name"]
				hostel.owner_contact = data["owner_contact"]
				hostel.price = data["price"]
				hostel.available_rooms = data["available_rooms"]
				hostel.thumbnail = data["thumbnail"]
				session.add(hostel)
				await session.flush()

				await session.execute(
					delete(HostelRoomType).where(HostelRoomType.hostel_id == data["id"])
				)
				for room_type, price in data["room_types"]:
					session.add(
						HostelRoomType(
							id=f"{data['id']}-{room_type}",
							hostel_id=data["id"],
							room_type=room_type,
							price=price,
						)
					)


async def grant_admin(user_id: str) -> None:
	"""Flag an auth user as administrator."""

	async with SessionLocal() as session:
		async with session.begin():
			profile = await session.get(Profile, user_id)
			if profile is None:
				profile = Profile(id=user_id)
			profile.is_admin = True
			session.add(profile)


async def main(admin_user_id: str | None) -> None:
	await create_schema()
	await seed_hostels()
	if admin_user_id:
		await grant_admin(admin_user_id)
	await engine.dispose()
	print("Database schema ensured and demo hostels seeded.")


if __name__ == "__main__":
	parser = argparse.ArgumentParser(description=__doc__)
	parser.add_argument("--admin-user-id", help="auth user id to flag as administrator")
	args = parser.parse_args()
	asyncio.run(main(args.admin_user_id))
