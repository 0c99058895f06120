"""Admin endpoints for managing hostel records."""
from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..dependencies import get_storage, require_admin
from ..schemas import hostels as hostels_schema
from ..services import hostel_admin as admin_service
from ..services import listings as listings_service
from ..services.auth import AuthSession
from ..services.storage import SupabaseStorage

router = APIRouter()


def hostel_form_fields(
    name: str = Form(default=""),
    price: str = Form(default=""),
    room_types: list[str] = Form(default=[]),
    room_prices: str = Form(default="{}"),
    owner_name: str = Form(default=""),
    owner_contact: str = Form(default=""),
    description: str | None = Form(default=None),
    available_rooms: str = Form(default=""),
) -> dict[str, Any]:
    """Collect the raw multipart fields; ``room_prices`` is a JSON object."""

    try:
        parsed_prices: object = json.loads(room_prices or "{}")
    except json.JSONDecodeError:
        parsed_prices = room_prices
    return {
        "name": name,
        "price": price,
        "room_types": room_types,
        "room_prices": parsed_prices,
        "owner_name": owner_name,
        "owner_contact": owner_contact,
        "description": description,
        "available_rooms": available_rooms,
    }


async def image_uploads(images: list[UploadFile] = File(default=[])) -> list[admin_service.ImageUpload]:
    uploads = []
    for image in images:
        content = await image.read()
        if not content:
            continue
        uploads.append(
            admin_service.ImageUpload(
                filename=image.filename or "",
                content=content,
                content_type=image.content_type or "",
            )
        )
    return uploads


@router.get("/hostels", response_model=hostels_schema.ListingsResponse)
async def list_hostels(
    _: AuthSession = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> hostels_schema.ListingsResponse:
    """Return every hostel for management, newest first."""

    fetched = await listings_service.fetch_listings(session)
    return hostels_schema.ListingsResponse(
        results=fetched.listings, total=len(fetched.listings), error=fetched.error
    )


@router.post(
    "/hostels",
    response_model=hostels_schema.HostelMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_hostel(
    fields: dict[str, Any] = Depends(hostel_form_fields),
    images: list[admin_service.ImageUpload] = Depends(image_uploads),
    auth_session: AuthSession = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    storage: SupabaseStorage = Depends(get_storage),
) -> hostels_schema.HostelMutationResponse:
    """Create a hostel; at least one image is required."""

    form = admin_service.validate_form(fields)
    return await admin_service.create_hostel(
        form, images, session, storage, access_token=auth_session.access_token
    )


@router.put("/hostels/{hostel_id}", response_model=hostels_schema.HostelMutationResponse)
async def update_hostel(
    hostel_id: str,
    fields: dict[str, Any] = Depends(hostel_form_fields),
    images: list[admin_service.ImageUpload] = Depends(image_uploads),
    auth_session: AuthSession = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    storage: SupabaseStorage = Depends(get_storage),
) -> hostels_schema.HostelMutationResponse:
    """Update a hostel and replace its room-type prices."""

    form = admin_service.validate_form(fields)
    return await admin_service.update_hostel(
        hostel_id, form, images, session, storage, access_token=auth_session.access_token
    )


@router.delete("/hostels/{hostel_id}", response_model=hostels_schema.DeleteHostelResponse)
async def delete_hostel(
    hostel_id: str,
    _: AuthSession = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> hostels_schema.DeleteHostelResponse:
    """Delete a hostel with its room types."""

    return await admin_service.delete_hostel(hostel_id, session)
