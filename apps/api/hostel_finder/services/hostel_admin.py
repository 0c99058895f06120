"""Administrator operations on hostel records."""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Mapping
from uuid import uuid4

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import hostels as hostels_repo
from ..schemas import hostels as schemas
from .storage import StorageUploadError, SupabaseStorage

logger = logging.getLogger(__name__)

IMAGE_REQUIRED_MESSAGE = "Please select at least one image"


@dataclass(slots=True)
class ImageUpload:
    filename: str
    content: bytes
    content_type: str = ""


def validate_form(raw: Mapping[str, Any]) -> schemas.HostelForm:
    """Validate a submission, raising 422 with one message per failing field."""

    try:
        return schemas.HostelForm.model_validate(dict(raw))
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error.model_dump() for error in field_errors(exc)],
        ) from exc


def field_errors(exc: ValidationError) -> list[schemas.FieldError]:
    errors: list[schemas.FieldError] = []
    for item in exc.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        cause = (item.get("ctx") or {}).get("error")
        message = str(cause) if cause is not None else item["msg"]
        if item["type"] == "missing":
            message = "This field is required."
        errors.append(schemas.FieldError(field=field, message=message))
    return errors


async def create_hostel(
    form: schemas.HostelForm,
    images: list[ImageUpload],
    session: AsyncSession,
    storage: SupabaseStorage,
    *,
    access_token: str | None = None,
) -> schemas.HostelMutationResponse:
    """Upload the images, then insert the hostel and its room-type prices."""

    if not images:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMAGE_REQUIRED_MESSAGE)

    hostel_id = str(uuid4())
    urls = await _upload_images(storage, hostel_id, images, access_token)

    async with session.begin():
        hostel = await hostels_repo.create_hostel(
            session,
            hostel_id=hostel_id,
            name=form.name,
            description=form.description,
            owner_name=form.owner_name,
            owner_contact=form.owner_contact,
            price=Decimal(form.price),
            available_rooms=int(form.available_rooms),
            thumbnail=urls[0],
        )
        room_types = await hostels_repo.replace_room_types(session, hostel.id, _room_prices(form))

    logger.info("Created hostel %s with %d image(s)", hostel.id, len(urls))
    return schemas.HostelMutationResponse(
        hostel=schemas.HostelListing.from_row(hostel, room_types),
        uploaded_images=urls,
    )


async def update_hostel(
    hostel_id: str,
    form: schemas.HostelForm,
    images: list[ImageUpload],
    session: AsyncSession,
    storage: SupabaseStorage,
    *,
    access_token: str | None = None,
) -> schemas.HostelMutationResponse:
    """Update a hostel; new images replace the thumbnail, none keeps it."""

    async with session.begin():
        hostel = await hostels_repo.get_by_id(session, hostel_id)
        if hostel is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hostel not found")

        urls = await _upload_images(storage, hostel_id, images, access_token) if images else []

        hostel.name = form.name
        hostel.description = form.description
        hostel.owner_name = form.owner_name
        hostel.owner_contact = form.owner_contact
        hostel.price = Decimal(form.price)
        hostel.available_rooms = int(form.available_rooms)
        if urls:
            hostel.thumbnail = urls[0]
        session.add(hostel)

        room_types = await hostels_repo.replace_room_types(session, hostel_id, _room_prices(form))

    return schemas.HostelMutationResponse(
        hostel=schemas.HostelListing.from_row(hostel, room_types),
        uploaded_images=urls,
    )


async def delete_hostel(hostel_id: str, session: AsyncSession) -> schemas.DeleteHostelResponse:
    async with session.begin():
        deleted = await hostels_repo.delete_hostel(session, hostel_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hostel not found")

    logger.info("Deleted hostel %s", hostel_id)
    return schemas.DeleteHostelResponse(id=hostel_id)


def _room_prices(form: schemas.HostelForm) -> list[tuple[str, Decimal]]:
    return [(room_type.value, form.price_for(room_type)) for room_type in form.room_types]


async def _upload_images(
    storage: SupabaseStorage,
    hostel_id: str,
    images: list[ImageUpload],
    access_token: str | None,
) -> list[str]:
    urls: list[str] = []
    for image in images:
        suffix = PurePath(image.filename or "").suffix.lower()
        content_type = image.content_type or mimetypes.guess_type(image.filename or "")[0] or "application/octet-stream"
        path = f"{hostel_id}/{uuid4().hex}{suffix}"
        try:
            urls.append(await storage.upload(path, image.content, content_type, access_token=access_token))
        except StorageUploadError as exc:
            logger.warning("Image upload for hostel %s failed: %s", hostel_id, exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload images") from exc
    return urls
