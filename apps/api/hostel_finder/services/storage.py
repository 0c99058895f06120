"""Image uploads to the hosted object storage (Supabase Storage REST API)."""
from __future__ import annotations

import logging
from functools import lru_cache
from urllib.parse import quote

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)


class StorageUploadError(RuntimeError):
    """Raised when an object could not be stored."""


class SupabaseStorage:
    """Upload objects to a public bucket and hand back their URLs."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self.bucket = bucket
        self._timeout = timeout
        self._transport = transport

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        *,
        access_token: str | None = None,
    ) -> str:
        """Store ``content`` at ``path`` and return its public URL."""

        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "true",
        }
        url = f"{self._base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            raise StorageUploadError(f"Storage unreachable: {exc}") from exc

        if response.status_code >= 300:
            logger.warning("Upload of %s failed with %s: %s", path, response.status_code, response.text)
            raise StorageUploadError(f"Storage returned {response.status_code}")

        return self.public_url(path)


@lru_cache
def get_storage_client() -> SupabaseStorage:
    """Return the process-wide storage client."""

    return SupabaseStorage(
        settings.supabase_url,
        settings.supabase_anon_key,
        settings.storage_bucket,
        timeout=settings.http_timeout_seconds,
    )
