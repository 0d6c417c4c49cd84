import asyncio
import logging
from typing import Optional

import httpx
from fastapi import Request

from app.core.config import Settings
from app.core.errors import NotFoundOrDenied, StoreError, StoreTimeout

logger = logging.getLogger(__name__)


class StorageClient:
    """Client for the hosted object storage holding audio recordings"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.bucket = settings.AUDIO_BUCKET
        self.timeout_ms = settings.STORAGE_TIMEOUT_MS
        self.base_url = f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1"
        key = settings.service_key
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, action: str, method: str, url: str, **kwargs) -> httpx.Response:
        if not self.settings.store_configured:
            raise StoreError("Server configuration error", details="Supabase configuration missing")

        seconds = self.timeout_ms / 1000
        try:
            return await asyncio.wait_for(
                self._client.request(method, url, timeout=seconds, **kwargs),
                timeout=seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("%s of %s timed out after %sms", action, url, self.timeout_ms)
            raise StoreTimeout(f"{action} timeout after {self.timeout_ms}ms")
        except httpx.HTTPError as exc:
            raise StoreError("Storage connection failed", details=str(exc))

    async def ensure_bucket(self) -> None:
        """Create the audio bucket as public if it does not exist yet"""
        response = await self._send("Bucket lookup", "GET", f"/bucket/{self.bucket}")
        if response.is_success:
            return

        logger.info("Bucket %s not found, creating it", self.bucket)
        response = await self._send(
            "Bucket create",
            "POST",
            "/bucket",
            json={"id": self.bucket, "name": self.bucket, "public": True},
        )
        if response.is_error and response.status_code != 409 and "already exists" not in response.text:
            raise StoreError("Storage bucket not configured", details=response.text)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        response = await self._send(
            "Upload",
            "POST",
            f"/object/{self.bucket}/{path}",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        if response.is_error:
            raise StoreError("Failed to upload audio file to storage", details=response.text)

    async def download(self, path: str) -> bytes:
        response = await self._send("Download", "GET", f"/object/{self.bucket}/{path}")
        if response.status_code in (400, 404):
            raise NotFoundOrDenied("Audio file not found", details=response.text)
        if response.is_error:
            raise StoreError("Failed to serve audio file", details=response.text)
        return response.content

    async def remove(self, path: str) -> None:
        response = await self._send("Delete", "DELETE", f"/object/{self.bucket}/{path}")
        if response.is_error and response.status_code != 404:
            raise StoreError("Failed to delete audio file", details=response.text)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/object/public/{self.bucket}/{path}"


async def get_storage_client(request: Request) -> StorageClient:
    """Get the storage client created at startup"""
    return request.app.state.storage_client
