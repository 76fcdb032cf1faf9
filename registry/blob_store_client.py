"""HTTP client for the content-addressed blob store holding packed dataset archives."""

import asyncio
from typing import Optional, Protocol

import httpx

from common.logging_config import get_logger
from registry.config import (
    BLOB_DELETE_RETRIES,
    BLOB_STORE_API_KEY,
    BLOB_STORE_API_URL,
    BLOB_STORE_TIMEOUT_SECONDS,
    BLOB_STORE_UPLOAD_URL,
)
from registry.exceptions import BlobStoreError

logger = get_logger(__name__)


class BlobStore(Protocol):
    async def store(self, data: bytes, filename: str) -> str: ...

    async def delete(self, blob_id: str, retries: int = BLOB_DELETE_RETRIES) -> bool: ...


class BlobStoreClient:
    """
    Client for an Estuary-style pinning service.

    Handles connection management, bearer-token auth and retries.
    """

    def __init__(
        self,
        api_url: str = BLOB_STORE_API_URL,
        upload_url: str = BLOB_STORE_UPLOAD_URL,
        api_key: str = BLOB_STORE_API_KEY,
        timeout: float = BLOB_STORE_TIMEOUT_SECONDS,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client with lazy connection."""
        self.api_url = api_url.rstrip("/")
        self.upload_url = upload_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.retry_delay = retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
            logger.info(f"Opened blob store client for {self.api_url}")
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def store(self, data: bytes, filename: str) -> str:
        """
        Upload a packed archive.

        Args:
            data: Archive bytes
            filename: Name reported to the blob store

        Returns:
            ID assigned by the blob store

        Raises:
            BlobStoreError: If the upload is rejected or the service is unreachable
        """
        client = self._ensure_client()
        try:
            response = await client.post(
                f"{self.upload_url}/content/add",
                files={"data": (filename, data)},
            )
        except httpx.HTTPError as e:
            raise BlobStoreError(f"Blob store unavailable: {e}") from e

        if response.status_code >= 400:
            raise BlobStoreError(f"Blob store rejected upload of {filename}: HTTP {response.status_code}")

        try:
            blob_id = response.json()["estuaryId"]
        except (ValueError, KeyError) as e:
            raise BlobStoreError(f"Malformed blob store response for {filename}") from e

        logger.info(f"Stored {filename} ({len(data)} bytes) as blob {blob_id}")
        return str(blob_id)

    async def delete(self, blob_id: str, retries: int = BLOB_DELETE_RETRIES) -> bool:
        """
        Unpin a blob, retrying transient failures with exponential backoff.

        A blob the store no longer knows about counts as deleted.

        Args:
            blob_id: ID assigned by the blob store
            retries: Maximum number of attempts

        Returns:
            True if the blob is gone, False if every attempt failed
        """
        client = self._ensure_client()
        attempts = max(1, retries)

        for attempt in range(attempts):
            try:
                response = await client.delete(f"{self.api_url}/pinning/pins/{blob_id}")
                if response.status_code < 300:
                    logger.info(f"Deleted blob {blob_id}")
                    return True
                if response.status_code == 404:
                    logger.info(f"Blob {blob_id} already absent from blob store")
                    return True
                logger.warning(
                    f"Blob store refused delete of {blob_id}: HTTP {response.status_code} "
                    f"(attempt {attempt + 1}/{attempts})"
                )
            except httpx.HTTPError as e:
                logger.warning(f"Failed to delete blob {blob_id} (attempt {attempt + 1}/{attempts}): {e}")

            if attempt < attempts - 1:
                await asyncio.sleep(self.retry_delay * (2 ** attempt))

        logger.error(f"Failed to delete blob {blob_id} after {attempts} attempts")
        return False
