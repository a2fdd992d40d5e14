"""Clients for the remote key-value blob tier."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from radiodial.exceptions import BlobStorageError

logger = logging.getLogger(__name__)

PUBLIC_ACCESS = "public"


class BlobClient(Protocol):
    """get/put over an object store addressed by string keys."""

    async def get(self, key: str) -> bytes | None:
        """Return the object's bytes, or None if the key does not exist."""
        ...

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        access: str = PUBLIC_ACCESS,
    ) -> str:
        """Store ``data`` at ``key``, replacing any prior object; return its public URL."""
        ...


@dataclass(frozen=True)
class StoredBlob:
    data: bytes
    content_type: str
    access: str


class InMemoryBlobClient:
    """In-memory blob tier for development and tests."""

    def __init__(self, public_url: str = "memory://blob") -> None:
        self._public_url = public_url.rstrip("/")
        self._objects: dict[str, StoredBlob] = {}

    async def get(self, key: str) -> bytes | None:
        blob = self._objects.get(key)
        return blob.data if blob is not None else None

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        access: str = PUBLIC_ACCESS,
    ) -> str:
        self._objects[key] = StoredBlob(bytes(data), content_type, access)
        return f"{self._public_url}/{key}"

    def stored(self, key: str) -> StoredBlob | None:
        """Return the stored object with its metadata, or None."""
        return self._objects.get(key)

    def keys(self) -> list[str]:
        return sorted(self._objects)

    def clear(self) -> None:
        self._objects.clear()


class HttpBlobClient:
    """Blob tier exposed over HTTP.

    Reads go to the public URL (``GET {public_url}/{key}``); writes go to the
    authenticated API (``PUT {api_url}/{key}``), which answers with a JSON
    body containing the object's public ``url``. No timeout is imposed here
    beyond the transport default.
    """

    def __init__(
        self,
        *,
        api_url: str,
        public_url: str,
        token: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._public_url = public_url.rstrip("/")
        self._token = token
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get(self, key: str) -> bytes | None:
        url = f"{self._public_url}/{key}"
        try:
            resp = await self._client.get(url, headers={"cache-control": "no-cache"})
        except httpx.HTTPError as exc:
            raise BlobStorageError(f"GET {key} failed: {exc}", key=key) from exc

        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise BlobStorageError(
                f"GET {key} returned HTTP {resp.status_code}",
                key=key,
                status_code=resp.status_code,
            )
        return resp.content

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        access: str = PUBLIC_ACCESS,
    ) -> str:
        headers = {
            "authorization": f"Bearer {self._token}",
            "x-content-type": content_type,
            "x-access": access,
            # Keys are deterministic; an existing object is replaced in place.
            "x-add-random-suffix": "0",
            "x-allow-overwrite": "1",
        }
        try:
            resp = await self._client.put(
                f"{self._api_url}/{key}", content=data, headers=headers
            )
        except httpx.HTTPError as exc:
            raise BlobStorageError(f"PUT {key} failed: {exc}", key=key) from exc

        if resp.is_error:
            raise BlobStorageError(
                f"PUT {key} returned HTTP {resp.status_code}",
                key=key,
                status_code=resp.status_code,
            )

        try:
            url = resp.json()["url"]
        except (ValueError, KeyError, TypeError) as exc:
            raise BlobStorageError(
                f"PUT {key} returned no public url", key=key
            ) from exc

        logger.debug("Stored %d bytes at %s", len(data), key)
        return str(url)
