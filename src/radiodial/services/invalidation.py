"""Notify the page cache that rendered output is stale."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

PUBLIC_LISTING_PATH = "/"
ADMIN_LISTING_PATH = "/admin"


def detail_path(station_id: str) -> str:
    return f"/estacion/{station_id}"


class Invalidator(Protocol):
    async def invalidate(self, path: str) -> None:
        """Mark the cached output for ``path`` stale."""
        ...


class LoggingInvalidator:
    """Used when no cache webhook is configured."""

    async def invalidate(self, path: str) -> None:
        logger.info("Invalidate %s (no revalidation webhook configured)", path)


class WebhookInvalidator:
    """POSTs ``{"path": ...}`` to a revalidation endpoint.

    Failures are logged and swallowed: by the time this runs the mutation is
    already committed.
    """

    def __init__(
        self,
        url: str,
        *,
        secret: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def invalidate(self, path: str) -> None:
        headers = {"authorization": f"Bearer {self._secret}"} if self._secret else {}
        try:
            resp = await self._client.post(self._url, json={"path": path}, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Revalidation of %s failed: %s", path, exc)
            return
        logger.debug("Revalidated %s", path)
