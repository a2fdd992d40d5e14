"""Assemble the store, pipeline and service from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from radiodial.config import Settings
from radiodial.persistence.blob import BlobClient, HttpBlobClient, InMemoryBlobClient
from radiodial.persistence.record_store import BlobRecordStore
from radiodial.persistence.snapshot import SnapshotReader
from radiodial.services.assets import AssetPipeline
from radiodial.services.invalidation import (
    Invalidator,
    LoggingInvalidator,
    WebhookInvalidator,
)
from radiodial.services.stations_service import StationService

logger = logging.getLogger(__name__)


@dataclass
class Components:
    snapshot_reader: SnapshotReader
    blob: BlobClient
    invalidator: Invalidator
    station_service: StationService
    _closers: list[Any] = field(default_factory=list)

    async def aclose(self) -> None:
        for closeable in self._closers:
            await closeable.aclose()


def build_components(settings: Settings) -> Components:
    snapshot = SnapshotReader(settings.snapshot_path)
    closers: list[Any] = []

    blob: BlobClient
    if settings.blob_configured:
        http_blob = HttpBlobClient(
            api_url=settings.blob_api_url,  # type: ignore[arg-type]
            public_url=settings.blob_public_url,  # type: ignore[arg-type]
            token=settings.blob_token,  # type: ignore[arg-type]
        )
        closers.append(http_blob)
        blob = http_blob
    else:
        logger.warning("Blob tier not configured; using in-memory storage")
        blob = InMemoryBlobClient()

    invalidator: Invalidator
    if settings.revalidate_url:
        webhook = WebhookInvalidator(
            settings.revalidate_url, secret=settings.revalidate_secret
        )
        closers.append(webhook)
        invalidator = webhook
    else:
        invalidator = LoggingInvalidator()

    service = StationService(
        BlobRecordStore(blob, snapshot),
        snapshot,
        AssetPipeline(blob),
        invalidator,
    )
    return Components(snapshot, blob, invalidator, service, closers)
