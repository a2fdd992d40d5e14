"""Create, update, soft-delete and import stations against the blob tier."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import anyio.to_thread

from radiodial.domain.enums import FailureKind
from radiodial.domain.results import OperationResult
from radiodial.domain.stations import COVER_IMAGE, ID, IS_ACTIVE, Station, find_station
from radiodial.exceptions import ImageProcessingError
from radiodial.persistence.record_store import BlobRecordStore
from radiodial.persistence.snapshot import SnapshotReader
from radiodial.services.assets import AssetPipeline
from radiodial.services.invalidation import (
    ADMIN_LISTING_PATH,
    PUBLIC_LISTING_PATH,
    Invalidator,
    detail_path,
)

logger = logging.getLogger(__name__)

IdSource = Callable[[], str]

IMAGE_ERROR = "Failed to process image"
IMPORT_NOT_CONFIRMED = "Import overwrites all stations; confirmation required"


def timestamp_id() -> str:
    return f"station-{time.time_ns()}"


def not_found_error(station_id: str) -> str:
    return f"Station with id {station_id} not found"


class StationService:
    """Administrative operations on the full record set.

    Every mutation is a read-modify-write of the whole set. One lock per
    service serializes them inside this process; writers in other processes
    still race with last-writer-wins.
    """

    def __init__(
        self,
        store: BlobRecordStore,
        snapshot: SnapshotReader,
        assets: AssetPipeline,
        invalidator: Invalidator,
        *,
        id_source: IdSource = timestamp_id,
    ) -> None:
        self._store = store
        self._snapshot = snapshot
        self._assets = assets
        self._invalidator = invalidator
        self._id_source = id_source
        self._lock = asyncio.Lock()

    async def list_all(self) -> list[Station]:
        """Full record set, inactive included."""
        return await self._store.read_all()

    async def get(self, station_id: str) -> Station | None:
        stations = await self._store.read_all()
        index = find_station(stations, station_id)
        return stations[index] if index is not None else None

    async def create(
        self, data: Mapping[str, Any], image: bytes | None = None
    ) -> OperationResult:
        """Append a new active station; returns its id in the payload.

        An ``id`` or ``isActive`` in ``data`` is ignored. The image, if any, is
        committed under the new id before the record is written.
        """
        try:
            async with self._lock:
                stations = await self._store.read_all()
                station_id = self._assign_id(s.station_id for s in stations)

                fields = {k: v for k, v in data.items() if k != ID}
                fields[IS_ACTIVE] = True
                if image is not None:
                    fields[COVER_IMAGE] = await self._assets.commit(station_id, image)

                stations.append(Station(station_id, fields))
                await self._store.write_all(stations)
        except ImageProcessingError as e:
            logger.error("Error creating station: %s", e)
            return OperationResult.failure(IMAGE_ERROR, FailureKind.INVALID_IMAGE)
        except Exception:
            logger.exception("Error creating station")
            return OperationResult.failure("Failed to create station", FailureKind.STORAGE)

        logger.info("Created station %s", station_id)
        await self._notify(PUBLIC_LISTING_PATH, ADMIN_LISTING_PATH, detail_path(station_id))
        return OperationResult.ok(id=station_id)

    async def update(
        self,
        station_id: str,
        partial: Mapping[str, Any],
        image: bytes | None = None,
    ) -> OperationResult:
        """Shallow-merge ``partial`` over the station with ``station_id``.

        If an image is given it is committed first and its URL becomes
        ``coverImage``; a failed commit leaves the record untouched.
        """
        changes = dict(partial)
        try:
            async with self._lock:
                stations = await self._store.read_all()
                index = find_station(stations, station_id)
                if index is None:
                    return OperationResult.failure(
                        not_found_error(station_id), FailureKind.NOT_FOUND
                    )
                if changes.get(ID, station_id) != station_id:
                    return OperationResult.failure(
                        "Station id cannot be changed", FailureKind.INVALID_INPUT
                    )

                if image is not None:
                    changes[COVER_IMAGE] = await self._assets.commit(station_id, image)

                stations[index] = stations[index].merged(changes)
                await self._store.write_all(stations)
        except ImageProcessingError as e:
            logger.error("Error updating station %s: %s", station_id, e)
            return OperationResult.failure(IMAGE_ERROR, FailureKind.INVALID_IMAGE)
        except Exception:
            logger.exception("Error updating station %s", station_id)
            return OperationResult.failure("Failed to update station", FailureKind.STORAGE)

        logger.info("Updated station %s", station_id)
        await self._notify(PUBLIC_LISTING_PATH, ADMIN_LISTING_PATH, detail_path(station_id))
        return OperationResult.ok()

    async def soft_delete(self, station_id: str) -> OperationResult:
        """Hide a station from public reads; the record is kept."""
        return await self.update(station_id, {IS_ACTIVE: False})

    async def import_snapshot(self, *, confirm: bool = False) -> OperationResult:
        """Overwrite the blob tier with the raw snapshot (inactive included).

        Destroys every administrative edit made since the last import, so it
        refuses to run unless ``confirm`` is true.
        """
        if not confirm:
            return OperationResult.failure(
                IMPORT_NOT_CONFIRMED, FailureKind.NOT_CONFIRMED, count=0
            )

        try:
            async with self._lock:
                stations = await anyio.to_thread.run_sync(self._snapshot.read_raw)
                await self._store.write_all(stations)
        except Exception:
            logger.exception("Error importing snapshot")
            return OperationResult.failure("Failed to import", FailureKind.STORAGE, count=0)

        logger.info("Imported %d rows from %s", stations.row_count, self._snapshot.path)
        await self._notify(PUBLIC_LISTING_PATH, ADMIN_LISTING_PATH)
        return OperationResult.ok(count=stations.row_count)

    def _assign_id(self, existing_ids: Iterable[str]) -> str:
        taken = set(existing_ids)
        base = self._id_source()
        candidate = base
        suffix = 1
        while candidate in taken:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    async def _notify(self, *paths: str) -> None:
        for path in paths:
            try:
                await self._invalidator.invalidate(path)
            except Exception:
                logger.exception("Invalidation of %s failed", path)
