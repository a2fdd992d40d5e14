"""The mutable full record set, persisted as one object in the blob tier."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

import anyio.to_thread

from radiodial.domain.stations import Station
from radiodial.persistence.blob import BlobClient
from radiodial.persistence.loaders import dump_stations, parse_stations
from radiodial.persistence.snapshot import SnapshotReader

logger = logging.getLogger(__name__)

STATIONS_KEY = "stations.json"
JSON_CONTENT_TYPE = "application/json"

# A read strategy returns the full set, or None when its tier has no data.
ReadStrategy = tuple[str, Callable[[], Awaitable[list[Station] | None]]]


class BlobRecordStore:
    """Full record set (active and inactive) stored at ``stations.json``.

    Reads walk an ordered list of strategies: the blob tier first, then the
    raw snapshot (the blob tier starts empty until the first import), then
    an empty list. Writes replace the whole object with a single put; there
    is no concurrency token, so the last writer wins.
    """

    def __init__(self, blob: BlobClient, snapshot: SnapshotReader) -> None:
        self._blob = blob
        self._snapshot = snapshot

    @property
    def read_strategies(self) -> list[ReadStrategy]:
        return [
            ("blob", self._read_blob),
            ("snapshot", self._read_snapshot),
        ]

    async def read_all(self) -> list[Station]:
        """Return the full record set; never raises on storage failure."""
        for name, strategy in self.read_strategies:
            try:
                stations = await strategy()
            except Exception as exc:
                logger.warning("Reading stations from %s failed: %s", name, exc)
                continue
            if stations is not None:
                logger.debug("Read %d stations from %s", len(stations), name)
                return stations
            logger.info("No stations in %s, falling back", name)
        return []

    async def write_all(self, stations: Sequence[Station]) -> str:
        """Replace the stored record set. Raises BlobStorageError on failure."""
        url = await self._blob.put(
            STATIONS_KEY, dump_stations(stations), content_type=JSON_CONTENT_TYPE
        )
        logger.info("Saved %d stations to %s", len(stations), url)
        return url

    async def _read_blob(self) -> list[Station] | None:
        raw = await self._blob.get(STATIONS_KEY)
        if raw is None:
            return None
        return parse_stations(raw, source=STATIONS_KEY)

    async def _read_snapshot(self) -> list[Station] | None:
        return await anyio.to_thread.run_sync(self._snapshot.read_raw)
