"""Load and dump station records as JSON."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from radiodial.domain.stations import Station
from radiodial.exceptions import SnapshotError

logger = logging.getLogger(__name__)


class StationSet(list[Station]):
    """Stations in file order, plus the rows that could not be parsed.

    Unparseable rows (no usable ``id``, repeated ``id``, not an object) are
    never exposed as stations but are kept with their original positions so
    that ``dump_stations`` writes them back untouched.
    """

    def __init__(
        self,
        stations: Iterable[Station] = (),
        passthrough: Iterable[tuple[int, Any]] = (),
    ) -> None:
        super().__init__(stations)
        self.passthrough: list[tuple[int, Any]] = sorted(
            passthrough, key=lambda item: item[0]
        )

    @property
    def row_count(self) -> int:
        return len(self) + len(self.passthrough)


def parse_stations(raw: bytes | str, *, source: str) -> StationSet:
    """
    Parse a JSON array of station objects.

    Entries that are not objects, lack a usable ``id``, or repeat an ``id``
    already seen are logged and carried as pass-through rows; file order is
    preserved.

    Args:
        raw: JSON document.
        source: Label used in log messages (file path or blob key).

    Returns:
        StationSet of the parsed stations.

    Raises:
        ValueError: If the document is not valid JSON or not an array.
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"{source}: expected a JSON array of stations")

    stations: list[Station] = []
    passthrough: list[tuple[int, Any]] = []
    seen: set[str] = set()
    for index, item in enumerate(data):
        try:
            station = Station.from_dict(item)
        except ValueError as e:
            logger.warning("%s[%d]: invalid record (%s), kept as-is", source, index, e)
            passthrough.append((index, item))
            continue

        if station.station_id in seen:
            logger.warning(
                "%s[%d]: duplicate id '%s', kept as-is", source, index, station.station_id
            )
            passthrough.append((index, item))
            continue

        seen.add(station.station_id)
        stations.append(station)

    return StationSet(stations, passthrough)


def load_stations_from_json(path: str | Path) -> StationSet:
    """
    Load every station (active and inactive) from a JSON snapshot file.

    Raises:
        SnapshotError: If the file is missing, unreadable or corrupt.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        stations = parse_stations(raw, source=str(path))
    except (OSError, ValueError) as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e

    logger.debug("Loaded %d stations from %s", len(stations), path)
    return stations


def dump_stations(stations: Iterable[Station]) -> bytes:
    """Serialize the full record set the way it is persisted.

    Pass-through rows of a StationSet go back to their original positions.
    """
    rows: list[Any] = [s.to_dict() for s in stations]
    for index, row in getattr(stations, "passthrough", ()):
        rows.insert(min(index, len(rows)), row)
    return json.dumps(rows, indent=2, ensure_ascii=False).encode("utf-8")
