"""Read-only access to the build-time station snapshot."""

import logging
from pathlib import Path

from radiodial.domain.stations import Station, active_only
from radiodial.exceptions import SnapshotError
from radiodial.persistence.loaders import StationSet, load_stations_from_json

logger = logging.getLogger(__name__)


class SnapshotReader:
    """Reads the immutable station list bundled with the application.

    Public pages read through this class only. Failures degrade to an empty
    list so a broken snapshot renders as "no stations" instead of an error.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_raw(self) -> StationSet:
        """Every record, inactive included. Raises SnapshotError on failure."""
        return load_stations_from_json(self._path)

    def load_raw(self) -> list[Station]:
        """Like read_raw, but returns [] when the snapshot cannot be read."""
        try:
            return self.read_raw()
        except SnapshotError as e:
            logger.error("Snapshot unavailable: %s", e)
            return []

    def is_available(self) -> bool:
        """True when the snapshot exists and parses."""
        try:
            self.read_raw()
        except SnapshotError:
            return False
        return True

    def list_active(self) -> list[Station]:
        """Active records in file order."""
        return active_only(self.load_raw())

    def get_by_id(self, station_id: str) -> Station | None:
        for station in self.list_active():
            if station.station_id == station_id:
                return station
        return None

    def list_ids(self) -> list[str]:
        return [s.station_id for s in self.list_active()]
