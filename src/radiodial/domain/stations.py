from __future__ import annotations

from collections.abc import Mapping
from typing import Any

ID = "id"
IS_ACTIVE = "isActive"
COVER_IMAGE = "coverImage"


class Station:
    """One station record: identity, activity flag, cover image and opaque fields.

    Descriptive fields (name, stream URL, metadata) are carried verbatim and
    never validated. ``to_dict()`` returns exactly what will be persisted.
    """

    _station_id: str
    _fields: dict[str, Any]

    def __init__(self, station_id: str, fields: Mapping[str, Any] | None = None) -> None:
        self._station_id = self._validate_station_id(station_id)
        self._fields = {k: v for k, v in (fields or {}).items() if k != ID}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Station:
        if not isinstance(data, Mapping):
            raise ValueError("station record must be a JSON object")
        return cls(data.get(ID), data)  # type: ignore[arg-type]

    # properties
    @property
    def station_id(self) -> str:
        return self._station_id

    @property
    def is_active(self) -> bool:
        # Only an explicit false hides a record; absence means active.
        return self._fields.get(IS_ACTIVE) is not False

    @property
    def cover_image(self) -> str | None:
        return self._fields.get(COVER_IMAGE)

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self._fields)

    # domain actions
    def merged(self, partial: Mapping[str, Any]) -> Station:
        """Return a copy with ``partial`` shallow-merged over this record.

        Keys absent from ``partial`` are kept; keys present overwrite, including
        explicit false and empty values.
        """
        if ID in partial and partial[ID] != self._station_id:
            raise ValueError("station id is immutable")
        return Station(self._station_id, {**self._fields, **partial})

    def to_dict(self) -> dict[str, Any]:
        return {ID: self._station_id, **self._fields}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Station):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Station({self._station_id!r}, active={self.is_active})"

    # validation
    @staticmethod
    def _validate_station_id(station_id: str) -> str:
        if not isinstance(station_id, str) or not station_id.strip():
            raise ValueError("station id must be a non-empty string")
        return station_id


def active_only(stations: list[Station]) -> list[Station]:
    """The single place where soft-deleted records are filtered out."""
    return [s for s in stations if s.is_active]


def find_station(stations: list[Station], station_id: str) -> int | None:
    """Linear scan for ``station_id``; returns its index or None."""
    for index, station in enumerate(stations):
        if station.station_id == station_id:
            return index
    return None
