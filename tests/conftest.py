from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from radiodial.exceptions import BlobStorageError
from radiodial.persistence.blob import PUBLIC_ACCESS, InMemoryBlobClient
from radiodial.persistence.record_store import BlobRecordStore
from radiodial.persistence.snapshot import SnapshotReader
from radiodial.services.assets import AssetPipeline
from radiodial.services.stations_service import StationService

PICOSA = {"id": "s1", "name": "Picosa", "isActive": True}


class FlakyBlobClient(InMemoryBlobClient):
    """In-memory blob tier whose reads and writes can be made to fail."""

    def __init__(self) -> None:
        super().__init__("https://blob.test")
        self.fail_get = False
        self.fail_put_prefix: str | None = None
        self.put_keys: list[str] = []

    async def get(self, key: str) -> bytes | None:
        if self.fail_get:
            raise BlobStorageError("blob tier unreachable", key=key)
        return await super().get(key)

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        access: str = PUBLIC_ACCESS,
    ) -> str:
        if self.fail_put_prefix is not None and key.startswith(self.fail_put_prefix):
            raise BlobStorageError("put rejected", key=key, status_code=503)
        self.put_keys.append(key)
        return await super().put(key, data, content_type=content_type, access=access)

    def stored_json(self, key: str = "stations.json") -> Any:
        blob = self.stored(key)
        assert blob is not None
        return json.loads(blob.data)


class RecordingInvalidator:
    def __init__(self) -> None:
        self.paths: list[str] = []

    async def invalidate(self, path: str) -> None:
        self.paths.append(path)


def write_snapshot(path: Path, records: list[Any]) -> Path:
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def make_image(size: tuple[int, int], fmt: str = "PNG", mode: str = "RGB") -> bytes:
    out = io.BytesIO()
    Image.new(mode, size, color="red").save(out, format=fmt)
    return out.getvalue()


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def snapshot_path(tmp_path: Path) -> Path:
    return write_snapshot(tmp_path / "stations.json", [PICOSA])


@pytest.fixture()
def snapshot(snapshot_path: Path) -> SnapshotReader:
    return SnapshotReader(snapshot_path)


@pytest.fixture()
def blob() -> FlakyBlobClient:
    return FlakyBlobClient()


@pytest.fixture()
def store(blob: FlakyBlobClient, snapshot: SnapshotReader) -> BlobRecordStore:
    return BlobRecordStore(blob, snapshot)


@pytest.fixture()
def invalidator() -> RecordingInvalidator:
    return RecordingInvalidator()


@pytest.fixture()
def service(
    store: BlobRecordStore,
    snapshot: SnapshotReader,
    blob: FlakyBlobClient,
    invalidator: RecordingInvalidator,
) -> StationService:
    return StationService(store, snapshot, AssetPipeline(blob), invalidator)
