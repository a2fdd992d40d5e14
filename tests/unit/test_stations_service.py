import asyncio
import json

import pytest

from conftest import (
    PICOSA,
    FlakyBlobClient,
    RecordingInvalidator,
    make_image,
    write_snapshot,
)
from radiodial.domain.enums import FailureKind
from radiodial.persistence.record_store import BlobRecordStore
from radiodial.persistence.snapshot import SnapshotReader
from radiodial.services.assets import AssetPipeline
from radiodial.services.stations_service import StationService, timestamp_id


def stored_dicts(blob: FlakyBlobClient) -> list[dict]:
    return blob.stored_json()


def test_timestamp_id_has_station_prefix() -> None:
    assert timestamp_id().startswith("station-")


@pytest.mark.anyio
async def test_create_appends_active_station(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    result = await service.create(
        {"name": "Nueva", "id": "ignored", "isActive": False}
    )

    assert result.success is True
    new_id = result.payload["id"]
    assert new_id.startswith("station-")
    assert stored_dicts(blob) == [PICOSA, {"id": new_id, "name": "Nueva", "isActive": True}]
    assert invalidator.paths == ["/", "/admin", f"/estacion/{new_id}"]


@pytest.mark.anyio
async def test_create_with_image_sets_cover_under_new_id(
    service: StationService, blob: FlakyBlobClient
) -> None:
    result = await service.create({"name": "Con imagen"}, make_image((1600, 1600)))

    new_id = result.payload["id"]
    record = stored_dicts(blob)[-1]
    assert record["coverImage"] == f"https://blob.test/stations/{new_id}"
    assert blob.put_keys == [f"stations/{new_id}", "stations.json"]


@pytest.mark.anyio
async def test_create_with_bad_image_writes_nothing(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    result = await service.create({"name": "X"}, b"not an image")

    assert result.success is False
    assert result.kind is FailureKind.INVALID_IMAGE
    assert result.to_dict() == {"success": False, "error": "Failed to process image"}
    assert blob.put_keys == []
    assert invalidator.paths == []


@pytest.mark.anyio
async def test_create_reports_write_failure(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    blob.fail_put_prefix = "stations.json"

    result = await service.create({"name": "X"})

    assert result.to_dict() == {"success": False, "error": "Failed to create station"}
    assert result.kind is FailureKind.STORAGE
    assert invalidator.paths == []


@pytest.mark.anyio
async def test_concurrent_creates_never_share_an_id(
    store: BlobRecordStore,
    snapshot: SnapshotReader,
    blob: FlakyBlobClient,
    invalidator: RecordingInvalidator,
) -> None:
    # Constant id source forces every create onto the same candidate.
    service = StationService(
        store,
        snapshot,
        AssetPipeline(blob),
        invalidator,
        id_source=lambda: "station-1",
    )

    results = await asyncio.gather(
        *(service.create({"name": f"n{i}"}) for i in range(10))
    )

    ids = [r.payload["id"] for r in results]
    assert all(r.success for r in results)
    assert len(set(ids)) == 10
    assert ids[0] == "station-1"
    stored_ids = [d["id"] for d in stored_dicts(blob)]
    assert len(stored_ids) == len(set(stored_ids)) == 11


@pytest.mark.anyio
async def test_create_never_reuses_soft_deleted_id(
    store: BlobRecordStore,
    snapshot: SnapshotReader,
    blob: FlakyBlobClient,
    invalidator: RecordingInvalidator,
) -> None:
    ids = iter(["station-a", "station-a"])
    service = StationService(
        store, snapshot, AssetPipeline(blob), invalidator, id_source=lambda: next(ids)
    )

    first = await service.create({"name": "A"})
    await service.soft_delete(first.payload["id"])
    second = await service.create({"name": "B"})

    assert first.payload["id"] == "station-a"
    assert second.payload["id"] == "station-a-2"


@pytest.mark.anyio
async def test_update_merges_partial_fields(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    await service.update("s1", {"genre": "Salsa"})
    result = await service.update("s1", {"name": "Picosa FM", "genre": ""})

    assert result.to_dict() == {"success": True}
    assert stored_dicts(blob) == [
        {"id": "s1", "name": "Picosa FM", "isActive": True, "genre": ""}
    ]
    assert invalidator.paths[-3:] == ["/", "/admin", "/estacion/s1"]


@pytest.mark.anyio
async def test_empty_update_changes_nothing_but_still_invalidates(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    await service.import_snapshot(confirm=True)
    before = blob.stored("stations.json")
    invalidator.paths.clear()

    result = await service.update("s1", {})

    after = blob.stored("stations.json")
    assert result.success is True
    assert before is not None and after is not None
    assert after.data == before.data
    assert invalidator.paths == ["/", "/admin", "/estacion/s1"]


@pytest.mark.anyio
async def test_update_missing_id_is_named_failure_without_mutation(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    await service.import_snapshot(confirm=True)
    before = await service.list_all()
    invalidator.paths.clear()
    blob.put_keys.clear()

    result = await service.update("missing", {"name": "X"}, make_image((10, 10)))

    assert result.to_dict() == {
        "success": False,
        "error": "Station with id missing not found",
    }
    assert result.kind is FailureKind.NOT_FOUND
    assert await service.list_all() == before
    assert blob.put_keys == []
    assert invalidator.paths == []


@pytest.mark.anyio
async def test_update_rejects_id_change(
    service: StationService, blob: FlakyBlobClient
) -> None:
    result = await service.update("s1", {"id": "s2"})

    assert result.success is False
    assert result.kind is FailureKind.INVALID_INPUT
    assert blob.put_keys == []


@pytest.mark.anyio
async def test_update_with_image_replaces_cover(
    service: StationService, blob: FlakyBlobClient
) -> None:
    await service.update("s1", {"coverImage": "https://old"}, make_image((20, 20)))

    record = stored_dicts(blob)[0]
    assert record["coverImage"] == "https://blob.test/stations/s1"
    assert blob.stored("stations/s1") is not None


@pytest.mark.anyio
async def test_update_with_bad_image_leaves_record_untouched(
    service: StationService, blob: FlakyBlobClient
) -> None:
    await service.update("s1", {"coverImage": "https://old"})
    blob.put_keys.clear()

    result = await service.update("s1", {"name": "Changed"}, b"\x89PNG broken")

    assert result.kind is FailureKind.INVALID_IMAGE
    assert blob.put_keys == []
    assert stored_dicts(blob)[0]["coverImage"] == "https://old"
    assert stored_dicts(blob)[0]["name"] == "Picosa"


@pytest.mark.anyio
async def test_update_with_failed_image_put_aborts(
    service: StationService, blob: FlakyBlobClient
) -> None:
    blob.fail_put_prefix = "stations/"

    result = await service.update("s1", {"name": "Changed"}, make_image((20, 20)))

    assert result.to_dict() == {"success": False, "error": "Failed to update station"}
    assert blob.stored("stations.json") is None


@pytest.mark.anyio
async def test_update_write_failure_after_image_commit(
    service: StationService, blob: FlakyBlobClient
) -> None:
    blob.fail_put_prefix = "stations.json"

    result = await service.update("s1", {}, make_image((20, 20)))

    # The image landed but the record never points at it.
    assert result.kind is FailureKind.STORAGE
    assert blob.stored("stations/s1") is not None
    assert blob.stored("stations.json") is None
    assert (await service.get("s1")).cover_image is None  # type: ignore[union-attr]


@pytest.mark.anyio
async def test_soft_delete_then_restore_keeps_fields(
    service: StationService, blob: FlakyBlobClient, snapshot: SnapshotReader
) -> None:
    await service.update("s1", {"genre": "Salsa"})

    deleted = await service.soft_delete("s1")
    assert deleted.success is True
    station = await service.get("s1")
    assert station is not None and station.is_active is False

    restored = await service.update("s1", {"isActive": True})
    assert restored.success is True
    assert stored_dicts(blob) == [
        {"id": "s1", "name": "Picosa", "isActive": True, "genre": "Salsa"}
    ]


@pytest.mark.anyio
async def test_soft_delete_missing_id(service: StationService) -> None:
    result = await service.soft_delete("nope")

    assert result.kind is FailureKind.NOT_FOUND
    assert result.error == "Station with id nope not found"


@pytest.mark.anyio
async def test_import_requires_confirmation(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    result = await service.import_snapshot()

    assert result.success is False
    assert result.kind is FailureKind.NOT_CONFIRMED
    assert result.to_dict()["count"] == 0
    assert blob.put_keys == []
    assert invalidator.paths == []


@pytest.mark.anyio
async def test_import_overwrites_admin_edits(
    service: StationService, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    await service.create({"name": "Extra"})
    invalidator.paths.clear()

    result = await service.import_snapshot(confirm=True)

    assert result.to_dict() == {"success": True, "count": 1}
    assert stored_dicts(blob) == [PICOSA]
    assert invalidator.paths == ["/", "/admin"]


@pytest.mark.anyio
async def test_import_fails_when_snapshot_missing(
    tmp_path, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    snapshot = SnapshotReader(tmp_path / "missing.json")
    service = StationService(
        BlobRecordStore(blob, snapshot), snapshot, AssetPipeline(blob), invalidator
    )

    result = await service.import_snapshot(confirm=True)

    assert result.to_dict() == {"success": False, "count": 0, "error": "Failed to import"}
    assert blob.put_keys == []


@pytest.mark.anyio
async def test_invalidation_failure_does_not_fail_mutation(
    store: BlobRecordStore, snapshot: SnapshotReader, blob: FlakyBlobClient
) -> None:
    class BrokenInvalidator:
        async def invalidate(self, path: str) -> None:
            raise RuntimeError("cache down")

    service = StationService(store, snapshot, AssetPipeline(blob), BrokenInvalidator())

    result = await service.update("s1", {"name": "Still saved"})

    assert result.success is True
    assert stored_dicts(blob)[0]["name"] == "Still saved"


@pytest.mark.anyio
async def test_seed_import_update_scenario(
    service: StationService, store: BlobRecordStore, snapshot: SnapshotReader
) -> None:
    assert [s.to_dict() for s in await store.read_all()] == [PICOSA]

    assert (await service.import_snapshot(confirm=True)).success
    assert [s.to_dict() for s in await store.read_all()] == [PICOSA]

    assert (await service.update("s1", {"name": "Picosa FM"})).success
    assert [s.to_dict() for s in await store.read_all()] == [
        {"id": "s1", "name": "Picosa FM", "isActive": True}
    ]
    assert snapshot.get_by_id("missing") is None
    assert await service.get("missing") is None


@pytest.mark.anyio
async def test_update_keeps_rows_without_usable_id(
    service: StationService, blob: FlakyBlobClient
) -> None:
    rows = [
        {"id": "s1", "name": "Picosa", "isActive": True},
        {"name": "legacy row without id"},
        {"id": "s1", "name": "dup"},
    ]
    await blob.put(
        "stations.json", json.dumps(rows).encode(), content_type="application/json"
    )

    result = await service.update("s1", {"name": "Picosa FM"})

    assert result.success is True
    assert stored_dicts(blob) == [
        {"id": "s1", "name": "Picosa FM", "isActive": True},
        {"name": "legacy row without id"},
        {"id": "s1", "name": "dup"},
    ]


@pytest.mark.anyio
async def test_create_and_import_keep_rows_without_usable_id(
    tmp_path, blob: FlakyBlobClient, invalidator: RecordingInvalidator
) -> None:
    snapshot = SnapshotReader(
        write_snapshot(tmp_path / "stations.json", [PICOSA, {"name": "no id"}])
    )
    service = StationService(
        BlobRecordStore(blob, snapshot), snapshot, AssetPipeline(blob), invalidator
    )

    imported = await service.import_snapshot(confirm=True)
    created = await service.create({"name": "Nueva"})

    assert imported.to_dict() == {"success": True, "count": 2}
    assert stored_dicts(blob) == [
        PICOSA,
        {"name": "no id"},
        {"id": created.payload["id"], "name": "Nueva", "isActive": True},
    ]
