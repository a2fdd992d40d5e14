import logging

import anyio.to_thread
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from radiodial.persistence.snapshot import SnapshotReader

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stations"])


def _snapshot_reader(request: Request) -> SnapshotReader | None:
    reader = getattr(request.app.state, "snapshot_reader", None)
    if reader is None or not isinstance(reader, SnapshotReader):
        logger.error("snapshot_reader not initialized on app.state")
        return None
    return reader


def _not_initialized() -> JSONResponse:
    return JSONResponse(
        status_code=500, content={"detail": "Snapshot reader not initialized"}
    )


@router.get("/stations")  # type: ignore[misc]
async def list_stations(request: Request) -> JSONResponse:
    """
    Return every active station from the build-time snapshot.

    Public reads never touch the blob tier; an unreadable snapshot yields [].
    """
    reader = _snapshot_reader(request)
    if reader is None:
        return _not_initialized()
    stations = await anyio.to_thread.run_sync(reader.list_active)
    return JSONResponse(content=[s.to_dict() for s in stations])


@router.get("/stations/ids")  # type: ignore[misc]
async def list_station_ids(request: Request) -> JSONResponse:
    reader = _snapshot_reader(request)
    if reader is None:
        return _not_initialized()
    return JSONResponse(content=await anyio.to_thread.run_sync(reader.list_ids))


@router.get("/stations/{station_id}")  # type: ignore[misc]
async def get_station(request: Request, station_id: str) -> JSONResponse:
    reader = _snapshot_reader(request)
    if reader is None:
        return _not_initialized()

    station = await anyio.to_thread.run_sync(reader.get_by_id, station_id)
    if station is None:
        return JSONResponse(status_code=404, content={"detail": "Station not found"})
    return JSONResponse(content=station.to_dict())
