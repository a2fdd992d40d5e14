import json
import logging
from typing import Any

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from radiodial.domain.enums import FailureKind
from radiodial.domain.results import OperationResult
from radiodial.services.stations_service import StationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

STATUS_CODES: dict[FailureKind, int] = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.NOT_CONFIRMED: 409,
    FailureKind.INVALID_INPUT: 422,
    FailureKind.INVALID_IMAGE: 422,
    FailureKind.STORAGE: 502,
}


class ImportRequest(BaseModel):
    """Body of POST /admin/import; ``confirm`` must be true to proceed."""

    confirm: bool = False


def _station_service(request: Request) -> StationService | None:
    service = getattr(request.app.state, "station_service", None)
    if service is None or not isinstance(service, StationService):
        logger.error("station_service not initialized on app.state")
        return None
    return service


def _not_initialized() -> JSONResponse:
    return JSONResponse(
        status_code=500, content={"detail": "Station service not initialized"}
    )


def _result_response(result: OperationResult) -> JSONResponse:
    status_code = 200 if result.success else STATUS_CODES.get(result.kind, 500)  # type: ignore[arg-type]
    return JSONResponse(status_code=status_code, content=result.to_dict())


def _invalid_data() -> JSONResponse:
    return _result_response(
        OperationResult.failure("data must be a JSON object", FailureKind.INVALID_INPUT)
    )


def _parse_data(raw: str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


async def _read_image(image: UploadFile | None) -> bytes | None:
    # Browsers send an unnamed empty part when no file was chosen. A named
    # file is always passed on, even when empty, so it fails decoding.
    if image is None or not image.filename:
        return None
    return await image.read()


@router.get("/stations")  # type: ignore[misc]
async def list_all_stations(request: Request) -> JSONResponse:
    """Full record set from the blob tier, inactive stations included."""
    service = _station_service(request)
    if service is None:
        return _not_initialized()
    stations = await service.list_all()
    return JSONResponse(content=[s.to_dict() for s in stations])


@router.post("/stations")  # type: ignore[misc]
async def create_station(
    request: Request,
    data: str = Form(...),
    image: UploadFile | None = File(None),
) -> JSONResponse:
    """
    Create a station from a multipart form.

    ``data`` is a JSON object with the station's fields; ``image`` is an
    optional cover image.
    """
    service = _station_service(request)
    if service is None:
        return _not_initialized()

    fields = _parse_data(data)
    if fields is None:
        return _invalid_data()

    result = await service.create(fields, await _read_image(image))
    return _result_response(result)


@router.patch("/stations/{station_id}")  # type: ignore[misc]
async def update_station(
    request: Request,
    station_id: str,
    data: str = Form("{}"),
    image: UploadFile | None = File(None),
) -> JSONResponse:
    """Partially update a station; fields missing from ``data`` are kept."""
    service = _station_service(request)
    if service is None:
        return _not_initialized()

    fields = _parse_data(data)
    if fields is None:
        return _invalid_data()

    result = await service.update(station_id, fields, await _read_image(image))
    return _result_response(result)


@router.delete("/stations/{station_id}")  # type: ignore[misc]
async def delete_station(request: Request, station_id: str) -> JSONResponse:
    """Soft delete: the station is hidden from public reads but kept."""
    service = _station_service(request)
    if service is None:
        return _not_initialized()
    return _result_response(await service.soft_delete(station_id))


@router.post("/import")  # type: ignore[misc]
async def import_snapshot(request: Request, body: ImportRequest) -> JSONResponse:
    """Overwrite the blob tier with the build-time snapshot."""
    service = _station_service(request)
    if service is None:
        return _not_initialized()
    logger.warning("Snapshot import requested (confirm=%s)", body.confirm)
    return _result_response(await service.import_snapshot(confirm=body.confirm))
