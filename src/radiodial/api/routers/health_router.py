import logging

import anyio.to_thread
from fastapi import APIRouter, Request

from radiodial.persistence.snapshot import SnapshotReader

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")  # type: ignore[misc]
async def health(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    ``snapshot`` is "ok" when the build-time snapshot can be read, "unreadable"
    when it cannot, and "missing" when no reader is configured. Public pages
    degrade to an empty list in the last two cases, so the status stays "ok".
    """
    reader = getattr(request.app.state, "snapshot_reader", None)
    if not isinstance(reader, SnapshotReader):
        snapshot = "missing"
    elif await anyio.to_thread.run_sync(reader.is_available):
        snapshot = "ok"
    else:
        snapshot = "unreadable"

    logger.debug("Health check requested (snapshot=%s)", snapshot)
    return {"status": "ok", "snapshot": snapshot}
