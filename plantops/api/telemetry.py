"""
GET /api/rtus/data endpoint for simulated RTU telemetry.

Reads the TelemetryFeed's cached snapshots; a request never triggers a
refresh. Without ``id`` every device's snapshot is returned keyed by id;
with ``id`` one snapshot is returned, or 404 for an unknown device.

CHANGELOG:
- 2026-10-03: Initial creation (STORY-010)

TODO:
- None
"""

from fastapi import APIRouter

from plantops.api.deps import FeedDep
from plantops.api.responses import dump, success
from plantops.errors import RecordNotFoundError

router = APIRouter(prefix="/api/rtus", tags=["telemetry"])


@router.get("/data")
async def get_telemetry(feed: FeedDep, id: str | None = None) -> dict:
    """Return the current telemetry snapshot(s).

    Args:
        feed: The process-wide telemetry feed.
        id: Optional device id.

    Returns:
        dict: Success envelope with one snapshot or a mapping of all.

    Raises:
        RecordNotFoundError: If ``id`` names no simulated device.
    """
    if id is None:
        return success({k: dump(s) for k, s in feed.get_all_snapshots().items()})
    snapshot = feed.get_snapshot(id)
    if snapshot is None:
        raise RecordNotFoundError("telemetry device", id)
    return success(dump(snapshot))
