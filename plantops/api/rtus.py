"""
RTU endpoints: listing, statistics and CRUD.

Listing uses a RecordQueryEngine configured for RTUs: free text over name,
model, serial number and location, equality on status / protocol /
plant link, a substring match on manufacturer and an inclusive battery
range. Mutating routes require a Bearer token and are recorded in the
change history.

The telemetry router (``/api/rtus/data``) is registered before this one so
its static path is not captured by ``/{rtu_id}``.

CHANGELOG:
- 2026-10-14: Empty search falls back to q (STORY-021)
- 2026-10-09: Add /stats (STORY-016)
- 2026-10-07: Record changes in the history journal (STORY-012)
- 2026-10-05: Initial creation (STORY-007)

TODO:
- None
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Query

from plantops.api.deps import CurrentUser, HistoryDep, RtuStoreDep, SettingsDep
from plantops.api.responses import dump, page_response, parse_choice, resolve_limit, success
from plantops.models.history import ChangeAction, ChangeEntity
from plantops.models.rtu import CommunicationProtocol, RtuCreate, RtuStatus, RtuUpdate
from plantops.services.aggregation import rtu_stats
from plantops.services.history import record_change
from plantops.services.query import QuerySpec, RecordQueryEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rtus", tags=["rtus"])

RTU_QUERY: RecordQueryEngine = RecordQueryEngine(
    search_fields=["name", "model", "serial_number", "location"],
    fields={
        "status": "status",
        "protocol": "communication_protocol",
        "manufacturer": "manufacturer",
        "plant_id": "plant_id",
        "battery": "battery_level",
    },
)


@router.get("")
async def list_rtus(
    rtus: RtuStoreDep,
    settings: SettingsDep,
    search: str | None = None,
    q: str | None = None,
    status: str | None = None,
    protocol: str | None = None,
    manufacturer: str | None = None,
    plant_id: int | None = None,
    min_battery: Annotated[float | None, Query(alias="minBattery")] = None,
    max_battery: Annotated[float | None, Query(alias="maxBattery")] = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    """List RTUs matching the search, filter and pagination parameters."""
    term = search or q
    spec = QuerySpec(
        search=term,
        filters={
            "status": parse_choice(RtuStatus, status, "status"),
            "protocol": parse_choice(CommunicationProtocol, protocol, "protocol"),
            "plant_id": plant_id,
        },
        ranges={"battery": (min_battery, max_battery)},
        contains={"manufacturer": manufacturer},
        page=page,
        page_size=resolve_limit(limit, settings.rtu_page_size, settings.max_page_size),
    )
    filters: dict[str, Any] = {
        "search": term,
        "status": status,
        "protocol": protocol,
        "manufacturer": manufacturer,
        "plant_id": plant_id,
        "minBattery": min_battery,
        "maxBattery": max_battery,
    }
    result = RTU_QUERY.run(rtus.list(), spec)
    return page_response(result, {k: v for k, v in filters.items() if v is not None})


@router.get("/stats")
async def get_rtu_stats(rtus: RtuStoreDep) -> dict:
    """Status, protocol and manufacturer distributions."""
    return success(rtu_stats(rtus.list()))


@router.get("/{rtu_id}")
async def get_rtu(rtu_id: str, rtus: RtuStoreDep) -> dict:
    """Return one RTU by id."""
    return success(dump(rtus.get(rtu_id)))


@router.post("", status_code=201)
async def create_rtu(
    body: RtuCreate,
    rtus: RtuStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Register an RTU. ``plant_id``, when given, must name an existing plant."""
    rtu = rtus.create(body)
    await record_change(
        history,
        entity=ChangeEntity.RTU,
        record_id=rtu.id,
        action=ChangeAction.CREATE,
        changed_by=user,
        after=rtu,
    )
    return success(dump(rtu))


@router.patch("/{rtu_id}")
async def update_rtu(
    rtu_id: str,
    body: RtuUpdate,
    rtus: RtuStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Merge a partial update into an RTU; explicit null clears nullable fields."""
    before = rtus.get(rtu_id)
    rtu = rtus.update(rtu_id, body)
    await record_change(
        history,
        entity=ChangeEntity.RTU,
        record_id=rtu_id,
        action=ChangeAction.UPDATE,
        changed_by=user,
        before=before,
        after=rtu,
    )
    return success(dump(rtu))


@router.delete("/{rtu_id}")
async def delete_rtu(
    rtu_id: str,
    rtus: RtuStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Delete an RTU."""
    rtu = rtus.delete(rtu_id)
    await record_change(
        history,
        entity=ChangeEntity.RTU,
        record_id=rtu_id,
        action=ChangeAction.DELETE,
        changed_by=user,
        before=rtu,
    )
    return success(dump(rtu))
