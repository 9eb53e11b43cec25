"""
Plant endpoints: listing, search, statistics, CRUD and change history.

Listing routes decode their query parameters into a QuerySpec and run it
through one shared RecordQueryEngine configured for plants. Mutating
routes require a Bearer token; the authenticated user is written to the
change history as ``changed_by``.

Static paths (``/search``, ``/stats``, ``/by-type/...``, ``/history``) are
declared before ``/{plant_id}`` so they are matched first.

CHANGELOG:
- 2026-10-14: Journal RTUs relabelled by a plant rename; empty search falls back to q (STORY-021)
- 2026-10-11: Unlink RTUs on plant delete (STORY-019)
- 2026-10-09: Add /stats (STORY-016)
- 2026-10-07: Record changes in the history journal (STORY-012)
- 2026-10-05: Initial creation (STORY-006)

TODO:
- None
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from plantops.api.deps import (
    CurrentUser,
    HistoryDep,
    PlantStoreDep,
    RtuStoreDep,
    SettingsDep,
)
from plantops.api.responses import dump, page_response, parse_choice, resolve_limit, success
from plantops.errors import InvalidInputError
from plantops.models.history import ChangeAction, ChangeEntity, ChangeRecord, ChangeRecordIn
from plantops.models.plant import PlantCreate, PlantStatus, PlantType, PlantUpdate
from plantops.models.rtu import Rtu
from plantops.services.aggregation import plant_stats
from plantops.services.history import HistoryLog, record_change
from plantops.services.query import QuerySpec, RecordQueryEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plants", tags=["plants"])

PLANT_QUERY: RecordQueryEngine = RecordQueryEngine(
    search_fields=["infra.name", "infra.address", "infra.type"],
    fields={
        "type": "infra.type",
        "status": "status",
        "region": "infra.address",
        "capacity": "infra.capacity",
        "contractType": "contract.contract_type",
    },
)


# ---------------------------------------------------------------------------
# Query decoding
# ---------------------------------------------------------------------------


def plant_query(
    settings: SettingsDep,
    search: str | None = None,
    q: str | None = None,
    type: str | None = None,
    status: str | None = None,
    region: str | None = None,
    min_capacity: Annotated[float | None, Query(alias="minCapacity")] = None,
    max_capacity: Annotated[float | None, Query(alias="maxCapacity")] = None,
    contract_type: Annotated[str | None, Query(alias="contractType")] = None,
    page: int = 1,
    limit: int | None = None,
) -> tuple[QuerySpec, dict[str, Any]]:
    """Decode plant listing parameters into a QuerySpec and echoed filters."""
    term = search or q
    plant_type = parse_choice(PlantType, type, "type")
    plant_status = parse_choice(PlantStatus, status, "status")
    contract = None if contract_type in (None, "", "all") else contract_type
    spec = QuerySpec(
        search=term,
        filters={"type": plant_type, "status": plant_status, "contractType": contract},
        ranges={"capacity": (min_capacity, max_capacity)},
        prefixes={"region": region},
        page=page,
        page_size=resolve_limit(limit, settings.plant_page_size, settings.max_page_size),
    )
    filters = {
        "search": term,
        "type": type,
        "status": status,
        "region": region,
        "minCapacity": min_capacity,
        "maxCapacity": max_capacity,
        "contractType": contract_type,
    }
    return spec, {k: v for k, v in filters.items() if v is not None}


PlantQuery = Annotated[tuple[QuerySpec, dict[str, Any]], Depends(plant_query)]


# ---------------------------------------------------------------------------
# Listing and statistics
# ---------------------------------------------------------------------------


@router.get("")
async def list_plants(plants: PlantStoreDep, query: PlantQuery) -> dict:
    """List plants matching the search, filter and pagination parameters."""
    spec, filters = query
    return page_response(PLANT_QUERY.run(plants.list(), spec), filters)


@router.get("/search")
async def search_plants(plants: PlantStoreDep, query: PlantQuery) -> dict:
    """Alias of the listing route under the older search URL."""
    spec, filters = query
    return page_response(PLANT_QUERY.run(plants.list(), spec), filters)


@router.get("/stats")
async def get_plant_stats(plants: PlantStoreDep) -> dict:
    """Capacity by type plus status and contract-type distributions."""
    return success(plant_stats(plants.list()))


@router.get("/by-type/{plant_type}")
async def list_plants_by_type(
    plant_type: str,
    plants: PlantStoreDep,
    settings: SettingsDep,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    """List plants of one generation type."""
    parsed = parse_choice(PlantType, plant_type, "type")
    spec = QuerySpec(
        filters={"type": parsed},
        page=page,
        page_size=resolve_limit(limit, settings.plant_page_size, settings.max_page_size),
    )
    result = PLANT_QUERY.run(plants.list(), spec)
    return page_response(result, {"type": plant_type}, filterType=plant_type)


# ---------------------------------------------------------------------------
# Change history
# ---------------------------------------------------------------------------


@router.get("/history")
async def get_plant_history(
    history: HistoryDep,
    settings: SettingsDep,
    limit: int | None = None,
    plant_id: Annotated[str | None, Query(alias="plantId")] = None,
) -> dict:
    """Most recent plant changes, newest first."""
    size = resolve_limit(limit, settings.history_limit, settings.max_page_size)
    if size < 1:
        raise InvalidInputError("limit must be >= 1.")
    entries = await history.recent(size, entity=ChangeEntity.PLANT, record_id=plant_id)
    return success(
        [dump(e) for e in entries],
        {"total": await history.count(ChangeEntity.PLANT), "limit": size},
    )


@router.post("/history", status_code=201)
async def add_plant_history(
    body: ChangeRecordIn,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Append a client-supplied plant change record."""
    entry = ChangeRecord(
        entity=ChangeEntity.PLANT,
        record_id=body.record_id,
        action=body.action,
        before=body.before,
        after=body.after,
        changed_by=user,
    )
    await history.record(entry)
    return success(dump(entry))


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def _record_rtu_relinks(
    history: HistoryLog,
    user: str,
    before: dict[str, Rtu],
    changed: list[Rtu],
) -> None:
    """Journal RTUs whose plant link or name followed a plant change."""
    for rtu in changed:
        await record_change(
            history,
            entity=ChangeEntity.RTU,
            record_id=rtu.id,
            action=ChangeAction.UPDATE,
            changed_by=user,
            before=before.get(rtu.id),
            after=rtu,
        )


@router.get("/{plant_id}")
async def get_plant(plant_id: int, plants: PlantStoreDep) -> dict:
    """Return one plant by id."""
    return success(dump(plants.get(plant_id)))


@router.post("", status_code=201)
async def create_plant(
    body: PlantCreate,
    plants: PlantStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Create a plant. ``infra.name`` and ``infra.type`` are required."""
    plant = plants.create(body)
    await record_change(
        history,
        entity=ChangeEntity.PLANT,
        record_id=plant.id,
        action=ChangeAction.CREATE,
        changed_by=user,
        after=plant,
    )
    return success(dump(plant))


@router.patch("/{plant_id}")
async def update_plant(
    plant_id: int,
    body: PlantUpdate,
    plants: PlantStoreDep,
    rtus: RtuStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Merge a partial update into a plant, section by section."""
    before = plants.get(plant_id)
    plant = plants.update(plant_id, body)
    if plant.infra.name != before.infra.name:
        linked = {r.id: r for r in rtus.list() if r.plant_id == plant_id}
        await _record_rtu_relinks(
            history, user, linked, rtus.relabel_plant(plant_id, plant.infra.name)
        )
    await record_change(
        history,
        entity=ChangeEntity.PLANT,
        record_id=plant_id,
        action=ChangeAction.UPDATE,
        changed_by=user,
        before=before,
        after=plant,
    )
    return success(dump(plant))


@router.delete("/{plant_id}")
async def delete_plant(
    plant_id: int,
    plants: PlantStoreDep,
    rtus: RtuStoreDep,
    history: HistoryDep,
    user: CurrentUser,
) -> dict:
    """Delete a plant and unlink every RTU that referenced it."""
    plant = plants.delete(plant_id)
    linked = {r.id: r for r in rtus.list() if r.plant_id == plant_id}
    await _record_rtu_relinks(history, user, linked, rtus.unlink_plant(plant_id))
    await record_change(
        history,
        entity=ChangeEntity.PLANT,
        record_id=plant_id,
        action=ChangeAction.DELETE,
        changed_by=user,
        before=plant,
    )
    return success(dump(plant))
