"""
GET /api/history endpoint for the change journal across all record kinds.

Plant-only history is also served under ``/api/plants/history``; this route
adds RTU entries and per-record filtering.

CHANGELOG:
- 2026-10-07: Initial creation (STORY-012)

TODO:
- None
"""

from typing import Annotated

from fastapi import APIRouter, Query

from plantops.api.deps import HistoryDep, SettingsDep
from plantops.api.responses import dump, parse_choice, resolve_limit, success
from plantops.errors import InvalidInputError
from plantops.models.history import ChangeEntity

router = APIRouter(prefix="/api", tags=["history"])


@router.get("/history")
async def get_history(
    history: HistoryDep,
    settings: SettingsDep,
    entity: str | None = None,
    record_id: Annotated[str | None, Query(alias="recordId")] = None,
    limit: int | None = None,
) -> dict:
    """Most recent changes, newest first, optionally for one entity or record."""
    kind = parse_choice(ChangeEntity, entity, "entity")
    size = resolve_limit(limit, settings.history_limit, settings.max_page_size)
    if size < 1:
        raise InvalidInputError("limit must be >= 1.")
    entries = await history.recent(size, entity=kind, record_id=record_id)
    return success(
        [dump(e) for e in entries],
        {"total": await history.count(kind), "limit": size},
    )
