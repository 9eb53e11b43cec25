"""
Pydantic models for change-history entries.

CHANGELOG:
- 2026-10-07: Initial creation (STORY-012)

TODO:
- None
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ChangeAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEntity(str, Enum):
    PLANT = "plant"
    RTU = "rtu"


class ChangeRecord(BaseModel):
    """An audit entry for one create/update/delete.

    Attributes:
        before: Record as it was before the change (None on create).
        after: Record as it is after the change (None on delete).
        changed_by: User name of the authenticated actor.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    entity: ChangeEntity
    record_id: str
    action: ChangeAction
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    changed_by: str
    changed_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class ChangeRecordIn(BaseModel):
    """Client-supplied history entry for a plant (POST /api/plants/history)."""

    record_id: str = Field(min_length=1)
    action: ChangeAction
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
