"""
Change-history journal backed by async SQLite.

Every create / update / delete on plants and RTUs is appended here with a
before/after snapshot, the acting user and a timestamp, for audit display.
The journal is an auxiliary sink: route handlers go through
``record_change()``, which logs and swallows sink failures so a mutation
never fails because the journal did.

Operations:
- record(entry): INSERT one ChangeRecord.
- recent(limit, entity, record_id): newest entries first, optionally filtered.
- count(entity): number of stored entries.
- close(): Close the underlying database connection.

Supports async context manager protocol for clean resource management.

CHANGELOG:
- 2026-10-07: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
from pydantic import BaseModel

from plantops.models.history import ChangeAction, ChangeEntity, ChangeRecord

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS change_history (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    entity TEXT NOT NULL,
    record_id TEXT NOT NULL,
    action TEXT NOT NULL,
    before TEXT,
    after TEXT,
    changed_by TEXT NOT NULL,
    changed_at TEXT NOT NULL
);
"""

_INSERT_SQL = """\
INSERT INTO change_history
    (id, entity, record_id, action, before, after, changed_by, changed_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_COLUMNS = (
    "SELECT id, entity, record_id, action, before, after, changed_by, changed_at "
    "FROM change_history"
)


def _dump(snapshot: dict[str, Any] | None) -> str | None:
    return None if snapshot is None else json.dumps(snapshot, default=str)


def _load(raw: str | None) -> dict[str, Any] | None:
    return None if raw is None else json.loads(raw)


class HistoryLog:
    """Append-only async journal of record changes in a SQLite file.

    Args:
        path: Filesystem path for the SQLite database file. Parent
              directories are created on open.

    Usage::

        async with HistoryLog(path="data/history.db") as history:
            await history.record(entry)
            latest = await history.recent(10, entity=ChangeEntity.PLANT)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        """Open the SQLite connection and initialize the schema."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.execute("PRAGMA journal_mode=WAL;")
        await self._db.execute(_CREATE_TABLE_SQL)
        await self._db.commit()

    async def close(self) -> None:
        """Close the underlying SQLite connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> HistoryLog:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def record(self, entry: ChangeRecord) -> None:
        """Append one change entry.

        Args:
            entry: The change to store.
        """
        assert self._db is not None, "HistoryLog not opened. Call open() or use async with."
        await self._db.execute(
            _INSERT_SQL,
            (
                entry.id,
                entry.entity.value,
                entry.record_id,
                entry.action.value,
                _dump(entry.before),
                _dump(entry.after),
                entry.changed_by,
                entry.changed_at.isoformat(),
            ),
        )
        await self._db.commit()

    async def recent(
        self,
        limit: int,
        entity: ChangeEntity | None = None,
        record_id: str | None = None,
    ) -> list[ChangeRecord]:
        """Return up to *limit* entries, newest first.

        Args:
            limit: Maximum number of entries. Values below 1 return nothing.
            entity: Only entries for this record kind, when given.
            record_id: Only entries for this record id, when given.

        Returns:
            list[ChangeRecord]: Matching entries in reverse insertion order.
        """
        assert self._db is not None, "HistoryLog not opened. Call open() or use async with."
        if limit < 1:
            return []
        clauses: list[str] = []
        params: list[Any] = []
        if entity is not None:
            clauses.append("entity = ?")
            params.append(entity.value)
        if record_id is not None:
            clauses.append("record_id = ?")
            params.append(record_id)
        sql = _SELECT_COLUMNS
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY seq DESC LIMIT ?;"
        params.append(limit)

        cursor = await self._db.execute(sql, params)
        rows = await cursor.fetchall()
        return [
            ChangeRecord(
                id=row[0],
                entity=ChangeEntity(row[1]),
                record_id=row[2],
                action=ChangeAction(row[3]),
                before=_load(row[4]),
                after=_load(row[5]),
                changed_by=row[6],
                changed_at=datetime.fromisoformat(row[7]),
            )
            for row in rows
        ]

    async def count(self, entity: ChangeEntity | None = None) -> int:
        """Return the number of stored entries, optionally for one kind."""
        assert self._db is not None, "HistoryLog not opened. Call open() or use async with."
        if entity is None:
            cursor = await self._db.execute("SELECT COUNT(*) FROM change_history;")
        else:
            cursor = await self._db.execute(
                "SELECT COUNT(*) FROM change_history WHERE entity = ?;", (entity.value,)
            )
        row = await cursor.fetchone()
        return row[0]


def snapshot(record: BaseModel | None) -> dict[str, Any] | None:
    """JSON-compatible dict of a stored record, for before/after fields."""
    return None if record is None else record.model_dump(mode="json")


async def record_change(
    history: HistoryLog,
    *,
    entity: ChangeEntity,
    record_id: object,
    action: ChangeAction,
    changed_by: str,
    before: BaseModel | None = None,
    after: BaseModel | None = None,
) -> ChangeRecord | None:
    """Append a change to the journal without ever raising.

    Failures are logged as warnings and reported by returning None; the
    caller's mutation has already been committed and stands.

    Returns:
        ChangeRecord | None: The stored entry, or None when the sink failed.
    """
    entry = ChangeRecord(
        entity=entity,
        record_id=str(record_id),
        action=action,
        before=snapshot(before),
        after=snapshot(after),
        changed_by=changed_by,
    )
    try:
        await history.record(entry)
    except Exception:
        logger.warning(
            "Failed to record %s %s %s in history",
            entity.value,
            action.value,
            record_id,
            exc_info=True,
        )
        return None
    return entry
