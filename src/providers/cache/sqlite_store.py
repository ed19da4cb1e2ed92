"""SQLite-backed artifact store.

Persists cache entries to a local SQLite database using ``aiosqlite`` for
async I/O.  Artifacts are stored as a JSON array in one TEXT column; the
store never issues DELETE statements.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.artifact_store import IArtifactStore
from src.models.cache import ArtifactKind, CacheEntry, LifecycleStatus
from src.utils.errors import CacheError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/gravity_cache.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS cache_entries (
    entry_id      TEXT    PRIMARY KEY,
    owner_id      TEXT    NOT NULL,
    fingerprint   TEXT    NOT NULL,
    kind          TEXT    NOT NULL,
    artifacts     TEXT    NOT NULL,
    generated_at  TEXT    NOT NULL,
    expires_at    TEXT    NOT NULL,
    status        TEXT    NOT NULL,
    seq           INTEGER NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_cache_key ON cache_entries(owner_id, fingerprint, kind);",
    "CREATE INDEX IF NOT EXISTS idx_cache_status ON cache_entries(status);",
]

_INSERT_SQL = """\
INSERT INTO cache_entries
    (entry_id, owner_id, fingerprint, kind, artifacts, generated_at, expires_at, status, seq)
VALUES (?, ?, ?, ?, ?, ?, ?, ?,
        (SELECT COALESCE(MAX(seq), 0) + 1 FROM cache_entries));
"""

_SELECT_SQL = """\
SELECT entry_id, owner_id, fingerprint, kind, artifacts, generated_at, expires_at, status
FROM cache_entries
WHERE owner_id = ? AND fingerprint = ? AND kind = ?
ORDER BY generated_at DESC, seq DESC;
"""


class SQLiteArtifactStore(IArtifactStore):
    """Artifact store persisted in a SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise CacheError(message=f"cannot initialize cache db: {exc}", provider_name="sqlite") from exc
        logger.info("cache_db_initialized", path=str(self._db_path))

    async def insert(self, entry: CacheEntry) -> None:
        params = (
            entry.entry_id,
            entry.owner_id,
            entry.fingerprint,
            entry.kind.value,
            json.dumps(entry.artifacts),
            entry.generated_at.isoformat(timespec="microseconds"),
            entry.expires_at.isoformat(timespec="microseconds"),
            entry.status.value,
        )
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_INSERT_SQL, params)
                await db.commit()
        except aiosqlite.Error as exc:
            raise CacheError(message=f"insert failed: {exc}", provider_name="sqlite") from exc

    async def list_entries(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
    ) -> list[CacheEntry]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_SQL, (owner_id, fingerprint, kind.value))
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise CacheError(message=f"select failed: {exc}", provider_name="sqlite") from exc
        return [self._row_to_entry(dict(r)) for r in rows]

    async def set_status(
        self,
        owner_id: str,
        fingerprint: str,
        kind: ArtifactKind,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> int:
        sql = (
            "UPDATE cache_entries SET status = ? "
            "WHERE owner_id = ? AND fingerprint = ? AND kind = ? AND status != ?"
        )
        params: list[Any] = [status.value, owner_id, fingerprint, kind.value, status.value]
        if only_from is not None:
            if not only_from:
                return 0
            placeholders = ", ".join("?" for _ in only_from)
            sql += f" AND status IN ({placeholders})"
            params.extend(sorted(s.value for s in only_from))
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql, params)
                await db.commit()
                return cursor.rowcount
        except aiosqlite.Error as exc:
            raise CacheError(message=f"status update failed: {exc}", provider_name="sqlite") from exc

    async def set_entry_status(
        self,
        entry_id: str,
        status: LifecycleStatus,
        only_from: frozenset[LifecycleStatus] | None = None,
    ) -> bool:
        sql = "UPDATE cache_entries SET status = ? WHERE entry_id = ?"
        params: list[Any] = [status.value, entry_id]
        if only_from is not None:
            if not only_from:
                return False
            placeholders = ", ".join("?" for _ in only_from)
            sql += f" AND status IN ({placeholders})"
            params.extend(sorted(s.value for s in only_from))
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql, params)
                await db.commit()
                return cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise CacheError(message=f"status update failed: {exc}", provider_name="sqlite") from exc

    def get_provider_name(self) -> str:
        return "sqlite"

    @staticmethod
    def _row_to_entry(row: dict[str, Any]) -> CacheEntry:
        return CacheEntry(
            entry_id=row["entry_id"],
            owner_id=row["owner_id"],
            fingerprint=row["fingerprint"],
            kind=ArtifactKind(row["kind"]),
            artifacts=json.loads(row["artifacts"]),
            generated_at=datetime.fromisoformat(row["generated_at"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
            status=LifecycleStatus(row["status"]),
        )
