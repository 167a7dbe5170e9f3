"""SQLite-backed document store.

Persists every document as a JSON blob in a single ``documents`` table at
``data/lyricqueue.db``.  Uses ``aiosqlite`` for async I/O.

Each :class:`WriteBatch` runs inside ``BEGIN IMMEDIATE``: SQLite takes the
database write lock before the first read, so the read-apply-write of
array-union, array-remove and increment is atomic with respect to every
other connection, including other processes sharing the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.document_store import IDocumentStore, WriteBatch
from src.providers.store.operations import apply_write
from src.utils.errors import StoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/lyricqueue.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    collection  TEXT NOT NULL,
    doc_id      TEXT NOT NULL,
    data        TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    PRIMARY KEY (collection, doc_id)
);
"""

_SELECT_SQL = "SELECT data FROM documents WHERE collection = ? AND doc_id = ?;"

_UPSERT_SQL = """\
INSERT INTO documents (collection, doc_id, data)
VALUES (?, ?, ?)
ON CONFLICT(collection, doc_id)
DO UPDATE SET data       = excluded.data,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""


class SQLiteDocumentStore(IDocumentStore):
    """Document store persisted to a local SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout

    async def initialize(self) -> None:
        """Create the documents table if it does not exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_TABLE_SQL)
            await db.commit()
        logger.info("document_store_initialized", path=str(self._db_path))

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
            cursor = await db.execute(_SELECT_SQL, (collection, doc_id))
            row = await cursor.fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    async def get_many(self, collection: str, doc_ids: list[str]) -> dict[str, dict[str, Any]]:
        """Fetch several documents over a single connection."""
        found: dict[str, dict[str, Any]] = {}
        if not doc_ids:
            return found
        async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
            for doc_id in doc_ids:
                cursor = await db.execute(_SELECT_SQL, (collection, doc_id))
                row = await cursor.fetchone()
                if row is not None:
                    found[doc_id] = json.loads(row[0])
        return found

    async def commit(self, batch: WriteBatch) -> None:
        if not len(batch):
            return

        # isolation_level=None: transactions are controlled explicitly below.
        async with aiosqlite.connect(
            str(self._db_path), timeout=self._timeout, isolation_level=None
        ) as db:
            await db.execute("BEGIN IMMEDIATE;")
            try:
                staged: dict[tuple[str, str], dict[str, Any]] = {}
                for op in batch.ops:
                    key = (op.collection, op.doc_id)
                    current = staged.get(key)
                    if current is None:
                        cursor = await db.execute(_SELECT_SQL, key)
                        row = await cursor.fetchone()
                        current = json.loads(row[0]) if row is not None else None
                    staged[key] = apply_write(current, op)

                for (collection, doc_id), data in staged.items():
                    await db.execute(_UPSERT_SQL, (collection, doc_id, json.dumps(data)))
                await db.execute("COMMIT;")
            except StoreError:
                await db.execute("ROLLBACK;")
                raise
            except (aiosqlite.Error, TypeError, ValueError) as exc:
                await db.execute("ROLLBACK;")
                logger.error("document_store_commit_failed", ops=len(batch), error=str(exc))
                raise StoreError(
                    message=f"SQLite commit failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

        logger.debug("document_store_commit", ops=len(batch), documents=len(staged))

    def get_provider_name(self) -> str:
        return "sqlite_store"
