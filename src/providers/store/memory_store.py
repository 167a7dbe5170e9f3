"""In-memory document store.

Dict-backed store for development, tests and single-process deployments.
A batch is applied without yielding to the event loop, so within one
process every commit is atomic.  For multiple workers or replicas use the
SQLite store (or another backend implementing IDocumentStore).
"""

from __future__ import annotations

import copy
from typing import Any

import structlog

from src.interfaces.document_store import IDocumentStore, WriteBatch
from src.providers.store.operations import apply_write

logger = structlog.get_logger(logger_name=__name__)


class MemoryDocumentStore(IDocumentStore):
    """Document store holding every collection in a nested dict."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    # ------------------------------------------------------------------
    # IDocumentStore implementation
    # ------------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        data = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    async def commit(self, batch: WriteBatch) -> None:
        """Apply *batch* to staged copies, then publish them all at once."""
        staged: dict[tuple[str, str], dict[str, Any]] = {}
        for op in batch.ops:
            key = (op.collection, op.doc_id)
            current = staged.get(key)
            if current is None:
                current = self._collections.get(op.collection, {}).get(op.doc_id)
            staged[key] = apply_write(current, op)

        for (collection, doc_id), data in staged.items():
            self._collections.setdefault(collection, {})[doc_id] = data

        logger.debug("memory_store_commit", ops=len(batch), documents=len(staged))

    def get_provider_name(self) -> str:
        return "memory_store"

    def count(self, collection: str) -> int:
        """Return the number of documents in *collection*."""
        return len(self._collections.get(collection, {}))
