"""Abstract base class for keyed document stores.

Defines the persistence contract the engine runs on: documents addressed
by ``(collection, doc_id)``, merge / create-only upserts, and the atomic
array-union, array-remove and increment primitives.  Every mutation that
touches a field shared between concurrent callers (``songIds``,
``cachedSongIds``, ``scrapingAttempts``) goes through one of those
primitives so that no caller ever does a client-side read-modify-write.

Several operations may be grouped into a :class:`WriteBatch`, which a
store commits all-or-nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WriteKind(str, Enum):  # noqa: UP042
    """Kinds of single-document write."""

    UPSERT = "upsert"
    ARRAY_ADD = "array_add"
    ARRAY_REMOVE = "array_remove"
    INCREMENT = "increment"


@dataclass(frozen=True)
class WriteOp:
    """One queued write against a single document.

    Attributes
    ----------
    kind:
        Which primitive to apply.
    collection, doc_id:
        Target document address.
    fields:
        Top-level fields to merge (``UPSERT`` only).
    create_only:
        For ``UPSERT``: write only if the document does not exist yet.
    field_name:
        Target field for the array / increment primitives.
    values:
        Elements to union into or remove from ``field_name``.
    delta:
        Amount added to ``field_name`` by ``INCREMENT``.
    """

    kind: WriteKind
    collection: str
    doc_id: str
    fields: dict[str, Any] = field(default_factory=dict)
    create_only: bool = False
    field_name: str = ""
    values: tuple[Any, ...] = ()
    delta: int | float = 0


class WriteBatch:
    """An ordered group of writes committed atomically by :meth:`IDocumentStore.commit`.

    Methods return the batch itself so calls can be chained::

        batch = WriteBatch().upsert("songs", "1", {...}).array_add("artists", "a", "songIds", ["1"])
    """

    def __init__(self) -> None:
        self._ops: list[WriteOp] = []

    def upsert(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        create_only: bool = False,
    ) -> WriteBatch:
        self._ops.append(
            WriteOp(
                kind=WriteKind.UPSERT,
                collection=collection,
                doc_id=doc_id,
                fields=dict(fields),
                create_only=create_only,
            )
        )
        return self

    def array_add(self, collection: str, doc_id: str, field_name: str, values: list[Any]) -> WriteBatch:
        self._ops.append(
            WriteOp(
                kind=WriteKind.ARRAY_ADD,
                collection=collection,
                doc_id=doc_id,
                field_name=field_name,
                values=tuple(values),
            )
        )
        return self

    def array_remove(self, collection: str, doc_id: str, field_name: str, values: list[Any]) -> WriteBatch:
        self._ops.append(
            WriteOp(
                kind=WriteKind.ARRAY_REMOVE,
                collection=collection,
                doc_id=doc_id,
                field_name=field_name,
                values=tuple(values),
            )
        )
        return self

    def increment(self, collection: str, doc_id: str, field_name: str, delta: int | float = 1) -> WriteBatch:
        self._ops.append(
            WriteOp(
                kind=WriteKind.INCREMENT,
                collection=collection,
                doc_id=doc_id,
                field_name=field_name,
                delta=delta,
            )
        )
        return self

    @property
    def ops(self) -> list[WriteOp]:
        return list(self._ops)

    def __len__(self) -> int:
        return len(self._ops)


class IDocumentStore(ABC):
    """Contract for keyed document stores with atomic array and counter updates.

    ``ARRAY_ADD``, ``ARRAY_REMOVE`` and ``INCREMENT`` on a document that
    does not exist raise :class:`~src.utils.errors.StoreError`; ``UPSERT``
    creates it.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return a copy of the document's fields, or ``None`` if it does not exist."""

    @abstractmethod
    async def commit(self, batch: WriteBatch) -> None:
        """Apply every operation in *batch* atomically, in order.

        Raises
        ------
        src.utils.errors.StoreError
            If any operation cannot be applied; no operation of the batch
            is then persisted.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store, e.g. ``"sqlite_store"``."""

    async def initialize(self) -> None:
        """Prepare the backing storage (create tables, directories...)."""

    async def get_many(self, collection: str, doc_ids: list[str]) -> dict[str, dict[str, Any]]:
        """Return the existing documents among *doc_ids*, keyed by id."""
        found: dict[str, dict[str, Any]] = {}
        for doc_id in doc_ids:
            data = await self.get(collection, doc_id)
            if data is not None:
                found[doc_id] = data
        return found

    # -- Single-operation conveniences ------------------------------------

    async def upsert(
        self,
        collection: str,
        doc_id: str,
        fields: dict[str, Any],
        create_only: bool = False,
    ) -> None:
        await self.commit(WriteBatch().upsert(collection, doc_id, fields, create_only=create_only))

    async def array_add(self, collection: str, doc_id: str, field_name: str, values: list[Any]) -> None:
        await self.commit(WriteBatch().array_add(collection, doc_id, field_name, values))

    async def array_remove(self, collection: str, doc_id: str, field_name: str, values: list[Any]) -> None:
        await self.commit(WriteBatch().array_remove(collection, doc_id, field_name, values))

    async def increment(self, collection: str, doc_id: str, field_name: str, delta: int | float = 1) -> None:
        await self.commit(WriteBatch().increment(collection, doc_id, field_name, delta))
