"""Write-operation semantics shared by every document store backend.

Both the in-memory and the SQLite store apply a :class:`WriteOp` to the
current document with :func:`apply_write`, so array-union ordering,
missing-field defaults and create-only behaviour are identical regardless
of backend.
"""

from __future__ import annotations

import copy
from typing import Any

from src.interfaces.document_store import WriteKind, WriteOp
from src.utils.errors import StoreError


def apply_write(current: dict[str, Any] | None, op: WriteOp) -> dict[str, Any]:
    """Return the document that results from applying *op* to *current*.

    *current* is never mutated.

    Raises
    ------
    StoreError
        If an array or increment operation targets a missing document, or
        the target field has the wrong type.
    """
    if op.kind is WriteKind.UPSERT:
        if current is None:
            return copy.deepcopy(op.fields)
        if op.create_only:
            return copy.deepcopy(current)
        merged = copy.deepcopy(current)
        merged.update(copy.deepcopy(op.fields))
        return merged

    if current is None:
        raise StoreError(f"Document {op.collection}/{op.doc_id} does not exist")

    updated = copy.deepcopy(current)
    existing = updated.get(op.field_name)

    if op.kind is WriteKind.INCREMENT:
        if existing is None:
            existing = 0
        if not isinstance(existing, (int, float)) or isinstance(existing, bool):
            raise StoreError(f"Field {op.field_name!r} of {op.collection}/{op.doc_id} is not numeric")
        updated[op.field_name] = existing + op.delta
        return updated

    if existing is None:
        existing = []
    if not isinstance(existing, list):
        raise StoreError(f"Field {op.field_name!r} of {op.collection}/{op.doc_id} is not an array")

    if op.kind is WriteKind.ARRAY_ADD:
        # Union keeps existing order and appends unseen values in call order.
        result = list(existing)
        for value in op.values:
            if value not in result:
                result.append(value)
        updated[op.field_name] = result
        return updated

    if op.kind is WriteKind.ARRAY_REMOVE:
        updated[op.field_name] = [v for v in existing if v not in op.values]
        return updated

    raise StoreError(f"Unsupported write kind: {op.kind}")
