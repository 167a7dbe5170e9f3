"""Document store providers.

MemoryDocumentStore keeps everything in a dict -- fast, single-process, used
by the test suite.  SQLiteDocumentStore persists documents to a local file
and makes every write batch atomic across processes.
"""

from src.providers.store.memory_store import MemoryDocumentStore
from src.providers.store.sqlite_store import SQLiteDocumentStore

__all__ = ["MemoryDocumentStore", "SQLiteDocumentStore"]
