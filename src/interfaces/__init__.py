"""Public interface definitions for the engine's external collaborators.

The services never talk HTTP or SQL directly; they depend on the abstract
base classes below, and concrete adapters are injected in ``src/main.py``.
Unit tests inject mocks or the in-memory store instead.

    Interface          ->  Concrete implementations (in src/providers/)
    ---------------------------------------------------------------------
    ICatalogProvider   ->  GeniusCatalogProvider
    ILyricsProvider    ->  GeniusLyricsProvider
    IDocumentStore     ->  MemoryDocumentStore, SQLiteDocumentStore
"""

from src.interfaces.catalog_provider import (
    ArtistCredit,
    CatalogPage,
    CatalogSong,
    ICatalogProvider,
)
from src.interfaces.document_store import IDocumentStore, WriteBatch, WriteKind, WriteOp
from src.interfaces.lyrics_provider import ILyricsProvider

__all__ = [
    "ArtistCredit",
    "CatalogPage",
    "CatalogSong",
    "ICatalogProvider",
    "IDocumentStore",
    "ILyricsProvider",
    "WriteBatch",
    "WriteKind",
    "WriteOp",
]
