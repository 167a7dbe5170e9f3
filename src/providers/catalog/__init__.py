"""Song-catalog providers."""

from src.providers.catalog.genius_catalog_provider import GeniusCatalogProvider

__all__ = ["GeniusCatalogProvider"]
