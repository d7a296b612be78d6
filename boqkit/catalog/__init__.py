"""DPWH pay-item catalog lookup."""

from boqkit.catalog.catalog import Catalog, CatalogItem, normalize_item_number

__all__ = ["Catalog", "CatalogItem", "normalize_item_number"]
