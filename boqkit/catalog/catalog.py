"""Catalog: read-only DPWH pay-item lookup.

Usage::

    from boqkit.catalog import Catalog

    catalog = Catalog.default()
    catalog.find_by_item_number("900 (1) a")
    catalog.search("grade", trade="Rebar", limit=10)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel

from boqkit import config
from boqkit.catalog.seed_data import SEED_CATALOG
from boqkit.errors import InvalidRequestError

logger = logging.getLogger(__name__)

_CAMEL_KEYS = {"itemNumber": "item_number"}


class CatalogItem(BaseModel):
    item_number: str
    description: str
    unit: str
    trade: str
    category: str = ""


def normalize_item_number(code: str) -> str:
    """Collapse internal whitespace: ``"900  (1) a "`` -> ``"900 (1) a"``."""
    return " ".join(code.split())


class Catalog:
    """In-memory pay-item catalog keyed by item number."""

    def __init__(self, items: Iterable[CatalogItem]) -> None:
        self._items: list[CatalogItem] = []
        self._by_number: dict[str, CatalogItem] = {}
        for item in items:
            key = normalize_item_number(item.item_number)
            if key in self._by_number:
                logger.warning("Duplicate catalog item %s ignored", key)
                continue
            self._by_number[key] = item
            self._items.append(item)

    @classmethod
    def default(cls) -> Catalog:
        """Catalog built from the embedded seed data."""
        return cls(CatalogItem(**row) for row in SEED_CATALOG)

    @classmethod
    def from_json(cls, path: str | Path) -> Catalog:
        """Load a JSON list of items (``item_number`` or ``itemNumber`` keys)."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("items", [])
        items = [
            CatalogItem(**{_CAMEL_KEYS.get(k, k): v for k, v in row.items()})
            for row in raw
            if isinstance(row, dict)
        ]
        logger.info("Loaded %d catalog items from %s", len(items), path)
        return cls(items)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_by_item_number(self, code: str) -> CatalogItem | None:
        return self._by_number.get(normalize_item_number(code))

    def filter_by_trade(self, trade: str) -> list[CatalogItem]:
        return [item for item in self._items if item.trade == trade]

    def trades(self) -> list[str]:
        return sorted({item.trade for item in self._items})

    def search(
        self,
        query: str = "",
        trade: str | None = None,
        category: str | None = None,
        limit: int = config.CATALOG_SEARCH_LIMIT,
    ) -> list[CatalogItem]:
        """Case-insensitive match on item number or description.

        Raises InvalidRequestError for a trade the catalog does not know
        or a non-positive limit; limits above the maximum are clamped.
        """
        if trade is not None and trade not in self.trades():
            raise InvalidRequestError(f"Invalid trade: {trade}")
        if limit <= 0:
            raise InvalidRequestError("limit must be positive")
        limit = min(limit, config.CATALOG_SEARCH_MAX)
        needle = query.strip().lower()

        results: list[CatalogItem] = []
        for item in self._items:
            if trade is not None and item.trade != trade:
                continue
            if category is not None and item.category.lower() != category.lower():
                continue
            if needle and needle not in item.item_number.lower() and needle not in item.description.lower():
                continue
            results.append(item)
            if len(results) >= limit:
                break
        return results

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, code: Any) -> bool:
        return isinstance(code, str) and self.find_by_item_number(code) is not None
