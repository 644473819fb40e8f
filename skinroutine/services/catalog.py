"""
Catalog providers, the only place that holds a product snapshot.

The engine asks for get_current_catalog() once per request and treats the
result as read-only. Refresh and staleness live here, never in the engine.
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional, Protocol, Sequence

from pydantic import TypeAdapter

from skinroutine.schemas import Product

logger = logging.getLogger(__name__)

_PRODUCTS = TypeAdapter(list[Product])


class CatalogProvider(Protocol):
    def get_current_catalog(self) -> Sequence[Product]:
        ...


class StaticCatalogProvider:
    """Fixed in-memory snapshot."""

    def __init__(self, products: Sequence[Product] = ()):
        self._products = tuple(products)

    def get_current_catalog(self) -> Sequence[Product]:
        return self._products


class JsonFileCatalogProvider:
    """Products loaded from a JSON array, reloaded once the TTL expires.

    A failed reload keeps the previous snapshot (empty if nothing ever
    loaded) so requests degrade to a stale or empty catalog instead of
    failing.
    """

    def __init__(self, path: str | Path, ttl_seconds: int = 30 * 60, clock=time.monotonic):
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._products: tuple[Product, ...] = ()
        self._loaded_at: Optional[float] = None
        self.refresh_failures = 0

    def _is_expired(self) -> bool:
        return self._loaded_at is None or self._clock() - self._loaded_at > self.ttl_seconds

    def refresh(self) -> None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            products = _PRODUCTS.validate_python(raw)
        except (OSError, ValueError) as e:
            self.refresh_failures += 1
            logger.error(f"Catalog refresh from {self.path} failed: {e}", exc_info=True)
            # Back off for a full TTL before retrying
            self._loaded_at = self._clock()
            return

        self._products = tuple(products)
        self._loaded_at = self._clock()
        self.refresh_failures = 0
        logger.info(f"Catalog refreshed | Products: {len(self._products)} | Source: {self.path}")

    def get_current_catalog(self) -> Sequence[Product]:
        if self._is_expired():
            self.refresh()
        return self._products

    def stats(self) -> dict:
        age = None if self._loaded_at is None else round(self._clock() - self._loaded_at, 1)
        return {
            "products": len(self._products),
            "age_seconds": age,
            "refresh_failures": self.refresh_failures,
            "is_expired": self._is_expired(),
        }
