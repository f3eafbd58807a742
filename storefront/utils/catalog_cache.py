# storefront/utils/catalog_cache.py
import threading
from typing import List, Optional

# Fixed key the last good product listing is stored under
CACHE_KEY = "cachedProducts"


class CatalogCache:
    """Last successfully fetched product listing.

    Serves as a fallback seed when the live catalog query fails.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._store = {}

    def get(self) -> Optional[List[dict]]:
        with self._lock:
            cached = self._store.get(CACHE_KEY)
            return list(cached) if cached is not None else None

    def put(self, products: List[dict]):
        with self._lock:
            self._store[CACHE_KEY] = list(products)

    def clear(self):
        with self._lock:
            self._store.pop(CACHE_KEY, None)


catalog_cache = CatalogCache()
