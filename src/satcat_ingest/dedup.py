from __future__ import annotations

import threading
from typing import Hashable

from .store import SatelliteStore


class DedupOracle:
    """Answers "is this already persisted?" and hands out fetch claims.

    The ``*_exists`` predicates are lock-free point-in-time checks against
    the store. The ``claim_*`` methods are atomic: a key is granted to at
    most one caller per run, and never when the store already has it.
    """

    def __init__(self, store: SatelliteStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._claimed: set[Hashable] = set()

    def category_exists(self, category_id: int) -> bool:
        return self._store.category_exists(category_id)

    def satellite_description_exists(self, norad_id: int) -> bool:
        return self._store.satellite_description_exists(norad_id)

    def image_exists(self, norad_id: int, basename: str) -> bool:
        return self._store.image_exists(norad_id, basename)

    def claim_category(self, category_id: int) -> bool:
        key = ("category", category_id)
        with self._lock:
            if key in self._claimed:
                return False
            if self._store.category_exists(category_id):
                return False
            self._claimed.add(key)
            return True

    def claim_image(self, norad_id: int, basename: str) -> bool:
        key = ("image", norad_id, basename)
        with self._lock:
            if key in self._claimed:
                return False
            if self._store.image_exists(norad_id, basename):
                return False
            self._claimed.add(key)
            return True

    @property
    def claimed_count(self) -> int:
        with self._lock:
            return len(self._claimed)
