"""cache.py

Explicit read cache in front of the row store.

Reads are keyed by ``(collection, predicate, options)``. Nothing expires
on its own: callers invalidate what a mutation made stale, e.g. after a
purchase the item, the viewer's balance and the listing are dropped.
The cache object lives in the Streamlit session and is handed to the
services explicitly.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from .api import Predicate, StoreClient

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple, tuple]


def _normalise(eq: Predicate | None) -> tuple:
    # Values are compared as text – the store does the same in ``eq.<value>``
    return tuple(sorted((col, str(value)) for col, value in (eq or {}).items()))


class QueryCache:
    """Dict-backed cache of query results."""

    def __init__(self):
        self._entries: dict[CacheKey, Any] = {}

    @staticmethod
    def key(collection: str, eq: Predicate | None = None, **options: Hashable) -> CacheKey:
        return collection, _normalise(eq), tuple(sorted(options.items()))

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_fetch(self, key: CacheKey, fetch: Callable[[], Any], *, fresh: bool = False):
        """Return the cached value for *key*, calling *fetch* on a miss."""
        if not fresh and key in self._entries:
            return self._entries[key]
        value = fetch()
        self._entries[key] = value
        return value

    def invalidate(self, collection: str, eq: Predicate | None = None) -> int:
        """Drop cached reads on *collection*.

        ``eq=None`` drops every read of the collection; a mapping drops only
        reads made with exactly that predicate (``{}`` → the unfiltered
        listing). Returns the number of dropped entries.
        """
        predicate = None if eq is None else _normalise(eq)
        stale = [
            k for k in self._entries
            if k[0] == collection and (predicate is None or k[1] == predicate)
        ]
        for k in stale:
            del self._entries[k]
        logger.debug("invalidated %d cached read(s) on %s %s", len(stale), collection, predicate)
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()


class CachedStore:
    """``StoreClient`` look-alike whose reads go through a ``QueryCache``.

    Writes pass straight through and never touch the cache – the caller
    decides what to invalidate or re-fetch.
    """

    def __init__(self, client: StoreClient, cache: QueryCache | None = None):
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    def select(
        self,
        collection: str,
        *,
        eq: Predicate | None = None,
        columns: str = "*",
        order: str | None = None,
        descending: bool = True,
        limit: int | None = None,
        fresh: bool = False,
    ) -> list[dict]:
        key = QueryCache.key(
            collection, eq, columns=columns, order=order, descending=descending, limit=limit
        )
        return self.cache.get_or_fetch(
            key,
            lambda: self.client.select(
                collection, eq=eq, columns=columns, order=order, descending=descending, limit=limit
            ),
            fresh=fresh,
        )

    def select_one(
        self,
        collection: str,
        *,
        eq: Predicate,
        columns: str = "*",
        fresh: bool = False,
    ) -> dict | None:
        key = QueryCache.key(collection, eq, columns=columns, single=True)
        return self.cache.get_or_fetch(
            key,
            lambda: self.client.select_one(collection, eq=eq, columns=columns),
            fresh=fresh,
        )

    def insert(self, collection: str, rows: list[dict]) -> None:
        self.client.insert(collection, rows)

    def update(self, collection: str, values: dict, *, eq: Predicate) -> None:
        self.client.update(collection, values, eq=eq)

    def invalidate(self, collection: str, eq: Predicate | None = None) -> int:
        return self.cache.invalidate(collection, eq)
