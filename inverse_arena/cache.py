"""
Query result cache with time-based staleness.

Keys are tuples whose first element names the query, e.g.
``("creator_status", "0xabc...")``. Writers invalidate by prefix.
"""

import itertools
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple


logger = logging.getLogger(__name__)


CacheKey = Tuple[Hashable, ...]


class QueryCache:
    """Owns ``key -> (value, fetched_at)``.

    A fetch that is still running when its key is invalidated does not store
    its result, so a read started before a write cannot put the pre-write
    value back.
    """

    def __init__(self, stale_seconds: float = 10.0, clock: Callable[[], float] = time.monotonic):
        self.stale_seconds = stale_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[Any, float]] = {}
        # key -> token of the newest fetch allowed to store
        self._pending: Dict[CacheKey, int] = {}
        self._tokens = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def peek(self, key: CacheKey) -> Optional[Any]:
        """Return a fresh cached value or None, without fetching."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, fetched_at = entry
        if self._clock() - fetched_at >= self.stale_seconds:
            return None
        return value

    def put(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    async def get_or_fetch(self, key: CacheKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value if still fresh, otherwise fetch and store it.

        Failures are not cached.
        """
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry[1] < self.stale_seconds:
            return entry[0]

        token = next(self._tokens)
        self._pending[key] = token
        try:
            value = await fetcher()
        except BaseException:
            if self._pending.get(key) == token:
                del self._pending[key]
            raise

        if self._pending.get(key) == token:
            del self._pending[key]
            self.put(key, value)
        else:
            logger.debug(f"Not caching {key}: invalidated or superseded while fetching")
        return value

    def invalidate(self, *prefix: Hashable) -> int:
        """Drop every entry whose key starts with ``prefix``; no prefix clears everything.

        Fetches in flight for matching keys will not store their results.
        """
        doomed = [key for key in self._entries if key[:len(prefix)] == prefix]
        for key in doomed:
            del self._entries[key]
        for key in [key for key in self._pending if key[:len(prefix)] == prefix]:
            del self._pending[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entries for {prefix}")
        return len(doomed)
