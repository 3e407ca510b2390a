"""Query cache - keyed stale-while-revalidate cache for API reads.

Entries are keyed by a tuple of strings (a single string is promoted to a
one-element tuple). Each entry carries a generation counter that every
explicit write bumps. A fetch records the generation it started under and
its result is discarded if the generation moved while it was in flight, so
an eager write (e.g. the logged-out identity) is never reverted by a slower
network response. Invalidations are counted the same way: a fetch that
was in flight when its key was invalidated stores its result as already
stale.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from cachetools import LRUCache

logger = logging.getLogger(__name__)

QueryKey = tuple[str, ...]
KeyLike = Union[str, QueryKey, list]

DEFAULT_CACHE_MAXSIZE = 512


def normalize_key(key: KeyLike) -> QueryKey:
    """Promote a string key to a one-element tuple."""
    if isinstance(key, str):
        return (key,)
    return tuple(str(part) for part in key)


def key_to_url(key: KeyLike) -> str:
    """Join key segments with '/', the way query keys map onto API paths."""
    return "/".join(normalize_key(key))


@dataclass
class QueryEntry:
    """Cached state for one key."""
    data: Any = None
    updated_at: Optional[float] = None
    stale_time: float = math.inf
    invalidated: bool = False
    invalidations: int = 0
    generation: int = 0
    in_flight: Optional[asyncio.Future] = None


class QueryCache:
    """
    Explicitly constructed query cache, passed by reference to consumers.

    Policy:
    - reads within the staleness window are served from cache
    - concurrent reads of one key share a single in-flight fetch
    - failures are not cached; ``retry`` extra attempts are
      made before giving up (default 0)
    - window focus does not trigger refetches unless enabled
    """

    def __init__(
            self,
            maxsize: int = DEFAULT_CACHE_MAXSIZE,
            default_stale_time: float = math.inf,
            retry: int = 0,
            refetch_on_window_focus: bool = False,
            clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: LRUCache = LRUCache(maxsize=maxsize)
        self.default_stale_time = default_stale_time
        self.retry = retry
        self.refetch_on_window_focus = refetch_on_window_focus
        self._clock = clock

    def _entry(self, key: QueryKey) -> QueryEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = QueryEntry(stale_time=self.default_stale_time)
            self._entries[key] = entry
        return entry

    def _is_stale(self, entry: QueryEntry) -> bool:
        if entry.invalidated or entry.updated_at is None:
            return True
        return self._clock() - entry.updated_at > entry.stale_time

    def get_entry(self, key: KeyLike) -> Optional[QueryEntry]:
        return self._entries.get(normalize_key(key))

    def get_query_data(self, key: KeyLike) -> Any:
        """Return cached data for ``key`` (possibly stale), or None."""
        entry = self._entries.get(normalize_key(key))
        return entry.data if entry is not None else None

    def is_fetching(self, key: KeyLike) -> bool:
        entry = self._entries.get(normalize_key(key))
        return entry is not None and entry.in_flight is not None

    def is_stale(self, key: KeyLike) -> bool:
        entry = self._entries.get(normalize_key(key))
        return entry is None or self._is_stale(entry)

    def set_query_data(self, key: KeyLike, data: Any) -> None:
        """
        Overwrite the cached value for ``key``.

        Bumps the entry generation, so any fetch already in flight for the
        key will be discarded when it completes.
        """
        k = normalize_key(key)
        entry = self._entry(k)
        entry.generation += 1
        entry.data = data
        entry.updated_at = self._clock()
        entry.invalidated = False
        logger.debug("Cache set: key=%s, generation=%s", k, entry.generation)

    async def fetch_query(
            self,
            key: KeyLike,
            fetcher: Callable[[], Awaitable[Any]],
            stale_time: Optional[float] = None,
    ) -> Any:
        """
        Read ``key``, fetching through ``fetcher`` when missing or stale.

        Args:
            key: Query key
            fetcher: Zero-argument coroutine function producing the value
            stale_time: Staleness window in seconds for this key
                (default: the cache's default_stale_time)

        Returns:
            The cached or freshly fetched value

        Raises:
            Whatever ``fetcher`` raised, after ``retry`` extra attempts
        """
        k = normalize_key(key)
        entry = self._entry(k)
        if stale_time is not None:
            entry.stale_time = stale_time

        if not self._is_stale(entry):
            logger.debug("Cache hit: key=%s", k)
            return entry.data
        if entry.in_flight is not None:
            joined = entry.in_flight
            logger.debug("Joining in-flight fetch: key=%s", k)
            try:
                return await asyncio.shield(joined)
            except asyncio.CancelledError:
                if not joined.cancelled():
                    raise
                # the leading reader was cancelled, not us
                logger.debug("In-flight fetch was cancelled, fetching again: key=%s", k)
                return await self.fetch_query(k, fetcher, stale_time)

        generation = entry.generation
        invalidations = entry.invalidations
        future = asyncio.get_running_loop().create_future()
        entry.in_flight = future
        try:
            data = await self._run_fetcher(k, fetcher)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # mark retrieved; joined readers still receive it
            future.exception()
            raise
        finally:
            if entry.in_flight is future:
                entry.in_flight = None

        if entry.generation != generation:
            logger.debug(
                "Discarding stale fetch result: key=%s, started=%s, current=%s",
                k, generation, entry.generation,
            )
            data = entry.data
        else:
            entry.data = data
            entry.updated_at = self._clock()
            # an invalidation that landed mid-fetch still applies
            entry.invalidated = entry.invalidations != invalidations
        future.set_result(data)
        return data

    async def _run_fetcher(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        attempt = 0
        while True:
            try:
                return await fetcher()
            except Exception as e:
                if attempt >= self.retry:
                    raise
                attempt += 1
                logger.debug("Retrying fetch: key=%s, attempt=%s, error=%s", key, attempt, e)

    def invalidate_queries(self, prefix: KeyLike) -> int:
        """
        Mark every entry whose key starts with ``prefix`` as stale.

        A fetch in flight for a matching key still stores its result, but
        the entry stays stale and the next read fetches again.

        Returns:
            Number of entries invalidated
        """
        p = normalize_key(prefix)
        count = 0
        for k, entry in list(self._entries.items()):
            if k[:len(p)] == p:
                entry.invalidated = True
                entry.invalidations += 1
                count += 1
        if count:
            logger.debug("Cache invalidate: prefix=%s, count=%s", p, count)
        return count

    def remove_queries(self, prefix: KeyLike) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        p = normalize_key(prefix)
        keys = [k for k in self._entries.keys() if k[:len(p)] == p]
        for k in keys:
            del self._entries[k]
        return len(keys)

    def on_window_focus(self) -> int:
        """
        Notify the cache that the client regained focus.

        Returns:
            Number of entries invalidated (always 0 unless
            refetch_on_window_focus is enabled)
        """
        if not self.refetch_on_window_focus:
            return 0
        return self.invalidate_queries(())

    def clear(self) -> None:
        self._entries.clear()
