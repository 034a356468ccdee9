"""Batched weeks-on-list lookup with an in-memory cache."""
import asyncio
import time
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

WeeksSource = Callable[[List[str]], Dict[str, int]]


class WeeksOnListLookup:
    """
    Async ISBN -> weeks-on-list lookup for compare_lists.

    Wraps a synchronous batch source (usually Database.get_weeks_on_list
    bound to a region) and only asks it about ISBNs missing from the
    cache. ISBNs the source does not know are cached as 0.
    """

    def __init__(
        self,
        source: WeeksSource,
        ttl_seconds: int = 1800,
        clock: Callable[[], float] = time.monotonic
    ):
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._cache: Dict[str, int] = {}
        self._expires_at = 0.0

    def clear(self):
        self._cache.clear()
        self._expires_at = 0.0

    async def __call__(self, isbns: List[str]) -> Dict[str, int]:
        unique = list(dict.fromkeys(isbn for isbn in isbns if isbn))
        if not unique:
            return {}

        if self.clock() >= self._expires_at:
            self._cache.clear()

        uncached = [isbn for isbn in unique if isbn not in self._cache]
        if uncached:
            logger.debug(f"Looking up weeks-on-list for {len(uncached)} ISBNs")
            fetched = await asyncio.to_thread(self.source, uncached)
            for isbn in uncached:
                self._cache[isbn] = fetched.get(isbn, 0)

        self._expires_at = self.clock() + self.ttl_seconds
        return {isbn: self._cache[isbn] for isbn in unique}
