"""Tests for the cached weeks-on-list lookup."""
import asyncio
from bestsellers.weeks import WeeksOnListLookup


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_lookup_fills_misses_with_zero():
    """Test ISBNs unknown to the source come back as 0."""
    lookup = WeeksOnListLookup(lambda isbns: {"9780000000001": 3})

    result = asyncio.run(lookup(["9780000000001", "9780000000002", ""]))
    assert result == {"9780000000001": 3, "9780000000002": 0}


def test_lookup_only_queries_uncached():
    """Test that cached ISBNs are not requested again."""
    calls = []

    def source(isbns):
        calls.append(list(isbns))
        return {isbn: 1 for isbn in isbns}

    lookup = WeeksOnListLookup(source, clock=FakeClock())
    asyncio.run(lookup(["9780000000001"]))
    asyncio.run(lookup(["9780000000001", "9780000000002", "9780000000002"]))

    assert calls == [["9780000000001"], ["9780000000002"]]


def test_lookup_cache_expires():
    """Test the whole cache is refreshed once the TTL passes."""
    calls = []

    def source(isbns):
        calls.append(list(isbns))
        return {}

    clock = FakeClock()
    lookup = WeeksOnListLookup(source, ttl_seconds=60, clock=clock)
    asyncio.run(lookup(["9780000000001"]))
    clock.now = 61
    asyncio.run(lookup(["9780000000001"]))

    assert calls == [["9780000000001"], ["9780000000001"]]


def test_lookup_empty_request():
    """Test that no ISBNs means no source call."""
    def source(isbns):
        raise AssertionError("source should not be called")

    assert asyncio.run(WeeksOnListLookup(source)([])) == {}
