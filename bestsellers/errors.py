"""Exceptions raised by the fetch and orchestration layers."""
from typing import Optional


class FetchError(Exception):
    """Every route to a list file failed."""

    def __init__(self, url: str, reason: str, cause: Optional[Exception] = None):
        self.url = url
        self.reason = reason
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {reason}")


class UnknownRegionError(ValueError):
    """Region abbreviation is not configured."""

    def __init__(self, region: str):
        self.region = region
        super().__init__(f"Unknown region: {region}")


class DataUnavailableError(Exception):
    """Neither a fresh fetch nor the cache produced a comparison."""
