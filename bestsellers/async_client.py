"""Async HTTP client for parallel list file downloads."""
import asyncio
import httpx
from datetime import date
from typing import List, Optional, Dict, Tuple
from urllib.parse import quote
import logging
from bestsellers.dates import list_url

logger = logging.getLogger(__name__)


class AsyncBestsellerFileClient:
    """Async client for fetching several weeks or regions at once."""

    def __init__(
        self,
        base_url: str,
        proxies: Optional[List[str]] = None,
        timeout: int = 10,
        max_concurrent: int = 3
    ):
        """
        Initialize async client.

        Args:
            base_url: Directory URL the list files live under
            proxies: Proxy URL prefixes tried in order before going direct
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
        """
        self.base_url = base_url
        self.proxies = proxies or []
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout)

    async def _get(self, url: str) -> Optional[str]:
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Async request failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Status {response.status_code} for {url.split('?')[0]}")
            return None

        if "application/json" in response.headers.get("content-type", ""):
            try:
                contents = response.json().get("contents") or ""
            except ValueError as e:
                logger.warning(f"Invalid JSON from proxy: {e}")
                return None
        else:
            contents = response.text

        return contents if contents.strip() else None

    async def fetch_text(self, url: str) -> Optional[str]:
        """
        Fetch a list file asynchronously.

        Args:
            url: List file URL

        Returns:
            Response body or None if every route failed
        """
        routes = [proxy + quote(url, safe="") for proxy in self.proxies] + [url]

        # Use semaphore to limit concurrency
        async with self.semaphore:
            for route in routes:
                logger.info(f"Async request: {route.split('?')[0]}")
                contents = await self._get(route)
                if contents is not None:
                    return contents

        logger.error(f"All routes failed for {url}")
        return None

    async def fetch_pair(
        self,
        current_url: str,
        previous_url: str
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Fetch the current and comparison week in parallel.

        Args:
            current_url: This week's file
            previous_url: Comparison week's file

        Returns:
            (current_text, previous_text), either may be None
        """
        current, previous = await asyncio.gather(
            self.fetch_text(current_url),
            self.fetch_text(previous_url)
        )
        return current, previous

    async def fetch_weeks(
        self,
        weeks: List[date],
        region: str
    ) -> Dict[date, str]:
        """
        Fetch several weeks of one region in parallel.

        Args:
            weeks: Wednesdays to fetch
            region: Region abbreviation

        Returns:
            Mapping of week to file text, for weeks that could be fetched
        """
        tasks = [
            self.fetch_text(list_url(week, region, self.base_url))
            for week in weeks
        ]

        results = await asyncio.gather(*tasks)
        return {
            week: text
            for week, text in zip(weeks, results)
            if text is not None
        }

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
