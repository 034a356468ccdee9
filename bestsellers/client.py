"""HTTP client for weekly list files with proxy fallback and retries."""
import time
import random
import requests
from urllib.parse import quote
from datetime import date
from typing import Optional, List, Dict, Any
import logging
from bestsellers.dates import list_url
from bestsellers.errors import FetchError
from bestsellers.models import BestsellerList
from bestsellers.parse import parse_list

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 500
ERROR_PAGE_MARKERS = ("404 not found", "page not found", "<!doctype html")


def is_valid_bestseller_content(contents: Optional[str]) -> bool:
    """
    Check that fetched text looks like a real list file.

    Args:
        contents: Response body

    Returns:
        False for empty, too-short, or HTML error pages
    """
    if not contents:
        return False

    trimmed = contents.strip()
    if len(trimmed) < MIN_CONTENT_LENGTH:
        return False

    normalized = trimmed.lower()
    return not any(marker in normalized for marker in ERROR_PAGE_MARKERS)


def extract_contents(response) -> str:
    """Read the body of a direct or proxied response."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        # JSON proxies wrap the file as {"contents": "..."}
        return response.json().get("contents") or ""
    return response.text


class BestsellerFileClient:
    """Client for list files with timeouts, retries, backoff and proxies."""

    def __init__(
        self,
        base_url: str,
        proxies: Optional[List[str]] = None,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize list file client.

        Args:
            base_url: Directory URL the list files live under
            proxies: Proxy URL prefixes tried in order before a direct request
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per route
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url
        self.proxies = proxies or []
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()

    def routes(self, url: str) -> List[str]:
        """Proxied URLs in order, then the direct URL."""
        return [proxy + quote(url, safe="") for proxy in self.proxies] + [url]

    def fetch_text(self, url: str) -> str:
        """
        Fetch a list file, trying each proxy before going direct.

        Args:
            url: List file URL

        Returns:
            Response body

        Raises:
            FetchError: If every route failed
        """
        last_reason = "no routes"
        for route in self.routes(url):
            contents = self._make_request_with_retry(route)
            if contents:
                return contents
            last_reason = f"route failed: {route.split('?')[0]}"
            logger.warning(f"Route {route.split('?')[0]} failed for {url}")

        raise FetchError(url, last_reason)

    def _make_request_with_retry(self, url: str) -> Optional[str]:
        """
        Make HTTP request with retry logic.

        Args:
            url: Request URL

        Returns:
            Non-empty response body or None if all retries exhausted
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(url, timeout=self.timeout)

                if response.status_code == 200:
                    contents = extract_contents(response)
                    if contents.strip():
                        return contents
                    logger.warning("Empty response body")
                    return None

                elif response.status_code == 429:
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 400:
                    # Missing files are normal for unpublished weeks
                    logger.error(f"Client error ({response.status_code}) for {url}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except (requests.exceptions.RequestException, ValueError) as e:
                logger.error(f"Unexpected error: {e}")
                return None

        logger.error(f"All {self.max_retries} attempts failed")
        return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def fetch_list(self, week: date, region: str) -> Optional[BestsellerList]:
        """
        Fetch and parse one region's list for a week.

        Args:
            week: Wednesday the file is named after
            region: Region abbreviation

        Returns:
            Parsed list, or None if the file is missing or not a list
        """
        url = list_url(week, region, self.base_url)
        try:
            contents = self.fetch_text(url)
        except FetchError as e:
            logger.error(str(e))
            return None

        if not is_valid_bestseller_content(contents):
            logger.warning(f"Content validation failed for {url} ({len(contents)} chars)")
            return None

        return parse_list(contents)

    def fetch_with_cache(
        self,
        week: date,
        region: str,
        cache_db=None,
        cache_ttl: int = 604800
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch a parsed list with database-backed caching.

        Args:
            week: Wednesday the file is named after
            region: Region abbreviation
            cache_db: Database instance (optional)
            cache_ttl: Cache TTL in seconds

        Returns:
            Serialized list or None
        """
        cache_key = f"{region}_week_data_{week.isoformat()}"

        if cache_db:
            cached = cache_db.cache_get(cache_key)
            if cached:
                return cached

        bestseller_list = self.fetch_list(week, region)
        if bestseller_list is None:
            return None

        data = bestseller_list.to_dict()
        if cache_db:
            cache_db.cache_set(cache_key, data, cache_ttl)

        return data

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
