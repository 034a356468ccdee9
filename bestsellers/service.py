"""Fetch, parse, store and compare weekly lists for a region."""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple
from bestsellers.async_client import AsyncBestsellerFileClient
from bestsellers.client import is_valid_bestseller_content
from bestsellers.compare import compare_lists
from bestsellers.config import Config
from bestsellers.dates import (
    list_urls,
    most_recent_wednesday,
    previous_wednesday,
    normalize_to_wednesday,
    week_range,
)
from bestsellers.errors import DataUnavailableError, FetchError
from bestsellers.models import BestsellerList
from bestsellers.parse import parse_list
from bestsellers.regions import file_code_for
from bestsellers.weeks import WeeksOnListLookup

logger = logging.getLogger(__name__)


def comparison_cache_key(region: str, comparison_week: Optional[str] = None) -> str:
    """Cache key for a region's current list or a custom comparison."""
    if comparison_week:
        return f"{region}_bestseller_list_vs_{comparison_week}_v2"
    return f"{region}_current_bestseller_list_v2"


class BestsellerService:
    """Ties the file client, parser, comparator and database together."""

    def __init__(self, config: Config, client: AsyncBestsellerFileClient, db=None):
        """
        Args:
            config: Application configuration
            client: Async client for list files
            db: Database instance (optional; no caching or weeks-on-list without it)
        """
        self.config = config
        self.client = client
        self.db = db
        self._lookups: Dict[str, WeeksOnListLookup] = {}

    def weeks_lookup(self, region: str) -> Optional[WeeksOnListLookup]:
        """Cached weeks-on-list lookup for one region."""
        if self.db is None:
            return None
        if region not in self._lookups:
            self._lookups[region] = WeeksOnListLookup(
                lambda isbns: self.db.get_weeks_on_list(isbns, region),
                ttl_seconds=self.config.WEEKS_CACHE_TTL
            )
        return self._lookups[region]

    def _cached(self, cache_key: str) -> Optional[Tuple[BestsellerList, BestsellerList]]:
        if self.db is None:
            return None
        cached = self.db.cache_get(cache_key)
        if not cached:
            return None
        return BestsellerList.from_dict(cached["current"]), BestsellerList.from_dict(cached["previous"])

    def _stored_pair(
        self,
        current_week: date,
        previous_week: date,
        region: str
    ) -> Optional[Tuple[BestsellerList, BestsellerList]]:
        """Both weeks rebuilt from stored positions, if both were saved."""
        if self.db is None:
            return None
        current_list = self.db.get_week_list(region, current_week)
        previous_list = self.db.get_week_list(region, previous_week)
        if current_list is None or previous_list is None:
            return None
        return current_list, previous_list

    async def fetch_bestseller_data(
        self,
        refresh: bool = False,
        comparison_week: Optional[str] = None,
        region: Optional[str] = None,
        today: Optional[date] = None
    ) -> Tuple[BestsellerList, BestsellerList]:
        """
        Get this week's compared list and the list it was compared with.

        Args:
            refresh: Skip the cache and fetch fresh files
            comparison_week: YYYY-MM-DD inside the week to compare against
                (defaults to the week before the current one)
            region: Region abbreviation (defaults to the configured region)
            today: Reference date for "this week"

        Returns:
            (compared current list, previous list)

        Raises:
            DataUnavailableError: If fetching failed and neither a cached
                comparison nor both stored weeks are available
        """
        region = region or self.config.DEFAULT_REGION
        file_code_for(region)  # unknown regions raise before touching the cache
        cache_key = comparison_cache_key(region, comparison_week)

        if not refresh:
            cached = self._cached(cache_key)
            if cached:
                logger.info(f"Using cached data for {cache_key}")
                return cached

        current_week = most_recent_wednesday(today)
        if comparison_week:
            previous_week = normalize_to_wednesday(comparison_week)
        else:
            previous_week = previous_wednesday(today)

        try:
            current_list, previous_list = await self._fetch_pair(current_week, previous_week, region)
        except FetchError as e:
            logger.error(f"Error fetching bestseller data: {e}")
            cached = self._cached(cache_key)
            if cached:
                logger.info("Returning cached data as fallback")
                return cached
            stored = self._stored_pair(current_week, previous_week, region)
            if stored:
                logger.info("Comparing stored weeks as fallback")
                current_list, previous_list = stored
                compared = await compare_lists(current_list, previous_list, self.weeks_lookup(region))
                return compared, previous_list
            raise DataUnavailableError(
                f"No data available for {region}; run a fetch once the list is published"
            ) from e

        if self.db is not None:
            self.db.save_list(current_list, current_week, region)
            if comparison_week:
                self.db.save_list(previous_list, previous_week, region)

        compared = await compare_lists(current_list, previous_list, self.weeks_lookup(region))

        if self.db is not None:
            self.db.cache_set(
                cache_key,
                {"current": compared.to_dict(), "previous": previous_list.to_dict()},
                self.config.DEFAULT_CACHE_TTL
            )

        return compared, previous_list

    async def _fetch_pair(
        self,
        current_week: date,
        previous_week: date,
        region: str
    ) -> Tuple[BestsellerList, BestsellerList]:
        current_url, previous_url = list_urls(
            current_week, previous_week, region, self.config.BESTSELLER_BASE_URL
        )
        logger.info(f"Fetching {current_url} and {previous_url}")

        current_text, previous_text = await self.client.fetch_pair(current_url, previous_url)

        if not is_valid_bestseller_content(previous_text):
            raise FetchError(previous_url, "previous week invalid")
        if not is_valid_bestseller_content(current_text):
            # Not published yet, or the upstream served an error page
            raise FetchError(current_url, "current week unavailable")

        return parse_list(current_text), parse_list(previous_text)

    async def backfill(
        self,
        region: Optional[str] = None,
        weeks: int = 8,
        today: Optional[date] = None
    ) -> List[date]:
        """
        Fetch and store earlier weeks so weeks-on-list has history.

        Args:
            region: Region abbreviation
            weeks: How many weeks before the current one to fetch
            today: Reference date for "this week"

        Returns:
            Weeks that were stored
        """
        region = region or self.config.DEFAULT_REGION
        start = previous_wednesday(today)
        texts = await self.client.fetch_weeks(week_range(start, weeks), region)

        stored = []
        for week, text in sorted(texts.items()):
            if not is_valid_bestseller_content(text):
                logger.warning(f"Skipping {region} {week}: not a list file")
                continue
            if self.db is None or self.db.save_list(parse_list(text), week, region):
                stored.append(week)

        logger.info(f"Backfilled {len(stored)} of {weeks} weeks for {region}")
        return stored
