"""Week arithmetic and list file URLs.

List files are published on Wednesdays and named
``<YYMMDD><file code>.txt`` after that Wednesday.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple
from bestsellers.regions import Region, file_code_for, get_region_by_file_code

WEDNESDAY = 2  # date.weekday(): Monday=0
FILENAME_PATTERN = re.compile(r"(\d{6})([a-z]{2})\.txt$")


def most_recent_wednesday(today: Optional[date] = None) -> date:
    """Most recent Wednesday on or before today."""
    today = today or date.today()
    return today - timedelta(days=(today.weekday() - WEDNESDAY) % 7)


def previous_wednesday(today: Optional[date] = None) -> date:
    """The Wednesday one week before the most recent one."""
    return most_recent_wednesday(today) - timedelta(days=7)


def normalize_to_wednesday(iso_date: str) -> date:
    """
    Map any date to the Wednesday whose list covers it.

    Sunday through Wednesday map forward to that week's Wednesday;
    Thursday through Saturday map to the following Wednesday.

    Args:
        iso_date: Date string in YYYY-MM-DD form

    Returns:
        The list's Wednesday
    """
    base = date.fromisoformat(iso_date)
    # Sunday-based day number: 0=Sun ... 6=Sat
    day = (base.weekday() + 1) % 7
    days_to_add = 3 - day if day <= 3 else 10 - day
    return base + timedelta(days=days_to_add)


def format_yymmdd(day: date) -> str:
    return day.strftime("%y%m%d")


def week_range(start: date, weeks: int) -> List[date]:
    """Dates going back one week at a time, most recent first."""
    return [start - timedelta(days=7 * i) for i in range(weeks)]


def list_url(week: date, region: str, base_url: str) -> str:
    """Build the list file URL for one region and week."""
    return f"{base_url}{format_yymmdd(week)}{file_code_for(region)}.txt"


def list_urls(
    current: date,
    previous: date,
    region: str,
    base_url: str
) -> Tuple[str, str]:
    """URLs for the current and comparison week of a region."""
    return list_url(current, region, base_url), list_url(previous, region, base_url)


def parse_list_filename(path: str) -> Optional[Tuple[date, Region]]:
    """
    Read the week and region back out of a list file name.

    Args:
        path: File name or path ending in ``<YYMMDD><file code>.txt``

    Returns:
        (Wednesday, region), or None if the name does not follow the pattern
    """
    match = FILENAME_PATTERN.search(path)
    if not match:
        return None

    region = get_region_by_file_code(match.group(2))
    if region is None:
        return None

    try:
        week = datetime.strptime(match.group(1), "%y%m%d").date()
    except ValueError:
        return None
    return week, region
