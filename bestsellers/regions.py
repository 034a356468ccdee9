"""Regional bookseller associations and their list file codes."""
from dataclasses import dataclass
from typing import List, Optional
from bestsellers.errors import UnknownRegionError

DEFAULT_REGION = "PNBA"


@dataclass(frozen=True)
class Region:
    abbreviation: str
    display_name: str
    file_code: str
    is_active: bool = True


REGIONS: List[Region] = [
    Region("PNBA", "PNBA - Pacific Northwest", "pn"),
    Region("CALIBAN", "CALIBAN - Northern California", "nc"),
    Region("CALIBAS", "CALIBAS - Southern California", "sc"),
    Region("GLIBA", "GLIBA - Great Lakes", "gl"),
    Region("MPIBA", "MPIBA - Mountains & Plains", "mp"),
    Region("MIBA", "MIBA - Midwest", "mw"),
    Region("NAIBA", "NAIBA - New Atlantic", "na"),
    Region("NEIBA", "NEIBA - New England", "ne"),
    Region("SIBA", "SIBA - Southern", "si"),
]

ADULT_CATEGORIES = {
    "Hardcover Fiction",
    "Hardcover Nonfiction",
    "Trade Paperback Fiction",
    "Trade Paperback Nonfiction",
    "Mass Market Paperback",
}
CHILDREN_CATEGORIES = {
    "Children's Illustrated",
    "Early & Middle Grade Readers",
    "Children's Series Titles",
}


def get_region(abbreviation: str) -> Optional[Region]:
    """Look up a region by abbreviation (e.g. "SIBA")."""
    for region in REGIONS:
        if region.abbreviation == abbreviation:
            return region
    return None


def get_region_by_file_code(code: str) -> Optional[Region]:
    """Look up a region by its file code (e.g. "si")."""
    for region in REGIONS:
        if region.file_code == code:
            return region
    return None


def file_code_for(abbreviation: str) -> str:
    """
    Get the file-name suffix for a region.

    Args:
        abbreviation: Region abbreviation

    Returns:
        Two-letter file code

    Raises:
        UnknownRegionError: If the region is not configured
    """
    region = get_region(abbreviation)
    if region is None:
        raise UnknownRegionError(abbreviation)
    return region.file_code


def active_regions() -> List[Region]:
    return [region for region in REGIONS if region.is_active]


def default_audience(category_name: str) -> str:
    """Audience code for a category: "A" adult, "C" children, "T" teen."""
    if category_name in ADULT_CATEGORIES:
        return "A"
    if category_name in CHILDREN_CATEGORIES:
        return "C"
    if category_name == "Young Adult":
        return "T"
    return "A"
