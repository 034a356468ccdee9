"""Line classification heuristics for raw bestseller list text."""
import re
from enum import Enum

ISBN_PATTERN = re.compile(r"978\d{10}|979\d{10}")
PRICE_PATTERN = re.compile(r"\$[\d,]+\.?\d*")
BOOK_ENTRY_PATTERN = re.compile(r"^(\d+)\.\s(.+)$")

_BOOK_ENTRY_START = re.compile(r"^\d+\.\s")


class LineKind(Enum):
    """What a single trimmed line of a list document represents."""
    CATEGORY_HEADER = "category-header"
    BOOK_ENTRY = "book-entry-start"
    DETAIL = "detail-line"
    OTHER = "other"


def is_category_header(line: str) -> bool:
    """
    Check whether a line is an all-caps section header.

    Headers are printed in capitals with no price or ISBN noise and
    always hold more than one word.

    Args:
        line: Trimmed, non-empty line

    Returns:
        True if the line starts a new category
    """
    return (
        line == line.upper()
        and len(line) > 3
        and not line[0].isdigit()
        and "$" not in line
        and "978" not in line
        and " " in line
    )


def is_book_entry(line: str) -> bool:
    """Check for a "<rank>. <title>" line."""
    return bool(_BOOK_ENTRY_START.match(line))


def is_detail_line(line: str) -> bool:
    """
    Check whether a line carries author/publisher/ISBN/price details.

    Args:
        line: Trimmed, non-empty line

    Returns:
        True if the line has an ISBN, a price, or reads like
        "Author, Publisher"
    """
    if ISBN_PATTERN.search(line) or PRICE_PATTERN.search(line):
        return True

    # Comma-separated author/publisher with no ISBN or price
    return "," in line and len(line) > 10


def classify_line(line: str) -> LineKind:
    """Classify a line; header and book-entry checks win over detail."""
    if is_category_header(line):
        return LineKind.CATEGORY_HEADER
    if is_book_entry(line):
        return LineKind.BOOK_ENTRY
    if is_detail_line(line):
        return LineKind.DETAIL
    return LineKind.OTHER
