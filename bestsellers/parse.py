"""Parse raw weekly bestseller list text into structured lists."""
import re
import logging
from typing import List, Optional, Tuple
from bestsellers.classify import (
    BOOK_ENTRY_PATTERN,
    ISBN_PATTERN,
    PRICE_PATTERN,
    is_book_entry,
    is_category_header,
    is_detail_line,
)
from bestsellers.models import (
    Book,
    Category,
    BestsellerList,
    DEFAULT_LIST_TITLE,
    UNKNOWN_AUTHOR,
    UNKNOWN_PUBLISHER,
)

logger = logging.getLogger(__name__)

# Title and date only ever appear in the document preamble
HEADER_LINES = 5
DATE_PATTERN = re.compile(r"week ended (\w+, \w+ \d+, \d+)")


def format_category_name(header: str) -> str:
    """
    Turn an all-caps header into a display name.

    Args:
        header: Header line, e.g. "YOUNG ADULT"

    Returns:
        Title-cased name, e.g. "Young Adult"
    """
    return " ".join(
        word[:1].upper() + word[1:]
        for word in header.lower().split(" ")
    )


def _split_details(detail_line: str) -> Tuple[str, str, str, str]:
    """Pull (author, publisher, isbn, price) out of a detail line."""
    isbn_match = ISBN_PATTERN.search(detail_line)
    isbn = isbn_match.group(0) if isbn_match else ""

    price_match = PRICE_PATTERN.search(detail_line)
    price = price_match.group(0) if price_match else ""

    remainder = detail_line
    if isbn:
        remainder = remainder.replace(isbn, "", 1)
    if price:
        remainder = remainder.replace(price, "", 1)

    remainder = re.sub(r",\s*,", ",", remainder)
    remainder = re.sub(r",\s*$", "", remainder).strip()
    parts = [part.strip() for part in remainder.split(",")]
    parts = [part for part in parts if part]

    author = parts[0] if len(parts) > 0 else UNKNOWN_AUTHOR
    publisher = parts[1] if len(parts) > 1 else UNKNOWN_PUBLISHER
    return author, publisher, isbn, price


def extract_book_entry(lines: List[str], start_index: int) -> Tuple[Optional[Book], int]:
    """
    Assemble one book from its title line and the lines after it.

    Lines between the title line and the detail line are appended to
    the title. Hitting another entry or a header first means the entry
    is malformed.

    Args:
        lines: All trimmed, non-empty lines of the document
        start_index: Index of the "<rank>. <title>" line

    Returns:
        (book, next_index) where book is None if extraction failed and
        next_index is the first line not consumed
    """
    match = BOOK_ENTRY_PATTERN.match(lines[start_index])
    if not match:
        return None, start_index + 1

    rank = int(match.group(1))
    title = match.group(2)

    index = start_index + 1
    detail_line = ""
    while index < len(lines):
        candidate = lines[index]

        if is_book_entry(candidate) or is_category_header(candidate):
            break

        if is_detail_line(candidate):
            detail_line = candidate
            break

        # Title continuation
        title += " " + candidate
        index += 1

    if not detail_line:
        return None, index

    author, publisher, isbn, price = _split_details(detail_line)
    book = Book(
        rank=rank,
        title=title.strip(),
        author=author,
        publisher=publisher,
        isbn=isbn,
        price=price
    )
    return book, index + 1


def parse_list(content: str) -> BestsellerList:
    """
    Parse a full list document.

    Args:
        content: Raw text of a weekly list file

    Returns:
        BestsellerList with categories in document order (empty
        categories are kept)
    """
    lines = [line.strip() for line in content.split("\n")]
    lines = [line for line in lines if line]

    title = ""
    date = ""
    categories: List[Category] = []
    current: Optional[Category] = None

    i = 0
    while i < len(lines):
        line = lines[i]

        if i < HEADER_LINES:
            if not title and "bestsellers" in line.lower():
                title = line
            if "week ended" in line:
                date_match = DATE_PATTERN.search(line)
                if date_match:
                    date = date_match.group(1)

        if is_category_header(line):
            if current is not None:
                categories.append(current)
            current = Category(name=format_category_name(line))
            i += 1
            continue

        if current is not None and is_book_entry(line):
            book, next_index = extract_book_entry(lines, i)
            if book:
                current.books.append(book)
            else:
                logger.debug(f"Skipping malformed entry at line {i}: {line}")
            i = next_index
            continue

        i += 1

    if current is not None:
        categories.append(current)

    return BestsellerList(
        title=title or DEFAULT_LIST_TITLE,
        date=date,
        categories=categories
    )


def parse_list_file(path: str) -> BestsellerList:
    """Read and parse a list file saved on disk."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_list(f.read())
