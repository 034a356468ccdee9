"""Week-over-week comparison of parsed bestseller lists."""
import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Dict, List, Mapping, Optional
from bestsellers.models import Book, Category, BestsellerList

logger = logging.getLogger(__name__)

WeeksLookup = Callable[[List[str]], Awaitable[Mapping[str, int]]]


def books_match(a: Book, b: Book) -> bool:
    """
    Decide whether two entries are the same book.

    ISBNs are compared when both sides have one; otherwise title and
    author must both be exactly equal.

    Args:
        a: Book from one week
        b: Book from the other week

    Returns:
        True if the entries refer to the same book
    """
    if a.isbn and b.isbn:
        return a.isbn == b.isbn
    return a.title == b.title and a.author == b.author


def _find_match(book: Book, candidates: List[Book]) -> Optional[Book]:
    for candidate in candidates:
        if books_match(book, candidate):
            return candidate
    return None


def collect_isbns(*lists: BestsellerList) -> List[str]:
    """Unique non-empty ISBNs across lists, in first-seen order."""
    seen = set()
    isbns = []

    for bestseller_list in lists:
        for category in bestseller_list.categories:
            for book in category.books:
                if book.isbn and book.isbn not in seen:
                    seen.add(book.isbn)
                    isbns.append(book.isbn)

    return isbns


async def _load_weeks(weeks_lookup: Optional[WeeksLookup], isbns: List[str]) -> Mapping[str, int]:
    if weeks_lookup is None:
        return {}

    try:
        result = await weeks_lookup(isbns)
    except Exception as e:
        logger.error(f"Weeks-on-list lookup failed, defaulting to 0: {e}")
        return {}

    return result or {}


async def compare_lists(
    current: BestsellerList,
    previous: BestsellerList,
    weeks_lookup: Optional[WeeksLookup] = None
) -> BestsellerList:
    """
    Annotate the current list against the previous week's list.

    Each current book is marked new or given its previous rank; books
    from a same-named previous category with no match are appended as
    dropped, keeping their last known rank. Neither input is modified.

    Args:
        current: This week's parsed list
        previous: The week being compared against
        weeks_lookup: Async batch lookup from ISBNs to weeks on list,
            awaited once per call

    Returns:
        New BestsellerList with the same title, date and categories as
        current
    """
    logger.debug(
        f"Comparing '{current.date}' ({len(current.categories)} categories) "
        f"against '{previous.date}' ({len(previous.categories)} categories)"
    )

    weeks_data = await _load_weeks(weeks_lookup, collect_isbns(current, previous))
    missing = []

    def weeks_for(isbn: str) -> int:
        if not isbn:
            return 0
        value = weeks_data.get(isbn)
        if value is None:
            if weeks_lookup is not None and isbn not in missing:
                missing.append(isbn)
            return 0
        return value

    categories = []
    for current_category in current.categories:
        previous_category = previous.get_category(current_category.name)
        previous_books = previous_category.books if previous_category else []

        books = []
        for book in current_category.books:
            match = _find_match(book, previous_books)
            weeks = weeks_for(book.isbn)
            if match is None:
                books.append(replace(book, is_new=True, weeks_on_list=weeks))
            else:
                books.append(replace(
                    book,
                    previous_rank=match.rank,
                    is_new=False,
                    weeks_on_list=weeks
                ))

        for old_book in previous_books:
            if _find_match(old_book, current_category.books) is None:
                books.append(replace(
                    old_book,
                    was_dropped=True,
                    weeks_on_list=weeks_for(old_book.isbn)
                ))

        categories.append(Category(name=current_category.name, books=books))

    if missing:
        logger.warning(f"Missing weeks-on-list data for {len(missing)} ISBNs: {missing}")

    return BestsellerList(title=current.title, date=current.date, categories=categories)


def compare_lists_sync(
    current: BestsellerList,
    previous: BestsellerList,
    weeks_lookup: Optional[WeeksLookup] = None
) -> BestsellerList:
    """Run compare_lists outside an event loop."""
    return asyncio.run(compare_lists(current, previous, weeks_lookup))


def summarize_changes(compared: BestsellerList) -> Dict[str, int]:
    """
    Count movements in a compared list.

    Args:
        compared: Output of compare_lists

    Returns:
        Counts keyed by "new", "dropped", "up", "down" and "same"
    """
    summary = {"new": 0, "dropped": 0, "up": 0, "down": 0, "same": 0}

    for category in compared.categories:
        for book in category.books:
            summary[book.status] += 1

    return summary
