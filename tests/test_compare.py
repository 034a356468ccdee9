"""Tests for week-over-week comparison."""
import asyncio
import logging
from bestsellers.compare import (
    books_match,
    collect_isbns,
    compare_lists,
    compare_lists_sync,
    summarize_changes,
)
from bestsellers.models import Book, Category, BestsellerList
from bestsellers.parse import parse_list


def single_category(*books, name="Hardcover Fiction"):
    return BestsellerList(title="Test", date="", categories=[Category(name, list(books))])


def test_books_match_by_isbn():
    """Test that ISBNs decide when both sides have one."""
    a = Book(1, "Holly", "Stephen King", isbn="9781668016138")
    b = Book(4, "Holly (Deluxe)", "S. King", isbn="9781668016138")
    c = Book(1, "Holly", "Stephen King", isbn="9781668099999")

    assert books_match(a, b)
    assert not books_match(a, c)


def test_books_match_by_title_and_author():
    """Test the exact title+author fallback when an ISBN is missing."""
    a = Book(1, "Holly", "Stephen King", isbn="9781668016138")
    b = Book(2, "Holly", "Stephen King")

    assert books_match(a, b)
    assert not books_match(a, Book(2, "holly", "Stephen King"))
    assert not books_match(a, Book(2, "Holly", "Stephen  King"))


def test_compare_rank_change_by_isbn():
    """Test a book moving from rank 3 to rank 1."""
    current = single_category(Book(1, "The Wager", "David Grann", isbn="9780385534260"))
    previous = single_category(
        Book(1, "Other", "Someone", isbn="9780000000001"),
        Book(2, "Another", "Someone", isbn="9780000000002"),
        Book(3, "The Wager", "David Grann", isbn="9780385534260"),
    )

    result = compare_lists_sync(current, previous)
    book = result.categories[0].books[0]

    assert book.rank == 1
    assert book.previous_rank == 3
    assert book.is_new is False
    assert book.rank_change == 2


def test_compare_all_matched_has_no_new_books():
    """Test that fully matching lists produce no new flags."""
    current = single_category(
        Book(1, "B", "Y", isbn="9780000000002"),
        Book(2, "A", "X", isbn="9780000000001"),
    )
    previous = single_category(
        Book(1, "A", "X", isbn="9780000000001"),
        Book(2, "B", "Y", isbn="9780000000002"),
    )

    books = compare_lists_sync(current, previous).categories[0].books
    assert [book.is_new for book in books] == [False, False]
    assert [book.previous_rank for book in books] == [2, 1]
    assert not any(book.was_dropped for book in books)


def test_compare_dropped_books_appended_in_previous_order():
    """Test dropped books keep their rank and follow the current books."""
    current = single_category(Book(1, "Kept", "K", isbn="9780000000010"))
    previous = single_category(
        Book(1, "Gone One", "G", isbn="9780000000011"),
        Book(2, "Kept", "K", isbn="9780000000010"),
        Book(3, "Gone Two", "H"),
    )

    books = compare_lists_sync(current, previous).categories[0].books
    assert [book.title for book in books] == ["Kept", "Gone One", "Gone Two"]
    assert books[1].was_dropped is True
    assert books[1].rank == 1
    assert books[2].was_dropped is True
    assert books[2].rank == 3


def test_compare_different_isbns_same_title():
    """Test that two editions with different ISBNs are not matched."""
    current = single_category(Book(1, "Dune", "Frank Herbert", isbn="9780441172719"))
    previous = single_category(Book(1, "Dune", "Frank Herbert", isbn="9780593099322"))

    books = compare_lists_sync(current, previous).categories[0].books
    assert books[0].is_new is True
    assert books[1].was_dropped is True
    assert books[1].isbn == "9780593099322"


def test_compare_never_matches_across_categories():
    """Test that a book moving category counts as new."""
    book = Book(1, "Holly", "Stephen King", isbn="9781668016138")
    current = single_category(book, name="Hardcover Fiction")
    previous = single_category(book, name="Trade Paperback Fiction")

    result = compare_lists_sync(current, previous)
    assert len(result.categories) == 1
    assert result.categories[0].books[0].is_new is True
    assert len(result.categories[0].books) == 1


def test_compare_sample_weeks(current_text, previous_text):
    """Test a realistic pair of weeks end to end."""
    current = parse_list(current_text)
    previous = parse_list(previous_text)

    result = compare_lists_sync(current, previous)

    assert result.title == current.title
    assert result.date == "Sunday, January 7, 2024"
    # Categories only in the previous week are not carried over
    assert result.get_category("Mass Market Paperback") is None

    fiction = result.get_category("Hardcover Fiction").books
    assert [(b.title, b.status) for b in fiction] == [
        ("The House of Flame and Shadow", "up"),
        ("Holly", "new"),
        ("The Women", "down"),
        ("Lessons in Chemistry", "dropped"),
    ]

    young_adult = result.get_category("Young Adult").books
    assert all(book.is_new for book in young_adult)

    assert summarize_changes(result) == {"new": 3, "dropped": 1, "up": 2, "down": 2, "same": 0}


def test_compare_does_not_mutate_inputs(current_text, previous_text):
    """Test that both inputs are left untouched."""
    current = parse_list(current_text)
    previous = parse_list(previous_text)

    compare_lists_sync(current, previous)

    assert current == parse_list(current_text)
    assert previous == parse_list(previous_text)


def test_compare_weeks_lookup_called_once():
    """Test one batched lookup covering both weeks' ISBNs."""
    calls = []

    async def lookup(isbns):
        calls.append(list(isbns))
        return {"9780000000001": 5}

    current = single_category(
        Book(1, "A", "X", isbn="9780000000001"),
        Book(2, "No Isbn", "Z"),
    )
    previous = single_category(
        Book(1, "A", "X", isbn="9780000000001"),
        Book(2, "Old", "Y", isbn="9780000000002"),
    )

    books = asyncio.run(compare_lists(current, previous, lookup)).categories[0].books

    assert calls == [["9780000000001", "9780000000002"]]
    assert [book.weeks_on_list for book in books] == [5, 0, 0]


def test_compare_lookup_failure_defaults_to_zero():
    """Test that a failing lookup does not fail the comparison."""
    async def lookup(isbns):
        raise ConnectionError("database unavailable")

    current = single_category(Book(1, "A", "X", isbn="9780000000001"))
    previous = single_category(Book(2, "A", "X", isbn="9780000000001"))

    books = asyncio.run(compare_lists(current, previous, lookup)).categories[0].books
    assert books[0].weeks_on_list == 0
    assert books[0].previous_rank == 2


def test_compare_without_lookup():
    """Test weeks default to 0 when no lookup is supplied."""
    current = single_category(Book(1, "A", "X", isbn="9780000000001"))

    result = compare_lists_sync(current, BestsellerList())
    assert result.categories[0].books[0].weeks_on_list == 0
    assert result.categories[0].books[0].is_new is True


def test_compare_without_lookup_logs_no_missing_warning(caplog):
    """Test no missing-data warning when weeks were never requested."""
    current = single_category(Book(1, "A", "X", isbn="9780000000001"))

    with caplog.at_level(logging.WARNING, logger="bestsellers.compare"):
        compare_lists_sync(current, BestsellerList())

    assert "Missing weeks-on-list data" not in caplog.text


def test_compare_lookup_gap_logs_missing_warning(caplog):
    """Test ISBNs absent from a lookup answer are reported once."""
    async def lookup(isbns):
        return {}

    current = single_category(Book(1, "A", "X", isbn="9780000000001"))
    previous = single_category(Book(2, "A", "X", isbn="9780000000001"))

    with caplog.at_level(logging.WARNING, logger="bestsellers.compare"):
        asyncio.run(compare_lists(current, previous, lookup))

    assert "Missing weeks-on-list data for 1 ISBNs" in caplog.text


def test_collect_isbns_unique_in_order():
    """Test ISBN collection skips blanks and duplicates."""
    first = single_category(Book(1, "A", "X", isbn="9780000000002"), Book(2, "B", "Y"))
    second = single_category(
        Book(1, "A", "X", isbn="9780000000002"),
        Book(2, "C", "Z", isbn="9780000000001"),
    )

    assert collect_isbns(first, second) == ["9780000000002", "9780000000001"]
