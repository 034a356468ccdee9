"""Tests for CSV exports."""
import csv
import io
from datetime import date
import pytest
from bestsellers.export import generate_csv
from bestsellers.models import Book, Category, BestsellerList


def compared_list():
    return BestsellerList(categories=[
        Category("Hardcover Fiction", [
            Book(1, "Holly", "Stephen King", "Scribner", "9781668016138", previous_rank=2, is_new=False),
            Book(2, "The Women", "Kristin Hannah", "St. Martin's", "9781250178633", is_new=True),
            Book(1, "Lessons in Chemistry", "Bonnie Garmus", "Doubleday", "9780385547345", was_dropped=True),
        ])
    ])


def test_export_adds_no_drops():
    """Test the full current list excludes dropped books."""
    result = generate_csv(compared_list(), "adds_no_drops", today=date(2024, 1, 10))

    assert result.book_count == 2
    assert result.filename == "bs_adds_no_drops_20240110.csv"
    assert result.content.split("\n")[0] == "9781668016138,0,Holly,,Stephen King,,,,,,,,,,,,,"


def test_export_adds_with_region():
    """Test new-only export and region filename prefix."""
    result = generate_csv(compared_list(), "adds", region="siba", today=date(2024, 1, 10))

    assert result.book_count == 1
    assert result.filename == "SIBA_bs_adds_20240110.csv"
    assert result.content.startswith("9781250178633,0,The Women,")


def test_export_drops():
    """Test drops-only export."""
    result = generate_csv(compared_list(), "drops", today=date(2024, 1, 10))

    assert result.book_count == 1
    assert "Lessons in Chemistry" in result.content


def test_export_unknown_type():
    """Test that an unknown export type is rejected."""
    with pytest.raises(ValueError):
        generate_csv(compared_list(), "everything")


def test_export_quotes_commas_in_fields():
    """Test a title containing commas stays in its own column."""
    bestseller_list = BestsellerList(categories=[
        Category("Trade Paperback Nonfiction", [
            Book(1, "Eat, Pray, Love", "Gilbert, Elizabeth", "Penguin", "9780143038412", is_new=True),
        ])
    ])

    result = generate_csv(bestseller_list, "adds", today=date(2024, 1, 10))
    rows = list(csv.reader(io.StringIO(result.content)))

    assert len(rows) == 1
    assert len(rows[0]) == 18
    assert rows[0][0] == "9780143038412"
    assert rows[0][2] == "Eat, Pray, Love"
    assert rows[0][4] == "Gilbert, Elizabeth"
    assert rows[0][9] == ""
