"""Shared sample list files."""
import pytest

CURRENT_WEEK = """
PACIFIC NORTHWEST BOOKSELLERS ASSOCIATION BESTSELLERS
for the week ended Sunday, January 7, 2024

HARDCOVER FICTION
1. The House of Flame and Shadow
Sarah J. Maas, Bloomsbury, 9781635574043, $32.00
2. Holly
Stephen King, Scribner, 9781668016138, $30.00
3. The Women
Kristin Hannah, St. Martin's Press, 9781250178633, $30.00

HARDCOVER NONFICTION
1. The Wager
David Grann, Doubleday, 9780385534260, $30.00
2. Going Infinite
Michael Lewis, Norton, 9781324074335, $30.00

YOUNG ADULT
1. The Very Long Title That Spans
Multiple Lines Here
Brandon Sanderson, Tor Teen, 9781250899649, $32.99
2. Fourth Wing
Rebecca Yarros, Entangled: Red Tower Books, 9781649374042, $29.99
"""

PREVIOUS_WEEK = """
PACIFIC NORTHWEST BOOKSELLERS ASSOCIATION BESTSELLERS
for the week ended Sunday, December 31, 2023

HARDCOVER FICTION
1. Lessons in Chemistry
Bonnie Garmus, Doubleday, 9780385547345, $29.00
2. The Women
Kristin Hannah, St. Martin's Press, 9781250178633, $30.00
3. The House of Flame and Shadow
Sarah J. Maas, Bloomsbury, 9781635574043, $32.00

HARDCOVER NONFICTION
1. Going Infinite
Michael Lewis, Norton, 9781324074335, $30.00
2. The Wager
David Grann, Doubleday, 9780385534260, $30.00

MASS MARKET PAPERBACK
1. Dune
Frank Herbert, Ace, 9780441172719, $10.99
"""


@pytest.fixture
def current_text():
    return CURRENT_WEEK


@pytest.fixture
def previous_text():
    return PREVIOUS_WEEK
