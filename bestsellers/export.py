"""CSV exports of compared lists in the retailer import format."""
import csv
import io
from datetime import date
from typing import List, NamedTuple, Optional
from bestsellers.models import Book, BestsellerList

EXPORT_TYPES = ("adds_no_drops", "adds", "drops")


class CsvExport(NamedTuple):
    content: str
    filename: str
    book_count: int


def csv_row(book: Book) -> List[str]:
    """ISBN,0,Title,,Author,,,,,Publisher,,,,,,,, (publisher left blank)."""
    publisher = ""
    return [book.isbn, "0", book.title, "", book.author] + [""] * 4 + [publisher] + [""] * 8


def select_books(bestseller_list: BestsellerList, export_type: str) -> List[Book]:
    """
    Pick the books an export covers.

    Args:
        bestseller_list: Output of compare_lists
        export_type: "adds_no_drops" (the current list), "adds" (new
            books only) or "drops" (dropped books only)

    Returns:
        Books in list order
    """
    books = [book for category in bestseller_list.categories for book in category.books]

    if export_type == "adds_no_drops":
        return [book for book in books if not book.was_dropped]
    if export_type == "adds":
        return [book for book in books if book.is_new]
    if export_type == "drops":
        return [book for book in books if book.was_dropped]

    raise ValueError(f"Unknown export type: {export_type}")


def generate_csv(
    bestseller_list: BestsellerList,
    export_type: str,
    region: Optional[str] = None,
    today: Optional[date] = None
) -> CsvExport:
    """Build the CSV content and its dated filename."""
    books = select_books(bestseller_list, export_type)
    today = today or date.today()
    prefix = f"{region.upper()}_" if region else ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(csv_row(book) for book in books)

    return CsvExport(
        content=buffer.getvalue(),
        filename=f"{prefix}bs_{export_type}_{today.strftime('%Y%m%d')}.csv",
        book_count=len(books)
    )
