"""Data models for bestseller lists."""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

DEFAULT_LIST_TITLE = "Better Bestsellers"
UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_PUBLISHER = "Unknown Publisher"


@dataclass
class Book:
    """One entry on a list for one week."""
    rank: int
    title: str
    author: str = UNKNOWN_AUTHOR
    publisher: str = UNKNOWN_PUBLISHER
    isbn: str = ""
    price: str = ""
    previous_rank: Optional[int] = None
    is_new: Optional[bool] = None
    was_dropped: Optional[bool] = None
    weeks_on_list: Optional[int] = None

    @property
    def rank_change(self) -> Optional[int]:
        """Positions gained since last week (positive means it moved up)."""
        if self.previous_rank is None or self.was_dropped:
            return None
        return self.previous_rank - self.rank

    @property
    def status(self) -> str:
        """Short label for the week-over-week movement."""
        if self.was_dropped:
            return "dropped"
        if self.is_new:
            return "new"
        change = self.rank_change
        if not change:
            return "same"
        return "up" if change > 0 else "down"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys the browsing UI expects."""
        data = {
            "rank": self.rank,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
            "price": self.price,
            "isbn": self.isbn,
        }
        if self.previous_rank is not None:
            data["previousRank"] = self.previous_rank
        if self.is_new is not None:
            data["isNew"] = self.is_new
        if self.was_dropped is not None:
            data["wasDropped"] = self.was_dropped
        if self.weeks_on_list is not None:
            data["weeksOnList"] = self.weeks_on_list
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        return cls(
            rank=int(data["rank"]),
            title=data.get("title", ""),
            author=data.get("author") or UNKNOWN_AUTHOR,
            publisher=data.get("publisher") or UNKNOWN_PUBLISHER,
            isbn=data.get("isbn") or "",
            price=data.get("price") or "",
            previous_rank=data.get("previousRank"),
            is_new=data.get("isNew"),
            was_dropped=data.get("wasDropped"),
            weeks_on_list=data.get("weeksOnList"),
        )


@dataclass
class Category:
    """A named section of a list holding ranked books."""
    name: str
    books: List[Book] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "books": [book.to_dict() for book in self.books]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            name=data["name"],
            books=[Book.from_dict(book) for book in data.get("books", [])]
        )


@dataclass
class BestsellerList:
    """One parsed weekly list document."""
    title: str = DEFAULT_LIST_TITLE
    date: str = ""
    categories: List[Category] = field(default_factory=list)

    @property
    def book_count(self) -> int:
        """Total books across categories, dropped entries included."""
        return sum(len(category.books) for category in self.categories)

    def get_category(self, name: str) -> Optional[Category]:
        """Find the first category with exactly this name."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "date": self.date,
            "categories": [category.to_dict() for category in self.categories]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BestsellerList":
        return cls(
            title=data.get("title") or DEFAULT_LIST_TITLE,
            date=data.get("date", ""),
            categories=[Category.from_dict(cat) for cat in data.get("categories", [])]
        )
