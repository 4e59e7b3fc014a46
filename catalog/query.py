"""
Search predicates and ordering over book records.
"""

from typing import Iterable, List, Optional

from catalog.models import Book, BookFilters, SortOrder


def _contains(haystack: str, needle: Optional[str]) -> bool:
    # An empty needle matches everything.
    if not needle:
        return True
    return needle.casefold() in haystack.casefold()


def matches(book: Book, filters: BookFilters) -> bool:
    """
    Check whether a book satisfies every set filter.

    Title and author use case-insensitive substring containment, price bounds
    are inclusive, ``year`` must match exactly and ``q`` matches if it occurs
    in the title, the author or the ISBN.
    """
    if not _contains(book.title, filters.title):
        return False
    if not _contains(book.author, filters.author):
        return False
    if filters.min_price is not None and book.price < filters.min_price:
        return False
    if filters.max_price is not None and book.price > filters.max_price:
        return False
    if filters.year is not None and book.published_year != filters.year:
        return False
    if filters.q:
        return any(_contains(value, filters.q) for value in (book.title, book.author, book.isbn))
    return True


def sort_books(books: Iterable[Book], filters: BookFilters) -> List[Book]:
    """
    Order books as requested by ``filters``.

    Without ``sort_by`` the input order is kept. Books lacking the sort
    attribute (only ``published_year`` can be unset) always come last.
    """
    books = list(books)
    if filters.sort_by is None:
        if filters.sort_order == SortOrder.DESC:
            books.reverse()
        return books

    attribute = filters.sort_by.attribute
    present = [book for book in books if getattr(book, attribute) is not None]
    missing = [book for book in books if getattr(book, attribute) is None]

    def sort_key(book: Book):
        value = getattr(book, attribute)
        return value.casefold() if isinstance(value, str) else value

    present.sort(key=sort_key, reverse=filters.sort_order == SortOrder.DESC)
    return present + missing


def run_query(books: Iterable[Book], filters: BookFilters) -> List[Book]:
    """Filter then order ``books``."""
    return sort_books((book for book in books if matches(book, filters)), filters)
