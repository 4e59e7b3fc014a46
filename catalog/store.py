"""
In-memory record store for books.
Handles id assignment, ISBN uniqueness and filtered scans.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import structlog

from catalog.exceptions import ConflictError, NotFoundError
from catalog.models import Book, BookFilters, BookInput
from catalog.query import run_query

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class InMemoryBookStore:
    """
    Process-lifetime book storage.

    Rows live in an insertion-ordered dict keyed by id, with a secondary
    ``isbn -> id`` index standing in for a unique column index. Ids come from
    a counter that only grows, so a deleted id is never handed out again.
    Every mutation runs under a single lock so the ISBN uniqueness check and
    the write that depends on it cannot interleave with another writer.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Initialize an empty store.

        Args:
            clock: Callable returning the current UTC time, used for timestamps
        """
        self._clock = clock or utc_now
        self._rows: Dict[int, Book] = {}
        self._isbn_index: Dict[str, int] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _now_after(self, previous: Optional[datetime] = None) -> datetime:
        # updated_at must strictly increase even if the clock has not moved.
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    async def insert(self, record: BookInput) -> Book:
        """
        Insert a new book.

        Args:
            record: Validated and normalized book fields

        Returns:
            The stored Book with its id and timestamps

        Raises:
            ConflictError: If the ISBN is already stored
        """
        async with self._lock:
            if record.isbn in self._isbn_index:
                raise ConflictError(record.isbn)

            now = self._now_after()
            book = Book(
                id=self._next_id,
                title=record.title,
                author=record.author,
                isbn=record.isbn,
                price=record.price,
                published_year=record.published_year,
                created_at=now,
                updated_at=now,
            )
            self._rows[book.id] = book
            self._isbn_index[book.isbn] = book.id
            self._next_id += 1

        logger.debug("Book row inserted", book_id=book.id, isbn=book.isbn)
        return book

    async def get_by_id(self, book_id: int) -> Book:
        """
        Get a book by id.

        Raises:
            NotFoundError: If no book has this id
        """
        book = self._rows.get(book_id)
        if book is None:
            raise NotFoundError.for_id(book_id)
        return book

    async def get_by_isbn(self, isbn: str) -> Book:
        """
        Get a book by ISBN.

        Raises:
            NotFoundError: If no book has this ISBN
        """
        book_id = self._isbn_index.get(isbn)
        if book_id is None:
            raise NotFoundError.for_isbn(isbn)
        return self._rows[book_id]

    async def exists_by_isbn(self, isbn: str) -> bool:
        """Check whether any stored book uses ``isbn``."""
        return isbn in self._isbn_index

    async def update(self, book_id: int, record: BookInput) -> Book:
        """
        Replace the mutable fields of an existing book.

        Args:
            book_id: Id of the book to update
            record: Validated and normalized book fields

        Returns:
            The new stored Book; id and created_at are preserved

        Raises:
            NotFoundError: If no book has this id
            ConflictError: If the new ISBN belongs to a different book
        """
        async with self._lock:
            current = self._rows.get(book_id)
            if current is None:
                raise NotFoundError.for_id(book_id)

            owner = self._isbn_index.get(record.isbn)
            if owner is not None and owner != book_id:
                raise ConflictError(record.isbn)

            updated = current.model_copy(update={
                "title": record.title,
                "author": record.author,
                "isbn": record.isbn,
                "price": record.price,
                "published_year": record.published_year,
                "updated_at": self._now_after(current.updated_at),
            })
            if updated.isbn != current.isbn:
                del self._isbn_index[current.isbn]
                self._isbn_index[updated.isbn] = book_id
            self._rows[book_id] = updated

        logger.debug("Book row updated", book_id=book_id, isbn=updated.isbn)
        return updated

    async def delete(self, book_id: int) -> None:
        """
        Permanently remove a book.

        Raises:
            NotFoundError: If no book has this id
        """
        async with self._lock:
            book = self._rows.pop(book_id, None)
            if book is None:
                raise NotFoundError.for_id(book_id)
            del self._isbn_index[book.isbn]

        logger.debug("Book row deleted", book_id=book_id, isbn=book.isbn)

    async def query(self, filters: Optional[BookFilters] = None) -> List[Book]:
        """
        Scan the store for books matching ``filters``.

        Args:
            filters: Search parameters; None lists every book

        Returns:
            Matching books, in insertion order unless a sort was requested
        """
        snapshot = list(self._rows.values())
        return run_query(snapshot, filters or BookFilters())

    async def count(self) -> int:
        """Number of stored books."""
        return len(self._rows)
