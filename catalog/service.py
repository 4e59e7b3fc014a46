"""
Book service: the only caller allowed to mutate the record store.
"""

from typing import Iterable, List, Optional

import structlog

from catalog.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.models import Book, BookFilters, BookInput
from catalog.store import InMemoryBookStore
from catalog.validation import validate_book, validate_filters

logger = structlog.get_logger(__name__)


class BookService:
    """Orchestrates create/read/update/delete/search over a book store."""

    def __init__(self, store: InMemoryBookStore):
        self.store = store

    @staticmethod
    def _validated(data: BookInput) -> BookInput:
        result = validate_book(data)
        if not result.is_valid:
            logger.info(
                "Book validation failed",
                fields=[violation.field for violation in result.violations]
            )
            raise ValidationError(result.violations)
        return data.normalized()

    async def create(self, data: BookInput) -> Book:
        """
        Create a new book.

        Args:
            data: Candidate book fields

        Returns:
            The stored book

        Raises:
            ValidationError: If any field constraint fails
            ConflictError: If the ISBN is already taken
        """
        record = self._validated(data)
        if await self.store.exists_by_isbn(record.isbn):
            logger.warning("Duplicate ISBN rejected", isbn=record.isbn)
            raise ConflictError(record.isbn)

        try:
            book = await self.store.insert(record)
        except ConflictError:
            # Another writer took the ISBN between the check and the insert.
            logger.warning("Duplicate ISBN rejected", isbn=record.isbn)
            raise

        logger.info("Book created", book_id=book.id, isbn=book.isbn)
        return book

    async def get_by_id(self, book_id: int) -> Book:
        """Get a book by id, raising NotFoundError if absent."""
        try:
            return await self.store.get_by_id(book_id)
        except NotFoundError:
            logger.warning("Book not found", book_id=book_id)
            raise

    async def get_by_isbn(self, isbn: str) -> Book:
        """Get a book by ISBN, raising NotFoundError if absent."""
        try:
            return await self.store.get_by_isbn(isbn.strip())
        except NotFoundError:
            logger.warning("Book not found", isbn=isbn)
            raise

    async def list_books(self) -> List[Book]:
        """All books in insertion order."""
        return await self.store.query()

    async def search(self, filters: Optional[BookFilters] = None) -> List[Book]:
        """
        Search books.

        Args:
            filters: Search parameters; None or an empty filter lists everything

        Returns:
            Zero or more matching books

        Raises:
            ValidationError: If the price bounds are negative or inverted
        """
        filters = filters or BookFilters()
        result = validate_filters(filters)
        if not result.is_valid:
            raise ValidationError(result.violations, message="Invalid search parameters")

        books = await self.store.query(filters)
        logger.debug("Book search completed", filters=filters.model_dump(mode="json", exclude_none=True), count=len(books))
        return books

    async def update(self, book_id: int, data: BookInput) -> Book:
        """
        Replace every mutable field of an existing book.

        Raises:
            NotFoundError: If no book has this id
            ValidationError: If any field constraint fails
            ConflictError: If the new ISBN belongs to a different book
        """
        current = await self.get_by_id(book_id)
        record = self._validated(data)

        if record.isbn != current.isbn and await self.store.exists_by_isbn(record.isbn):
            logger.warning("Duplicate ISBN rejected", book_id=book_id, isbn=record.isbn)
            raise ConflictError(record.isbn)

        book = await self.store.update(book_id, record)
        logger.info("Book updated", book_id=book.id, isbn=book.isbn)
        return book

    async def delete(self, book_id: int) -> None:
        """Delete a book, raising NotFoundError if absent."""
        try:
            await self.store.delete(book_id)
        except NotFoundError:
            logger.warning("Book not found", book_id=book_id)
            raise
        logger.info("Book deleted", book_id=book_id)

    async def count(self) -> int:
        """Number of stored books."""
        return await self.store.count()

    async def seed(self, records: Iterable[BookInput]) -> int:
        """
        Load books into the store, skipping ISBNs that already exist.

        Returns:
            Number of books inserted
        """
        inserted = 0
        for data in records:
            record = self._validated(data)
            if await self.store.exists_by_isbn(record.isbn):
                continue
            await self.store.insert(record)
            inserted += 1

        logger.info("Sample catalogue seeded", inserted=inserted)
        return inserted
