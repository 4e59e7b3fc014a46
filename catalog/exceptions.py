"""
Error taxonomy for the book catalog.

Every expected failure raised by the store or the service derives from
``CatalogError`` and carries a message that is safe to show to API clients.
Anything else reaching the HTTP layer is treated as an internal error.
"""

from typing import List, Optional

from catalog.validation import FieldViolation


class CatalogError(Exception):
    """Base class for expected catalog failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Raised when a candidate record fails one or more field constraints."""

    def __init__(self, violations: List[FieldViolation], message: str = "Validation failed"):
        super().__init__(message)
        self.violations = list(violations)


class NotFoundError(CatalogError):
    """Raised when no book matches the requested id or ISBN."""

    @classmethod
    def for_id(cls, book_id: int) -> "NotFoundError":
        return cls(f"Book not found with id: {book_id}")

    @classmethod
    def for_isbn(cls, isbn: str) -> "NotFoundError":
        return cls(f"Book not found with ISBN: {isbn}")


class ConflictError(CatalogError):
    """Raised when an ISBN is already taken by another book."""

    def __init__(self, isbn: str, message: Optional[str] = None):
        super().__init__(message or f"Book with ISBN {isbn} already exists")
        self.isbn = isbn


class UnauthorizedError(CatalogError):
    """Raised when a request carries missing or invalid credentials."""

    def __init__(self, message: str = "Full authentication is required to access this resource"):
        super().__init__(message)
