"""
Field-level validation for candidate book records and search filters.

Both entry points are pure: they never touch the store and always report
every violation they find rather than stopping at the first one.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from catalog.models import BookFilters, BookInput

TEXT_MAX_LENGTH = 255
ISBN_MIN_LENGTH = 10
ISBN_MAX_LENGTH = 20
PRICE_UPPER_BOUND = Decimal("100000000")  # 8 integer digits
YEAR_MIN = 1450
YEAR_MAX = 3000


class FieldViolation(BaseModel):
    """A single failed constraint, keyed by the JSON field name."""
    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Human-readable reason")


class ValidationResult(BaseModel):
    """Outcome of a validation pass: valid, or invalid with its violations."""
    violations: List[FieldViolation] = Field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def invalid(cls, violations: List[FieldViolation]) -> "ValidationResult":
        return cls(violations=violations)

    @property
    def is_valid(self) -> bool:
        return not self.violations


def _check_text(violations: List[FieldViolation], field: str, label: str, value) -> None:
    if value is None or not value.strip():
        violations.append(FieldViolation(field=field, message=f"{label} is required"))
    elif len(value.strip()) > TEXT_MAX_LENGTH:
        violations.append(FieldViolation(
            field=field,
            message=f"{label} must be at most {TEXT_MAX_LENGTH} characters"
        ))


def validate_book(candidate: BookInput) -> ValidationResult:
    """
    Check a candidate record against the book field constraints.

    Args:
        candidate: Fields submitted for a create or update

    Returns:
        ValidationResult listing every violation, empty when valid
    """
    violations: List[FieldViolation] = []

    _check_text(violations, "title", "Title", candidate.title)
    _check_text(violations, "author", "Author", candidate.author)

    isbn = candidate.isbn
    if isbn is None or not isbn.strip():
        violations.append(FieldViolation(field="isbn", message="ISBN is required"))
    elif not ISBN_MIN_LENGTH <= len(isbn.strip()) <= ISBN_MAX_LENGTH:
        violations.append(FieldViolation(
            field="isbn",
            message=f"ISBN must be between {ISBN_MIN_LENGTH} and {ISBN_MAX_LENGTH} characters"
        ))

    price = candidate.price
    if price is None:
        violations.append(FieldViolation(field="price", message="Price is required"))
    elif price <= 0:
        violations.append(FieldViolation(field="price", message="Price must be positive"))
    elif price >= PRICE_UPPER_BOUND or price != price.quantize(Decimal("0.01")):
        violations.append(FieldViolation(
            field="price",
            message="Price must have at most 8 integer digits and 2 decimal places"
        ))

    year = candidate.published_year
    if year is not None and not YEAR_MIN <= year <= YEAR_MAX:
        violations.append(FieldViolation(
            field="publishedYear",
            message=f"Published year must be between {YEAR_MIN} and {YEAR_MAX}"
        ))

    if violations:
        return ValidationResult.invalid(violations)
    return ValidationResult.ok()


def validate_filters(filters: BookFilters) -> ValidationResult:
    """Check that price bounds are non-negative and form a valid range."""
    violations: List[FieldViolation] = []

    if filters.min_price is not None and filters.min_price < 0:
        violations.append(FieldViolation(field="minPrice", message="minPrice must not be negative"))
    if filters.max_price is not None and filters.max_price < 0:
        violations.append(FieldViolation(field="maxPrice", message="maxPrice must not be negative"))
    if (
        filters.min_price is not None
        and filters.max_price is not None
        and filters.max_price < filters.min_price
    ):
        violations.append(FieldViolation(
            field="maxPrice",
            message="maxPrice must be greater than or equal to minPrice"
        ))

    if violations:
        return ValidationResult.invalid(violations)
    return ValidationResult.ok()
