"""
Pydantic models for the book catalog.

``Book`` is the immutable stored record, ``BookInput`` the candidate fields a
client submits on create/update, and ``BookFilters`` the typed search
parameters understood by the store's query.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

PRICE_QUANTUM = Decimal("0.01")


class SortBy(str, Enum):
    """Sort options for book listings."""
    ID = "id"
    TITLE = "title"
    AUTHOR = "author"
    PRICE = "price"
    PUBLISHED_YEAR = "publishedYear"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def attribute(self) -> str:
        """Name of the ``Book`` attribute this option sorts on."""
        return {
            SortBy.PUBLISHED_YEAR: "published_year",
            SortBy.CREATED_AT: "created_at",
            SortBy.UPDATED_AT: "updated_at",
        }.get(self, self.value)


class SortOrder(str, Enum):
    """Sort order options."""
    ASC = "asc"
    DESC = "desc"


class Book(BaseModel):
    """
    A stored book record.

    Instances are frozen: an update produces a new ``Book`` through
    ``model_copy`` rather than mutating the stored one.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 3,
                "title": "1984",
                "author": "George Orwell",
                "isbn": "9780451524935",
                "price": 11.99,
                "publishedYear": 1949,
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:00Z",
            }
        },
    )

    id: int = Field(..., description="Server-assigned book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    isbn: str = Field(..., description="Unique ISBN")
    price: Decimal = Field(..., description="Price with two fractional digits")
    published_year: Optional[int] = Field(None, description="Year of first publication")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class BookInput(BaseModel):
    """
    Candidate book fields submitted by a client.

    Every field is optional at the schema level so that missing or blank
    values are reported by the validation layer with field-level messages
    instead of being rejected by the parser.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "1984",
                "author": "George Orwell",
                "isbn": "9780451524935",
                "price": 11.99,
                "publishedYear": 1949,
            }
        },
    )

    title: Optional[str] = Field(None, description="Book title (1-255 characters)")
    author: Optional[str] = Field(None, description="Book author (1-255 characters)")
    isbn: Optional[str] = Field(None, description="ISBN (10-20 characters), unique")
    price: Optional[Decimal] = Field(None, description="Positive price, at most 2 decimals")
    published_year: Optional[int] = Field(None, description="Publication year (1450-3000)")

    def normalized(self) -> "BookInput":
        """Return a copy with trimmed strings and the price quantized to cents."""
        price = self.price
        if price is not None:
            price = price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
        return self.model_copy(update={
            "title": self.title.strip() if self.title is not None else None,
            "author": self.author.strip() if self.author is not None else None,
            "isbn": self.isbn.strip() if self.isbn is not None else None,
            "price": price,
        })


class BookFilters(BaseModel):
    """Search parameters for book listings. Unset fields do not filter."""
    title: Optional[str] = Field(None, description="Case-insensitive title substring")
    author: Optional[str] = Field(None, description="Case-insensitive author substring")
    min_price: Optional[Decimal] = Field(None, description="Inclusive minimum price")
    max_price: Optional[Decimal] = Field(None, description="Inclusive maximum price")
    year: Optional[int] = Field(None, description="Exact publication year")
    q: Optional[str] = Field(None, description="Free text matched against title, author and ISBN")
    sort_by: Optional[SortBy] = Field(None, description="Sort field, insertion order when unset")
    sort_order: SortOrder = Field(SortOrder.ASC, description="Sort order")
