"""
Sample catalogue loaded at startup when SEED_SAMPLE_DATA is enabled.
"""

from decimal import Decimal
from typing import List

from catalog.models import BookInput

SAMPLE_BOOKS = [
    ("The Great Gatsby", "F. Scott Fitzgerald", "9780743273565", "12.99", 1925),
    ("To Kill a Mockingbird", "Harper Lee", "9780446310789", "14.99", 1960),
    ("1984", "George Orwell", "9780451524935", "11.99", 1949),
    ("Pride and Prejudice", "Jane Austen", "9780141439518", "9.99", 1813),
    ("The Hobbit", "J.R.R. Tolkien", "9780547928241", "15.99", 1937),
    ("The Catcher in the Rye", "J.D. Salinger", "9780316769488", "13.99", 1951),
    ("Lord of the Flies", "William Golding", "9780399501487", "10.99", 1954),
    ("Animal Farm", "George Orwell", "9780451526342", "8.99", 1945),
    ("The Alchemist", "Paulo Coelho", "9780062315007", "16.99", 1988),
    ("Brave New World", "Aldous Huxley", "9780060850524", "12.99", 1932),
]


def sample_books() -> List[BookInput]:
    """Build fresh ``BookInput`` instances for the sample catalogue."""
    return [
        BookInput(
            title=title,
            author=author,
            isbn=isbn,
            price=Decimal(price),
            published_year=year,
        )
        for title, author, isbn, price, year in SAMPLE_BOOKS
    ]
