"""
Tests for the FastAPI application.
"""

from datetime import datetime

import pytest

from api.main import API_DESCRIPTION

USER_AUTH = ("user", "user123")


def _parse_time(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _create(client, payload):
    response = client.post("/books", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(client):
    """Test health check endpoint without credentials."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["version"] == "1.0.0"
    assert data["bookCount"] == 0


def test_openapi_is_public(client):
    """Test that the OpenAPI document is served without credentials."""
    response = client.get("/openapi.json")
    assert response.status_code == 200
    paths = response.json()["paths"]
    assert "/books" in paths
    assert "/books/{book_id}" in paths
    assert "/books/isbn/{isbn}" in paths


def test_create_book(auth_client, book_payload):
    """Test creating a book returns 201 with the stored record."""
    response = auth_client.post("/books", json=book_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 1
    assert data["title"] == "1984"
    assert data["price"] == 11.99
    assert data["publishedYear"] == 1949
    assert data["createdAt"] == data["updatedAt"]
    assert response.headers["Location"] == "/books/1"


def test_create_book_accepts_snake_case(auth_client, book_payload):
    """Test that field names may also be sent in snake_case."""
    payload = dict(book_payload)
    payload["published_year"] = payload.pop("publishedYear")

    data = _create(auth_client, payload)

    assert data["publishedYear"] == 1949


def test_create_book_validation_error(auth_client):
    """Test that field violations produce a 400 with details."""
    response = auth_client.post("/books", json={"title": "", "author": "A", "isbn": "1", "price": 0})

    assert response.status_code == 400
    data = response.json()
    assert data["status"] == 400
    assert data["error"] == "Bad Request"
    assert data["message"] == "Validation failed"
    assert data["path"] == "/books"
    assert {detail["field"] for detail in data["details"]} == {"title", "isbn", "price"}


def test_create_book_wrong_types(auth_client, book_payload):
    """Test that unparseable field types are reported as 400."""
    payload = dict(book_payload, price="not-a-number")

    response = auth_client.post("/books", json=payload)

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "price"


def test_create_book_malformed_json(auth_client):
    """Test that a malformed JSON body is reported as 400."""
    response = auth_client.post(
        "/books",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "body"


def test_create_book_duplicate_isbn(auth_client, book_payload):
    """Test that a duplicate ISBN produces a 409."""
    _create(auth_client, book_payload)

    response = auth_client.post("/books", json=dict(book_payload, title="Another"))

    assert response.status_code == 409
    assert response.json()["message"] == "Book with ISBN 9780451524935 already exists"
    assert len(auth_client.get("/books").json()) == 1


def test_get_book_by_id(auth_client, book_payload):
    """Test get book by ID endpoint."""
    created = _create(auth_client, book_payload)

    response = auth_client.get(f"/books/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_book_not_found(auth_client):
    """Test book not found scenario."""
    response = auth_client.get("/books/999")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not Found"
    assert data["message"] == "Book not found with id: 999"
    assert data["details"] is None


def test_get_book_invalid_id(auth_client):
    """Test that a non-numeric id is a 400."""
    response = auth_client.get("/books/abc")

    assert response.status_code == 400


def test_get_book_by_isbn(auth_client, book_payload):
    """Test get book by ISBN endpoint."""
    created = _create(auth_client, book_payload)

    response = auth_client.get("/books/isbn/9780451524935")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]


def test_get_book_by_isbn_not_found(auth_client):
    """Test ISBN lookup for an unknown ISBN."""
    response = auth_client.get("/books/isbn/0000000000")

    assert response.status_code == 404


def test_list_books_empty(auth_client):
    """Test that an empty catalogue lists as an empty array."""
    response = auth_client.get("/books")

    assert response.status_code == 200
    assert response.json() == []


class TestSearch:
    """Test cases for GET /books query parameters."""

    @pytest.fixture(autouse=True)
    def seeded(self, auth_client):
        books = [
            ("The Great Gatsby", "F. Scott Fitzgerald", "9780743273565", 12.99, 1925),
            ("1984", "George Orwell", "9780451524935", 11.99, 1949),
            ("Animal Farm", "George Orwell", "9780451526342", 8.99, 1945),
            ("Brave New World", "Aldous Huxley", "9780060850524", 20.00, 1932),
            ("Pride and Prejudice", "Jane Austen", "9780141439518", 10.00, 1813),
        ]
        for title, author, isbn, price, year in books:
            _create(auth_client, {
                "title": title, "author": author, "isbn": isbn, "price": price, "publishedYear": year
            })

    def _titles(self, auth_client, params):
        response = auth_client.get("/books", params=params)
        assert response.status_code == 200, response.text
        return [book["title"] for book in response.json()]

    def test_list_all(self, auth_client):
        """Test listing without filters returns insertion order."""
        assert self._titles(auth_client, {}) == [
            "The Great Gatsby", "1984", "Animal Farm", "Brave New World", "Pride and Prejudice"
        ]

    @pytest.mark.parametrize("title", ["Gatsby", "GATSBY", "gatsby"])
    def test_title_case_insensitive(self, auth_client, title):
        """Test title search ignores case."""
        assert self._titles(auth_client, {"title": title}) == ["The Great Gatsby"]

    def test_author(self, auth_client):
        """Test author search."""
        assert self._titles(auth_client, {"author": "orwell"}) == ["1984", "Animal Farm"]

    def test_price_range_inclusive(self, auth_client):
        """Test that minPrice and maxPrice are inclusive."""
        titles = self._titles(auth_client, {"minPrice": 10, "maxPrice": 20})

        assert titles == ["The Great Gatsby", "1984", "Brave New World", "Pride and Prejudice"]

    def test_year(self, auth_client):
        """Test publication year filter."""
        assert self._titles(auth_client, {"year": 1945}) == ["Animal Farm"]

    def test_free_text(self, auth_client):
        """Test the q parameter."""
        assert self._titles(auth_client, {"q": "9780141439518"}) == ["Pride and Prejudice"]

    def test_sort_by_price(self, auth_client):
        """Test sorting by price ascending."""
        titles = self._titles(auth_client, {"sortBy": "price"})

        assert titles[0] == "Animal Farm"
        assert titles[-1] == "Brave New World"

    def test_sort_by_price_descending(self, auth_client):
        """Test sorting by price descending."""
        titles = self._titles(auth_client, {"sortBy": "price", "sortOrder": "desc"})

        assert titles[0] == "Brave New World"

    def test_no_matches(self, auth_client):
        """Test that a search without matches returns an empty array."""
        assert self._titles(auth_client, {"author": "tolkien"}) == []

    def test_inverted_price_range(self, auth_client):
        """Test that maxPrice below minPrice is a 400."""
        response = auth_client.get("/books", params={"minPrice": 20, "maxPrice": 10})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "maxPrice"

    def test_invalid_sort_field(self, auth_client):
        """Test that an unknown sortBy value is a 400."""
        response = auth_client.get("/books", params={"sortBy": "rating"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "sortBy"


def test_update_book(auth_client, book_payload):
    """Test updating a book."""
    created = _create(auth_client, book_payload)

    response = auth_client.put(
        f"/books/{created['id']}",
        json=dict(book_payload, title="Nineteen Eighty-Four", price=9.5)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["title"] == "Nineteen Eighty-Four"
    assert data["price"] == 9.5
    assert data["createdAt"] == created["createdAt"]
    assert _parse_time(data["updatedAt"]) > _parse_time(created["updatedAt"])


def test_update_book_not_found(auth_client, book_payload):
    """Test updating an unknown book."""
    response = auth_client.put("/books/42", json=book_payload)

    assert response.status_code == 404


def test_update_book_conflict(auth_client, book_payload):
    """Test updating a book to another book's ISBN."""
    first = _create(auth_client, book_payload)
    _create(auth_client, dict(book_payload, isbn="9780451526342", title="Animal Farm"))

    response = auth_client.put(f"/books/{first['id']}", json=dict(book_payload, isbn="9780451526342"))

    assert response.status_code == 409


def test_update_book_validation_error(auth_client, book_payload):
    """Test updating a book with invalid fields."""
    created = _create(auth_client, book_payload)

    response = auth_client.put(f"/books/{created['id']}", json=dict(book_payload, publishedYear=1200))

    assert response.status_code == 400
    assert response.json()["details"] == [
        {"field": "publishedYear", "message": "Published year must be between 1450 and 3000"}
    ]


def test_delete_book(auth_client, book_payload):
    """Test deleting a book returns 204 and removes it."""
    created = _create(auth_client, book_payload)

    response = auth_client.delete(f"/books/{created['id']}")

    assert response.status_code == 204
    assert response.content == b""
    assert auth_client.get(f"/books/{created['id']}").status_code == 404


def test_delete_book_not_found(auth_client):
    """Test deleting an unknown book."""
    assert auth_client.delete("/books/1").status_code == 404


def test_second_user_can_access_books(client):
    """Test that both configured users are accepted."""
    response = client.get("/books", auth=USER_AUTH)

    assert response.status_code == 200


def test_unknown_route_uses_error_payload(auth_client):
    """Test that framework 404s share the error payload shape."""
    response = auth_client.get("/authors")

    assert response.status_code == 404
    data = response.json()
    assert data["path"] == "/authors"
    assert data["status"] == 404


def test_method_not_allowed(auth_client):
    """Test that unsupported methods produce a 405 error payload."""
    response = auth_client.patch("/books/1", json={})

    assert response.status_code == 405
    assert response.json()["error"] == "Method Not Allowed"


def test_openapi_description(client):
    """Test that the OpenAPI document carries the API description."""
    info = client.get("/openapi.json").json()["info"]

    assert info["title"] == "Book Catalog API"
    assert info["description"] == API_DESCRIPTION
