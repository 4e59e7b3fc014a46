"""
FastAPI main application for the Book Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from api.auth import CredentialStore, verify_credentials
from api.config import APIConfig, config as default_config
from api.correlation import correlation_id_middleware
from api.errors import register_exception_handlers
from api.middleware import auth_gate_middleware, error_guard_middleware
from api.models import ErrorResponse, HealthResponse
from catalog.models import Book, BookFilters, BookInput, SortBy, SortOrder
from catalog.sample_data import sample_books
from catalog.service import BookService
from catalog.store import InMemoryBookStore

# Setup logging
logger = structlog.get_logger(__name__)

API_DESCRIPTION = """
A REST API for managing a catalogue of books.

## Features

* **Book Management**: Create, read, update and delete books
* **Search**: Filter by title, author, price range and publication year
* **Authentication**: HTTP Basic authentication on every book endpoint
* **Tracing**: Every response carries an `X-Correlation-Id` header

## Authentication

All book endpoints require HTTP Basic credentials:

```
Authorization: Basic base64(username:password)
```
"""

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid input data"},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
}


def get_book_service(request: Request) -> BookService:
    """Book service attached to the running application."""
    return request.app.state.book_service


router = APIRouter(
    prefix="/books",
    tags=["Books"],
    dependencies=[Depends(verify_credentials)],
    responses=ERROR_RESPONSES,
)


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "ISBN already exists"}},
)
async def create_book(
    data: BookInput,
    response: Response,
    service: BookService = Depends(get_book_service)
):
    """
    Create a new book.

    The ISBN must not belong to any existing book.
    """
    book = await service.create(data)
    response.headers["Location"] = f"/books/{book.id}"
    return book


@router.get("", response_model=List[Book])
async def search_books(
    title: Optional[str] = Query(None, description="Case-insensitive title substring"),
    author: Optional[str] = Query(None, description="Case-insensitive author substring"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", description="Inclusive minimum price"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", description="Inclusive maximum price"),
    year: Optional[int] = Query(None, description="Exact publication year"),
    q: Optional[str] = Query(None, description="Free text over title, author and ISBN"),
    sort_by: Optional[SortBy] = Query(None, alias="sortBy", description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder", description="Sort order"),
    service: BookService = Depends(get_book_service)
):
    """
    List books, optionally filtered and sorted.

    - **title**: Filter by title substring
    - **author**: Filter by author substring
    - **minPrice** / **maxPrice**: Inclusive price range
    - **year**: Publication year
    - **q**: Free text matched against title, author and ISBN
    - **sortBy**: id, title, author, price, publishedYear, createdAt, updatedAt
    - **sortOrder**: asc, desc
    """
    filters = BookFilters(
        title=title,
        author=author,
        min_price=min_price,
        max_price=max_price,
        year=year,
        q=q,
        sort_by=sort_by,
        sort_order=sort_order
    )
    return await service.search(filters)


@router.get(
    "/isbn/{isbn}",
    response_model=Book,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Book not found"}},
)
async def get_book_by_isbn(isbn: str, service: BookService = Depends(get_book_service)):
    """Get a single book by ISBN."""
    return await service.get_by_isbn(isbn)


@router.get(
    "/{book_id}",
    response_model=Book,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Book not found"}},
)
async def get_book(book_id: int, service: BookService = Depends(get_book_service)):
    """Get a single book by ID."""
    return await service.get_by_id(book_id)


@router.put(
    "/{book_id}",
    response_model=Book,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Book not found"},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "ISBN already exists"},
    },
)
async def update_book(
    book_id: int,
    data: BookInput,
    service: BookService = Depends(get_book_service)
):
    """Replace every field of an existing book."""
    return await service.update(book_id, data)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Book not found"}},
)
async def delete_book(book_id: int, service: BookService = Depends(get_book_service)):
    """Delete a book by ID."""
    await service.delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def create_app(
    api_config: Optional[APIConfig] = None,
    service: Optional[BookService] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        api_config: Settings to use, defaults to the environment configuration
        service: Book service to expose, defaults to one over a fresh in-memory store

    Returns:
        Configured FastAPI application
    """
    api_config = api_config or default_config
    service = service or BookService(InMemoryBookStore())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info(
            "Starting Book Catalog API",
            version=api_config.api_version,
            users=app.state.credential_store.usernames
        )
        if api_config.seed_sample_data:
            await app.state.book_service.seed(sample_books())
        yield
        logger.info("Shutting down Book Catalog API")

    app = FastAPI(
        title=api_config.api_title,
        description=API_DESCRIPTION,
        version=api_config.api_version,
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan
    )
    app.state.config = api_config
    app.state.book_service = service
    app.state.credential_store = CredentialStore(api_config.get_credentials())

    # Last registered runs first: CORS, correlation id, error guard, auth gate.
    app.middleware("http")(auth_gate_middleware)
    app.middleware("http")(error_guard_middleware)
    app.middleware("http")(correlation_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=api_config.cors_allow_credentials,
        allow_methods=api_config.cors_allow_methods,
        allow_headers=api_config.cors_allow_headers,
    )
    register_exception_handlers(app)

    # Health check endpoint (no authentication required)
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        book_count = await request.app.state.book_service.count()
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            version=api_config.api_version,
            book_count=book_count
        )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_config.host,
        port=default_config.port,
        reload=default_config.debug,
        log_level=default_config.log_level.lower()
    )
