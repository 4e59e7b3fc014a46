"""
FastAPI RESTful API for the Book Catalog.

This module provides a REST API for:
- Creating, reading, updating and deleting books
- Searching books by title, author, price and year
- HTTP Basic authentication
- Uniform error payloads with correlation ids
"""
