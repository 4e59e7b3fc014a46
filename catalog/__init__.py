"""
Book catalog core.

This package contains:
- Book record models and search filters
- Field validation
- In-memory record store with ISBN uniqueness
- Book service orchestrating CRUD and search
"""

__version__ = "1.0.0"
