"""
API configuration settings.
"""

from typing import Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Book Catalog API"
    api_version: str = "1.0.0"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Security Settings
    basic_auth_users: str = "admin:admin123,user:user123"  # Comma-separated username:password pairs

    # Catalog Settings
    seed_sample_data: bool = False

    # CORS Settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    def get_credentials(self) -> Dict[str, str]:
        """
        Parse the configured Basic auth users.

        Returns:
            Mapping of username to password

        Raises:
            ValueError: If an entry is not of the form ``username:password``
        """
        credentials = {}
        for entry in self.basic_auth_users.split(","):
            entry = entry.strip()
            if not entry:
                continue
            username, sep, password = entry.partition(":")
            if not sep or not username or not password:
                raise ValueError(f"Invalid basic_auth_users entry: {username or entry!r}")
            credentials[username] = password
        return credentials


# Global config instance
config = APIConfig()
