"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog.validation import FieldViolation


class ErrorResponse(BaseModel):
    """Uniform error payload returned for every failed request."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: datetime = Field(..., description="When the error occurred (UTC)")
    status: int = Field(..., description="HTTP status code")
    error: str = Field(..., description="HTTP reason phrase")
    message: str = Field(..., description="Error message")
    path: str = Field(..., description="Request path")
    correlation_id: Optional[str] = Field(None, description="Request correlation id")
    details: Optional[List[FieldViolation]] = Field(None, description="Field violations for validation errors")


class HealthResponse(BaseModel):
    """Health check response model."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    book_count: int = Field(..., description="Number of stored books")
