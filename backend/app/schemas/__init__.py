"""
Pydantic schemas for API responses.
"""
from app.schemas.upload import (
    ErrorResponse,
    UploadResponse,
)

__all__ = [
    "ErrorResponse",
    "UploadResponse",
]
