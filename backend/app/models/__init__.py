"""
Photo upload domain models.
"""
from app.models.photo import (
    AssetReference,
    EventReference,
    PhotoRecord,
    PhotoUpload,
)

__all__ = [
    "AssetReference",
    "EventReference",
    "PhotoRecord",
    "PhotoUpload",
]
