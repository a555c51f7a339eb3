"""
Business logic services.
"""
from app.services.photo_upload_service import PhotoUploadService

__all__ = [
    "PhotoUploadService",
]
