"""
FastAPI dependencies for the upload routes.

Settings and the store client are built once at startup and held on
app.state; routes receive them through these dependencies so tests can
override them.
"""
from fastapi import Depends, Request

from app.config import Settings
from app.services.photo_upload_service import PhotoUploadService
from app.storage.sanity_client import SanityClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SanityClient:
    return request.app.state.store


def get_photo_upload_service(
    store: SanityClient = Depends(get_store),
    settings: Settings = Depends(get_app_settings)
) -> PhotoUploadService:
    return PhotoUploadService(store, settings)
