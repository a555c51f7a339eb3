"""
Photo upload endpoint.

POST /upload accepts multipart/form-data with:
- file: the photo (required)
- eventSlug: slug of the event the photo belongs to

The form is parsed in full before any store call. Validation failures
answer 4xx without touching the store. Parse and store failures answer a
generic 500; the root cause is logged only.

The form is read by hand instead of File()/Form() parameters so missing
fields produce the fixed {"error": ...} bodies rather than 422s.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from starlette.datastructures import FormData, UploadFile

from app.api.deps import get_app_settings, get_photo_upload_service
from app.config import Settings
from app.exceptions import FormParseError, MissingEventSlugError, MissingFileError
from app.models.photo import PhotoUpload
from app.schemas.upload import ErrorResponse, UploadResponse
from app.services.photo_upload_service import PhotoUploadService
from app.utils.logging import log_upload_failed, log_upload_received, log_upload_rejected
from app.utils.metrics import photo_upload_failures_total

logger = logging.getLogger(__name__)

router = APIRouter()

FILE_FIELD = "file"
EVENT_SLUG_FIELD = "eventSlug"


def _first(form: FormData, field: str):
    """First value of a possibly repeated field, or None."""
    values = form.getlist(field)
    return values[0] if values else None


def _read_event_slug(form: FormData) -> Optional[str]:
    value = _first(form, EVENT_SLUG_FIELD)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _reject(error):
    log_upload_rejected(logger, error.message, error.status_code)
    photo_upload_failures_total.labels(reason=type(error).__name__).inc()
    raise error


@router.options("/upload", status_code=status.HTTP_204_NO_CONTENT)
async def upload_preflight():
    """Preflight for clients that send OPTIONS without CORS headers."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def upload_photo(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    service: PhotoUploadService = Depends(get_photo_upload_service)
):
    """
    Store an uploaded photo and link it to its event.

    Flow:
    1. Parse the multipart body
    2. Validate file and eventSlug
    3. Read the file into memory
    4. Hand off to PhotoUploadService (EXIF, event lookup, asset, document)
    """
    try:
        form = await request.form()
    except Exception as e:
        # Starlette raises MultiPartException or HTTPException(400) here
        log_upload_failed(logger, "form_parse", error=repr(e))
        photo_upload_failures_total.labels(reason="form_parse").inc()
        raise FormParseError() from e

    try:
        file = _first(form, FILE_FIELD)
        event_slug = _read_event_slug(form)

        if not isinstance(file, UploadFile) or file.file is None:
            _reject(MissingFileError())

        if settings.requires_event_reference and not event_slug:
            _reject(MissingEventSlugError())

        content = await file.read()
        upload = PhotoUpload(
            content=content,
            filename=file.filename,
            content_type=file.content_type,
            event_slug=event_slug
        )
        log_upload_received(
            logger,
            upload.filename,
            upload.size_bytes,
            event_slug=event_slug,
            content_type=upload.content_type
        )
    finally:
        await form.close()

    doc_id = await service.ingest(upload)
    return UploadResponse(doc_id=doc_id)
