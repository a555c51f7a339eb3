"""
Photo upload service.

Runs the store-facing half of an upload, strictly in order:
1. Extract capture time from EXIF (worker thread)
2. Resolve the event by slug (reference mode only)
3. Upload the binary as an image asset
4. Create the photo document linking asset and event

Event resolution happens before the asset upload, so an unknown slug never
leaves an asset behind. If document creation fails after the asset upload,
the asset stays in the store unless cleanup_orphaned_assets is enabled.
"""
import logging
import mimetypes
import time
from typing import Optional

from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.exceptions import EventNotFoundError, StoreOperationError
from app.models.photo import AssetReference, EventReference, PhotoRecord, PhotoUpload
from app.services.capture_metadata import extract_taken_at, to_iso_utc, utc_now
from app.storage.sanity_client import SanityClient, SanityError
from app.utils.logging import log_upload_completed, log_upload_failed, log_upload_rejected
from app.utils.metrics import photo_uploads_total, photo_upload_failures_total

logger = logging.getLogger(__name__)

EVENT_BY_SLUG_QUERY = '*[_type == "event" && slug.current == $slug][0]{ _id }'


class PhotoUploadService:
    """
    Service for storing uploaded photos.

    Responsibilities:
    - Derive the capture timestamp
    - Resolve the owning event
    - Upload the asset and create the photo document
    """

    def __init__(self, store: SanityClient, settings: Settings):
        self.store = store
        self.settings = settings

    async def resolve_event(self, slug: str) -> EventReference:
        """
        Look up an event document by slug.

        Raises:
            EventNotFoundError: no event has this slug
            StoreOperationError: the query failed
        """
        try:
            result = await self.store.fetch(EVENT_BY_SLUG_QUERY, {"slug": slug})
        except SanityError as e:
            log_upload_failed(logger, "event_lookup", error=str(e), event_slug=slug, include_traceback=False)
            photo_upload_failures_total.labels(reason="event_lookup").inc()
            raise StoreOperationError() from e

        if not result or not result.get("_id"):
            log_upload_rejected(logger, EventNotFoundError.message, 404, event_slug=slug)
            photo_upload_failures_total.labels(reason="event_not_found").inc()
            raise EventNotFoundError()

        return EventReference.model_validate(result)

    async def upload_asset(self, upload: PhotoUpload) -> AssetReference:
        content_type = upload.content_type
        if not content_type or content_type == "application/octet-stream":
            content_type = mimetypes.guess_type(upload.filename or "")[0] or content_type

        try:
            document = await self.store.upload_asset(
                "image",
                upload.content,
                filename=upload.filename,
                content_type=content_type
            )
        except SanityError as e:
            log_upload_failed(logger, "asset_upload", error=str(e), event_slug=upload.event_slug, include_traceback=False)
            photo_upload_failures_total.labels(reason="asset_upload").inc()
            raise StoreOperationError() from e

        return AssetReference.model_validate(document)

    async def create_record(self, record: PhotoRecord, asset: AssetReference, event_slug: Optional[str]) -> str:
        """
        Persist the photo document and return its id.

        On failure the asset is deleted when cleanup is enabled; a failed
        cleanup is logged and the original failure is still raised.
        """
        try:
            created = await self.store.create(record.to_document())
        except SanityError as e:
            log_upload_failed(
                logger,
                "record_create",
                error=str(e),
                event_slug=event_slug,
                asset_id=asset.id,
                include_traceback=False
            )
            photo_upload_failures_total.labels(reason="record_create").inc()
            if self.settings.cleanup_orphaned_assets:
                await self._delete_orphan(asset)
            raise StoreOperationError() from e

        return created["_id"]

    async def _delete_orphan(self, asset: AssetReference) -> None:
        try:
            await self.store.delete(asset.id)
            logger.info(f"Deleted orphaned asset {asset.id}", extra={"event": "orphan_deleted", "asset_id": asset.id})
        except SanityError as e:
            logger.error(
                f"Failed to delete orphaned asset {asset.id}: {e}",
                extra={"event": "orphan_delete_failed", "asset_id": asset.id}
            )

    async def ingest(self, upload: PhotoUpload) -> str:
        """
        Store one photo and return the new document id.

        Args:
            upload: Validated upload (file bytes, filename, event slug)

        Returns:
            ID of the created photo document

        Raises:
            EventNotFoundError: slug does not match an event
            StoreOperationError: any content store call failed
        """
        start_time = time.time()

        taken_at = await run_in_threadpool(extract_taken_at, upload.content)

        event = None
        if self.settings.requires_event_reference:
            event = await self.resolve_event(upload.event_slug)

        asset = await self.upload_asset(upload)

        record = PhotoRecord.build(
            asset=asset,
            taken_at=taken_at,
            created_at=to_iso_utc(utc_now()),
            filename=upload.filename,
            event=event,
            event_slug=upload.event_slug
        )
        doc_id = await self.create_record(record, asset, upload.event_slug)

        photo_uploads_total.inc()
        log_upload_completed(
            logger,
            doc_id=doc_id,
            asset_id=asset.id,
            event_slug=upload.event_slug,
            duration_ms=(time.time() - start_time) * 1000
        )
        return doc_id
