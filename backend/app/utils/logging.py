"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- event_slug
- doc_id
- asset_id
- duration_ms

Usage:
    from app.utils.logging import configure_logging, log_upload_completed

    configure_logging('photo-upload', 'INFO')
    log_upload_completed(logger, doc_id='abc', asset_id='image-123', duration_ms=45.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


def build_formatter() -> jsonlogger.JsonFormatter:
    """JSON formatter shared by every handler."""
    return jsonlogger.JsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s',
        timestamp=True,
        json_ensure_ascii=False
    )


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (photo-upload)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = build_formatter()

        # Console handler (for container logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    event_slug: Optional[str] = None,
    doc_id: Optional[str] = None,
    asset_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        event_slug: Optional event slug from the upload form
        doc_id: Optional photo document ID
        asset_id: Optional asset ID
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if event_slug:
        extra["event_slug"] = event_slug
    if doc_id:
        extra["doc_id"] = doc_id
    if asset_id:
        extra["asset_id"] = asset_id
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


def _log_error(logger: logging.Logger, message: str, extra: Dict[str, Any], include_traceback: bool):
    if include_traceback and sys.exc_info()[0] is not None:
        logger.error(message, extra=extra, exc_info=sys.exc_info())
    else:
        logger.error(message, extra=extra)


# Upload event functions

def log_upload_received(
    logger: logging.Logger,
    filename: Optional[str],
    size_bytes: int,
    event_slug: Optional[str] = None,
    content_type: Optional[str] = None,
    **kwargs
):
    """
    Log a validated upload request.

    Args:
        logger: Logger instance
        filename: Original filename from the form
        size_bytes: Size of the file payload
        event_slug: Optional event slug
        content_type: Optional declared content type
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_received",
        event_slug=event_slug,
        original_filename=filename,
        size_bytes=size_bytes,
        **kwargs
    )
    if content_type:
        extra["content_type"] = content_type

    logger.info(f"Upload received: {filename}", extra=extra)


def log_upload_completed(
    logger: logging.Logger,
    doc_id: str,
    asset_id: str,
    event_slug: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log a successful upload.

    Args:
        logger: Logger instance
        doc_id: Created photo document ID (required)
        asset_id: Uploaded asset ID (required)
        event_slug: Optional event slug
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_completed",
        event_slug=event_slug,
        doc_id=doc_id,
        asset_id=asset_id,
        duration_ms=duration_ms,
        **kwargs
    )

    logger.info(f"Upload successful: {doc_id}", extra=extra)


def log_upload_rejected(
    logger: logging.Logger,
    reason: str,
    status_code: int,
    event_slug: Optional[str] = None,
    **kwargs
):
    """
    Log a client-side rejection (4xx). No traceback.

    Args:
        logger: Logger instance
        reason: Message returned to the caller
        status_code: HTTP status returned
        event_slug: Optional event slug
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_rejected",
        event_slug=event_slug,
        reason=reason,
        status_code=status_code,
        **kwargs
    )

    logger.warning(f"Upload rejected ({status_code}): {reason}", extra=extra)


def log_upload_failed(
    logger: logging.Logger,
    reason: str,
    error: Optional[str] = None,
    event_slug: Optional[str] = None,
    duration_ms: Optional[float] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log a server-side upload failure (5xx).

    The root cause goes to the log only; the caller gets a generic message.

    Args:
        logger: Logger instance
        reason: Failure category (form_parse, asset_upload, ...)
        error: Underlying error message
        event_slug: Optional event slug
        duration_ms: Optional duration in milliseconds
        include_traceback: Whether to include stack trace (default: True)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_failed",
        event_slug=event_slug,
        duration_ms=duration_ms,
        reason=reason,
        **kwargs
    )
    if error:
        extra["error"] = str(error)

    message = f"Upload failed: {reason}"
    if error:
        message += f" - {error}"

    _log_error(logger, message, extra, include_traceback)


# Content store event functions

def log_store_request(
    logger: logging.Logger,
    operation: str,
    duration_ms: Optional[float] = None,
    status_code: Optional[int] = None,
    **kwargs
):
    """
    Log a content store request.

    Args:
        logger: Logger instance
        operation: Operation name (fetch, upload_asset, create, delete)
        duration_ms: Optional duration in milliseconds
        status_code: Optional HTTP status from the store
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="store_request",
        duration_ms=duration_ms,
        operation=operation,
        **kwargs
    )
    if status_code is not None:
        extra["status_code"] = status_code

    logger.debug(f"Store request: sanity.{operation}", extra=extra)


def log_store_failure(
    logger: logging.Logger,
    operation: str,
    error: str,
    duration_ms: Optional[float] = None,
    status_code: Optional[int] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log a content store failure.

    Args:
        logger: Logger instance
        operation: Operation name (required)
        error: Error message (required)
        duration_ms: Optional duration in milliseconds
        status_code: Optional HTTP status from the store
        include_traceback: Whether to include stack trace (default: False)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="store_failure",
        duration_ms=duration_ms,
        operation=operation,
        error=str(error),
        **kwargs
    )
    if status_code is not None:
        extra["status_code"] = status_code

    _log_error(logger, f"Store failure: sanity.{operation} - {error}", extra, include_traceback)


# Convenience alias
def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
