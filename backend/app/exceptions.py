"""
Upload error taxonomy.

Each exception carries the HTTP status and the fixed message returned to
the caller as {"error": message}. Root causes are logged, never returned.
"""


class UploadError(Exception):
    """Base exception for a request that ends in the Failed state."""

    status_code = 500
    message = "Upload error"

    def __init__(self, message: str = None, status_code: int = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class FormParseError(UploadError):
    """Multipart body could not be parsed."""

    status_code = 500
    message = "Upload error"


class MissingFileError(UploadError):
    """No usable file part in the form."""

    status_code = 400
    message = "No file received"


class MissingEventSlugError(UploadError):
    """eventSlug absent or blank."""

    status_code = 400
    message = "Missing eventSlug"


class EventNotFoundError(UploadError):
    """No event document matches the given slug."""

    status_code = 404
    message = "Event not found for given slug"


class StoreOperationError(UploadError):
    """A call to the content store failed (lookup, asset upload or create)."""

    status_code = 500
    message = "Sanity upload failed"


class OriginNotAllowedError(UploadError):
    """Request Origin is outside the configured allowlist."""

    status_code = 403
    message = "Not allowed by CORS"
