"""
Capture time extraction from embedded EXIF metadata.

EXIF stores DateTimeOriginal as "YYYY:MM:DD HH:MM:SS" with no zone. When
OffsetTimeOriginal ("+02:00") is present it is used to convert to UTC,
otherwise the wall-clock value is taken as UTC. Years before 1900 and
values the offset pushes out of range count as unreadable.

JPEG, TIFF, PNG, WebP and HEIC/HEIF (through pillow-heif) are read.

Anything that prevents reading a capture time (not an image, no EXIF,
malformed value) falls back to the current time. This is never an error.
"""
import io
import logging
from datetime import datetime, timezone
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

# HEIC/HEIF is the default iPhone format
register_heif_opener()

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769
DATETIME_ORIGINAL = 0x9003  # 36867
OFFSET_TIME_ORIGINAL = 0x9011  # 36881

EXIF_DATETIME_FORMATS = (
    "%Y:%m:%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
)

# Earlier values are camera placeholders, not capture times
MIN_CAPTURE_YEAR = 1900


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_utc(value: datetime) -> str:
    """Render as UTC ISO-8601 with second precision, e.g. 2023-08-01T10:00:00Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return f"{value.year:04d}-" + value.strftime("%m-%dT%H:%M:%SZ")


def _decode(value) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None
    # EXIF ASCII values are NUL-terminated in some writers
    value = value.strip().rstrip("\x00").strip()
    return value or None


def parse_exif_datetime(raw, offset=None) -> Optional[datetime]:
    """
    Parse an EXIF datetime string into an aware UTC datetime.

    Args:
        raw: DateTimeOriginal value (str or bytes)
        offset: Optional OffsetTimeOriginal value like "+02:00"

    Returns:
        Aware datetime in UTC, or None if the value is unusable
    """
    text = _decode(raw)
    if not text:
        return None

    parsed = None
    for fmt in EXIF_DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text[:19], fmt)
            break
        except ValueError:
            continue
    if parsed is None or parsed.year < MIN_CAPTURE_YEAR:
        return None

    tz = timezone.utc
    offset_text = _decode(offset)
    if offset_text:
        try:
            tz = datetime.strptime(offset_text, "%z").tzinfo
        except ValueError:
            logger.debug(f"Ignoring malformed OffsetTimeOriginal: {offset_text!r}")

    try:
        return parsed.replace(tzinfo=tz).astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offset pushes the value outside the datetime range
        logger.debug(f"Capture time out of range: {text!r} {offset_text!r}")
        return None


def read_capture_time(data: bytes) -> Optional[datetime]:
    """
    Read DateTimeOriginal from image bytes.

    Looks in the Exif sub-IFD first, then IFD0 (some writers put it there).

    Returns:
        Aware UTC datetime, or None if absent or unreadable
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            exif = image.getexif()
            exif_ifd = exif.get_ifd(EXIF_IFD_POINTER)
    except UnidentifiedImageError:
        logger.debug("Upload is not a recognised image, no EXIF")
        return None
    except Exception as e:
        # Corrupt EXIF surfaces as struct.error, SyntaxError, KeyError, ...
        logger.debug(f"No readable EXIF: {e}")
        return None

    for ifd in (exif_ifd, exif):
        raw = ifd.get(DATETIME_ORIGINAL)
        if raw is not None:
            return parse_exif_datetime(raw, ifd.get(OFFSET_TIME_ORIGINAL))
    return None


def extract_taken_at(data: bytes, now: Optional[datetime] = None) -> str:
    """
    Capture timestamp for a photo, falling back to the current time.

    Args:
        data: Full file content
        now: Fallback time (defaults to the current UTC time)

    Returns:
        UTC ISO-8601 string
    """
    captured = read_capture_time(data)
    if captured is None:
        captured = now or utc_now()
    return to_iso_utc(captured)
