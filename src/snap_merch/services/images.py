"""Data URL helpers and Pillow-based image compression."""

import base64
import binascii
import logging
import re
from io import BytesIO

from PIL import Image, UnidentifiedImageError

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.*)$", re.DOTALL)

_logger = logging.getLogger(__name__)


def to_data_url(image_bytes: bytes, mime_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL."""
    resolved = mime_type or detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{resolved};base64,{encoded}"


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """Return the raw bytes and MIME type of a data URL.

    Bare base64 strings are accepted and treated as JPEG.
    """
    match = _DATA_URL.match(data_url.strip())
    if match is None:
        return base64.b64decode(data_url, validate=False), "image/jpeg"
    return base64.b64decode(match.group("data")), match.group("mime")


def is_data_url(value: str | None) -> bool:
    return bool(value) and value.startswith("data:")


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def compress_data_url(data_url: str, max_size: int = 1200, quality: int = 70) -> str:
    """Downscale to fit ``max_size`` and re-encode as JPEG.

    Returns the input unchanged when it cannot be decoded as an image.
    """
    try:
        raw, _ = decode_data_url(data_url)
        with Image.open(BytesIO(raw)) as image:
            image.load()
            scale = min(1.0, max_size / max(image.width, image.height))
            size = (
                max(1, round(image.width * scale)),
                max(1, round(image.height * scale)),
            )
            resized = image.convert("RGB").resize(size)
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError) as exc:
        _logger.debug("Image compression skipped: %s", exc)
        return data_url
    buffer = BytesIO()
    resized.save(buffer, format="JPEG", quality=quality)
    return to_data_url(buffer.getvalue(), "image/jpeg")


def create_thumbnail(data_url: str, max_size: int = 300) -> str:
    """Create a small JPEG thumbnail for dashboards."""
    return compress_data_url(data_url, max_size=max_size, quality=60)
