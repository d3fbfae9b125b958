"""
Utility functions for the ownership certificate service.

Provides base64 decoding of uploaded artifact images and response
header and timestamp helpers.
"""

import base64
import binascii
import re
from datetime import datetime, timezone

_DATA_URL_PREFIX = re.compile(r"^data:[\w/+.-]+;base64,", re.IGNORECASE)


def b64e(b: bytes) -> str:
    """Base64 encode bytes to string."""
    return base64.b64encode(b).decode('ascii')


def decode_image_base64(s: str) -> bytes:
    """
    Decode an uploaded image from base64, accepting a data: URL prefix.

    Raises:
        ValueError: if s is not valid base64 or decodes to nothing
    """
    payload = _DATA_URL_PREFIX.sub("", s.strip())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 image data: {e}") from e
    if not data:
        raise ValueError("image data is empty")
    return data


def no_store_headers() -> dict:
    """Headers that keep certificate downloads out of caches."""
    return {
        "Cache-Control": "private, no-cache, no-store, must-revalidate",
        "Pragma": "no-cache",
        "Expires": "0",
    }


def iso_ms(moment: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with milliseconds, e.g. 2026-10-18T09:30:00.123Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f"{moment.microsecond // 1000:03d}Z"
