from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any

from ..core.constants import MAX_PHOTO_BASE64_LENGTH, MAX_PHOTO_BYTES, PHOTO_DATA_URL_PREFIX
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class PhotoPayload:
    """A validated ``data:image/...;base64,`` photo."""

    data_url: str
    content: bytes
    mime_type: str

    @property
    def base64_body(self) -> str:
        return self.data_url.split(",", 1)[1]


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is invalid")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if n <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return n


def require_number(value: Any, field_name: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def validate_coordinates(latitude: Any, longitude: Any) -> Coordinates:
    """Shared by check-in, check-out and office settings updates."""
    lat = require_number(latitude, "latitude")
    lon = require_number(longitude, "longitude")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise ValidationError("Invalid GPS coordinates")
    return Coordinates(latitude=lat, longitude=lon)


def validate_photo_payload(value: Any) -> PhotoPayload:
    """Shared by check-in, check-out and face enrollment."""
    if not value or not isinstance(value, str):
        raise ValidationError("photo is required")
    if len(value) > MAX_PHOTO_BASE64_LENGTH:
        raise ValidationError("Photo is too large (max 5MB)")
    if not value.startswith(PHOTO_DATA_URL_PREFIX) or ";base64," not in value:
        raise ValidationError("Invalid photo format")

    header, body = value.split(",", 1)
    mime_type = header[len("data:"):].split(";", 1)[0]
    try:
        content = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid photo encoding")
    if not content:
        raise ValidationError("photo is required")
    if len(content) > MAX_PHOTO_BYTES:
        raise ValidationError("Photo is too large (max 5MB)")

    return PhotoPayload(data_url=value, content=content, mime_type=mime_type)
