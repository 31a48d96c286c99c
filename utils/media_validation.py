"""Validation and decoding helpers for uploaded images."""

import base64

from models.errors import UploadValidationError
from utils.config import DEFAULT_MAX_UPLOAD_BYTES

INVALID_TYPE_MESSAGE = "Please upload a valid image file (PNG, JPG, JPEG)."
TOO_LARGE_MESSAGE = "Image size too large. Please upload an image under 5MB."


def validate_image_upload(content_type: str | None, size: int, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
    """Reject uploads that are not images or that reach the size limit.

    Raises:
        UploadValidationError: 415 for a non-image type, 413 for an oversized file.
    """
    declared = (content_type or "").lower().split(";", 1)[0].strip()
    if not declared.startswith("image/"):
        raise UploadValidationError(INVALID_TYPE_MESSAGE, status_code=415)
    if size >= max_bytes:
        raise UploadValidationError(TOO_LARGE_MESSAGE, status_code=413)


def to_data_url(image_bytes: bytes, content_type: str) -> str:
    """Encode raw image bytes as a display-ready data URL."""
    if not image_bytes:
        raise ValueError("Uploaded image is empty.")
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def split_data_url(data_url: str) -> tuple[str, str]:
    """Return `(mime_type, base64_payload)` for a `data:` URL."""
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Image must be a base64 data URL.")
    header, payload = data_url.split(",", 1)
    mime_type = header[len("data:"):].split(";", 1)[0] or "image/png"
    return mime_type, payload
