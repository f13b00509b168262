"""Image acquisition helpers for the upload, picker and file sources."""

import base64
import binascii
import logging
import re
from pathlib import Path

from calorie_estimator.domain.errors import InvalidInputError
from calorie_estimator.domain.images import ACCEPTED_MIME_TYPES, ImagePayload

_logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<data>.*)$", re.DOTALL
)
_DEFAULT_MIME_TYPE = "image/jpeg"
_UNKNOWN_MIME_TYPE = "application/octet-stream"
_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".heic": "image/heic",
    ".heif": "image/heif",
}


def from_bytes(data: bytes, mime_type: str | None = None) -> ImagePayload:
    """Wrap raw bytes, sniffing the MIME type when the source gives none."""
    if not data:
        raise InvalidInputError("Image payload is empty.")
    resolved = (mime_type or "").split(";")[0].strip().lower()
    if not resolved or resolved == _UNKNOWN_MIME_TYPE:
        resolved = detect_mime_type(data)
    _warn_if_unaccepted(resolved)
    return ImagePayload(data=data, mime_type=resolved)


def from_data_url(url: str) -> ImagePayload:
    """Parse a ``data:<mime>;base64,<payload>`` URL as produced by a file reader."""
    match = _DATA_URL_PATTERN.match(url.strip())
    if match is None:
        raise InvalidInputError("Image data URL is malformed.")
    if ";base64" not in match.group("params"):
        raise InvalidInputError("Image data URL must be base64 encoded.")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError("Image data URL is not valid base64.") from exc
    if not data:
        raise InvalidInputError("Image payload is empty.")
    mime_type = match.group("mime") or _UNKNOWN_MIME_TYPE
    _warn_if_unaccepted(mime_type)
    return ImagePayload(data=data, mime_type=mime_type)


def from_path(path: Path) -> ImagePayload:
    """Read an image file from disk."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InvalidInputError(f"Failed to read the image file: {path}") from exc
    return from_bytes(data, _EXTENSION_MIME_TYPES.get(path.suffix.lower()))


def detect_mime_type(data: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    if data[4:8] == b"ftyp" and data[8:12] in {b"heic", b"heix", b"mif1"}:
        return "image/heic"
    return _DEFAULT_MIME_TYPE


def _warn_if_unaccepted(mime_type: str) -> None:
    if mime_type not in ACCEPTED_MIME_TYPES:
        _logger.warning("Image MIME type %s is not a known image type", mime_type)
