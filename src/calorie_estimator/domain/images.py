"""Image payloads handed to dish analysis."""

import base64
from dataclasses import dataclass

ACCEPTED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/heic",
        "image/heif",
    }
)


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes plus the MIME type reported by the source."""

    data: bytes
    mime_type: str

    def to_base64(self) -> str:
        """Return the payload as a base64 string."""
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        """Return the payload as a base64 data URL."""
        return f"data:{self.mime_type};base64,{self.to_base64()}"
