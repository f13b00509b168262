"""Remote image download client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from calorie_estimator.domain.errors import InvalidInputError
from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.services.images import from_bytes


class ImageFetcher(Protocol):
    """Interface for downloading images by URL."""

    async def fetch(self, url: str) -> ImagePayload:
        """Download an image and return its payload."""


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Image fetcher using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxImageFetcher":
        """Create an image fetcher with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(follow_redirects=True))

    async def fetch(self, url: str) -> ImagePayload:
        """Download image bytes and use the response content type."""
        try:
            response = await self.http_client.get(url, timeout=20)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise InvalidInputError(f"Failed to download the image: {exc}") from exc
        return from_bytes(response.content, response.headers.get("content-type"))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
