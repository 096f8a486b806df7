"""
7TV Upstream Client

HTTP access to the 7TV metadata API and its image CDN.

Failure policy:
- Emote set fetches degrade to an empty list (one bad set must not
  block the others)
- Image fetches raise ImageFetchError (there is nothing to fall back to)
"""

import logging
from typing import Any, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from .models import (
    CONTENT_TYPES,
    DEFAULT_FORMAT,
    DEFAULT_SIZE,
    IMAGE_FORMATS,
    IMAGE_SIZES,
    SevenTVEmoteSet,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "emote-on-demand/1.0",
    "Accept": "application/json, image/*;q=0.9, */*;q=0.8",
}


class ImageFetchError(Exception):
    """Image bytes could not be retrieved from the CDN."""

    def __init__(self, message: str, status_code: int = 502, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


def content_type_for(format: str) -> str:
    """Map an image format to its MIME type."""
    try:
        return CONTENT_TYPES[format]
    except KeyError:
        raise ValueError(f"Unsupported image format: {format!r}") from None


def build_image_url(
    cdn_base_url: str,
    emote_id: str,
    size: str = DEFAULT_SIZE,
    format: str = DEFAULT_FORMAT,
) -> str:
    """
    Build `{cdn_base}/{emote_id}/{size}.{format}`.

    Raises:
        ValueError: on an empty id or an unsupported size/format
    """
    if not emote_id:
        raise ValueError("Emote id must not be empty")
    if size not in IMAGE_SIZES:
        raise ValueError(f"Unsupported image size: {size!r}")
    if format not in IMAGE_FORMATS:
        raise ValueError(f"Unsupported image format: {format!r}")
    return f"{cdn_base_url}/{emote_id}/{size}.{format}"


class SevenTVClient:
    """
    Async client for the 7TV API and CDN.

    Usage:
        client = SevenTVClient(api_base_url, cdn_base_url, timeout=10)
        records = await client.fetch_emote_set("01F...")
        data, content_type = await client.fetch_image(emote_id)
        await client.close()
    """

    def __init__(
        self,
        api_base_url: str,
        cdn_base_url: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.cdn_base_url = cdn_base_url.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()

    def image_url(self, emote_id: str, size: str = DEFAULT_SIZE, format: str = DEFAULT_FORMAT) -> str:
        return build_image_url(self.cdn_base_url, emote_id, size, format)

    async def fetch_emote_set(self, set_id: str) -> List[Any]:
        """
        Fetch the raw emote records of one set.

        Returns:
            The records in upstream order, or [] on any failure.
        """
        if not set_id:
            logger.error("[SevenTV] Empty emote set id")
            return []

        url = f"{self.api_base_url}/emote-sets/{set_id}"
        try:
            response = await self.http_client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            logger.error(f"[SevenTV] Timeout fetching emote set {set_id}")
            return []
        except httpx.HTTPStatusError as e:
            logger.error(f"[SevenTV] HTTP error {e.response.status_code} fetching emote set {set_id}")
            return []
        except httpx.HTTPError as e:
            logger.error(f"[SevenTV] Failed to fetch emote set {set_id}: {e}")
            return []
        except ValueError as e:
            logger.error(f"[SevenTV] Emote set {set_id} returned invalid JSON: {e}")
            return []

        try:
            emote_set = SevenTVEmoteSet.model_validate(payload)
        except ValidationError as e:
            logger.error(f"[SevenTV] Unexpected response shape for emote set {set_id}: {e}")
            return []

        records = emote_set.emotes or []
        logger.info(f"[SevenTV] Emote set {set_id}: {len(records)} records")
        return records

    async def fetch_image(
        self,
        emote_id: str,
        size: str = DEFAULT_SIZE,
        format: str = DEFAULT_FORMAT,
    ) -> Tuple[bytes, str]:
        """
        Fetch image bytes from the CDN.

        Returns:
            Tuple of (image_data, content_type)

        Raises:
            ValueError: invalid size/format (before any request)
            ImageFetchError: timeout, non-2xx status or transport failure
        """
        url = self.image_url(emote_id, size, format)
        content_type = content_type_for(format)

        try:
            logger.debug(f"[SevenTV] Fetching image: {url}")
            response = await self.http_client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"[SevenTV] Image timeout: {url}")
            raise ImageFetchError("Image fetch timeout", status_code=504, url=url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"[SevenTV] Image HTTP error {status}: {url}")
            raise ImageFetchError(f"Failed to fetch image: {status}", status_code=status, url=url)
        except httpx.HTTPError as e:
            logger.error(f"[SevenTV] Image fetch error: {e}")
            raise ImageFetchError(f"Failed to fetch image: {e}", status_code=502, url=url) from e

        return response.content, content_type
