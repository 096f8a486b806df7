"""
Image Resolver

Turns (emote id, size, format) into image bytes. No byte caching here:
the HTTP layer's Cache-Control headers let the CDN in front do that.
"""

from dataclasses import dataclass

from .models import DEFAULT_FORMAT, DEFAULT_SIZE
from .upstream_client import SevenTVClient


@dataclass(frozen=True)
class ResolvedImage:
    """Image bytes plus the metadata needed to serve them."""
    data: bytes
    content_type: str
    url: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class ImageResolver:
    def __init__(self, client: SevenTVClient):
        self.client = client

    def url_for(self, emote_id: str, size: str = DEFAULT_SIZE, format: str = DEFAULT_FORMAT) -> str:
        return self.client.image_url(emote_id, size, format)

    async def resolve(
        self,
        emote_id: str,
        size: str = DEFAULT_SIZE,
        format: str = DEFAULT_FORMAT,
    ) -> ResolvedImage:
        """Fetch an emote image. Errors from the client propagate unchanged."""
        url = self.url_for(emote_id, size, format)
        data, content_type = await self.client.fetch_image(emote_id, size, format)
        return ResolvedImage(data=data, content_type=content_type, url=url)
