"""
Emotes Module

Resolves 7TV emotes by name and proxies their images.

Features:
- Concurrent load of every configured emote set
- Case-insensitive name index with TTL expiry
- Image passthrough from the 7TV CDN in webp / avif / gif
"""

from .models import Emote
from .normalizer import normalize, MalformedEmoteError
from .registry import EmoteRegistry
from .resolver import ImageResolver, ResolvedImage
from .upstream_client import SevenTVClient, ImageFetchError, build_image_url

__all__ = [
    "Emote",
    "normalize",
    "MalformedEmoteError",
    "EmoteRegistry",
    "ImageResolver",
    "ResolvedImage",
    "SevenTVClient",
    "ImageFetchError",
    "build_image_url",
]
