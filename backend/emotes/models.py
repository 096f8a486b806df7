"""
Emote Data Models

Contains:
- SevenTVEmote / SevenTVEmoteSet: upstream payload shapes (validate or reject)
- Emote: internal immutable representation
- Response models served by the HTTP routes
"""

from typing import Any, Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ImageSize = Literal["1x", "2x", "3x", "4x"]
ImageFormat = Literal["webp", "avif", "gif"]

IMAGE_SIZES = ("1x", "2x", "3x", "4x")
IMAGE_FORMATS = ("webp", "avif", "gif")

DEFAULT_SIZE: ImageSize = "3x"
DEFAULT_FORMAT: ImageFormat = "webp"

CONTENT_TYPES: Dict[str, str] = {
    "webp": "image/webp",
    "avif": "image/avif",
    "gif": "image/gif",
}

UNKNOWN_OWNER = "unknown"


# ==================== Upstream Models ====================

class SevenTVOwner(BaseModel):
    """Uploader account as reported by 7TV"""
    username: Optional[str] = None


class SevenTVEmoteData(BaseModel):
    """Nested emote data block (file metadata)"""
    mime: Optional[str] = None
    animated: Optional[bool] = None


class SevenTVEmote(BaseModel):
    """
    One record of an emote set, as returned by the 7TV v3 API.
    Unknown fields are ignored.
    """
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    owner: Optional[SevenTVOwner] = None
    visibility: Optional[int] = None
    data: Optional[SevenTVEmoteData] = None
    tags: Optional[List[str]] = None


class SevenTVEmoteSet(BaseModel):
    """
    Emote set envelope. Records stay raw here: each one is validated on its
    own so that one bad record does not reject the whole set.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    emotes: Optional[List[Any]] = None


# ==================== Internal Models ====================

class Emote(BaseModel):
    """
    Canonical emote. Immutable once built; a refresh creates new instances.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    owner: str = UNKNOWN_OWNER
    tags: FrozenSet[str] = frozenset()
    animated: bool = False
    mime: Optional[str] = None
    visibility: Optional[int] = None

    @property
    def lookup_key(self) -> str:
        return self.name.lower()


# ==================== Response Models ====================

class EmoteSummary(BaseModel):
    """Single item of the list endpoint"""
    name: str
    id: str
    owner: str
    animated: bool
    url: str


class EmoteListResponse(BaseModel):
    """Response model for GET /api/emotes"""
    count: int
    emotes: List[EmoteSummary]


class EmoteDetailResponse(BaseModel):
    """Response model for GET /api/emote/{name}"""
    name: str
    id: str
    owner: str
    animated: bool
    urls: Dict[str, str]


class RefreshResponse(BaseModel):
    """Response model for POST /api/emotes/refresh"""
    success: bool
    count: int
