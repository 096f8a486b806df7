"""
Emote API Routes

Provides endpoints for:
- Listing loaded emotes and emote details (JSON)
- Refreshing the registry from 7TV
- Serving emote images by name (webp / avif / gif)
- Open Graph preview pages for browsers and chat unfurlers
"""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, Response

from .dependencies import get_registry, get_resolver
from .models import (
    DEFAULT_FORMAT,
    DEFAULT_SIZE,
    IMAGE_FORMATS,
    IMAGE_SIZES,
    Emote,
    EmoteDetailResponse,
    EmoteListResponse,
    EmoteSummary,
    RefreshResponse,
)
from .pages import render_index_page, render_preview_page
from .registry import EmoteRegistry
from .resolver import ImageResolver
from .upstream_client import ImageFetchError

logger = logging.getLogger(__name__)

# ============================================
# Routers
# ============================================

# JSON API; must be included before image_router, whose /{emote_path}
# would otherwise shadow it
api_router = APIRouter(prefix="/api", tags=["Emotes"])

image_router = APIRouter(tags=["Emote Images"])


def _require_emote(registry: EmoteRegistry, emote_name: str) -> Emote:
    if not emote_name or not emote_name.strip():
        raise HTTPException(status_code=400, detail="Emote name not provided")
    emote = registry.find(emote_name)
    if emote is None:
        raise HTTPException(status_code=404, detail="Emote not found")
    return emote


def split_extension(emote_path: str) -> Tuple[str, Optional[str]]:
    """
    Split "name.gif" into ("name", "gif"). Only known image formats count
    as extensions; anything else stays part of the name.
    """
    stem, dot, ext = emote_path.rpartition(".")
    if dot and stem and ext.lower() in IMAGE_FORMATS:
        return stem, ext.lower()
    return emote_path, None


# ============================================
# API Endpoints
# ============================================

@api_router.get("/emotes", response_model=EmoteListResponse)
async def list_emotes(
    registry: EmoteRegistry = Depends(get_registry),
    resolver: ImageResolver = Depends(get_resolver),
):
    """
    List every emote, reloading all configured sets from 7TV first.

    Each item carries the default (3x webp) CDN url.
    """
    emotes = await registry.load_all()
    return EmoteListResponse(
        count=len(emotes),
        emotes=[
            EmoteSummary(
                name=e.name,
                id=e.id,
                owner=e.owner,
                animated=e.animated,
                url=resolver.url_for(e.id),
            )
            for e in emotes
        ],
    )


@api_router.post("/emotes/refresh", response_model=RefreshResponse)
async def refresh_emotes(registry: EmoteRegistry = Depends(get_registry)):
    """
    Flush the name index and reload all configured emote sets.
    """
    emotes = await registry.refresh()
    return RefreshResponse(success=True, count=len(emotes))


@api_router.get("/emotes/health")
async def health_check(registry: EmoteRegistry = Depends(get_registry)):
    """Health check endpoint."""
    return {
        "status": "healthy" if registry.is_ready else "starting",
        "service": "emote-on-demand",
        "registry": registry.stats(),
    }


@api_router.get("/emote/{emote_name}", response_model=EmoteDetailResponse)
async def get_emote(
    emote_name: str,
    registry: EmoteRegistry = Depends(get_registry),
    resolver: ImageResolver = Depends(get_resolver),
):
    """
    Get one emote's metadata with CDN urls for every size.
    """
    emote = _require_emote(registry, emote_name)
    return EmoteDetailResponse(
        name=emote.name,
        id=emote.id,
        owner=emote.owner,
        animated=emote.animated,
        urls={size: resolver.url_for(emote.id, size) for size in IMAGE_SIZES},
    )


# ============================================
# Image Endpoints
# ============================================

@image_router.get("/", response_class=HTMLResponse)
async def index():
    return HTMLResponse(render_index_page())


async def serve_emote_image(
    registry: EmoteRegistry,
    resolver: ImageResolver,
    emote_name: str,
    size: str,
    format: str,
) -> Response:
    """Look up an emote and proxy its image bytes."""
    if size not in IMAGE_SIZES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid size: {size}. Use: {', '.join(IMAGE_SIZES)}",
        )
    if format not in IMAGE_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid format: {format}. Use: {', '.join(IMAGE_FORMATS)}",
        )

    emote = _require_emote(registry, emote_name)

    try:
        image = await resolver.resolve(emote.id, size, format)
    except ImageFetchError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    logger.info(f"[EmoteRoutes] Served {emote.name} ({size}.{format}, {image.size_bytes} bytes)")

    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={"Content-Length": str(image.size_bytes)},
    )


@image_router.get("/{emote_path}")
async def get_emote_image(
    request: Request,
    emote_path: str,
    size: str = Query(DEFAULT_SIZE, description="Image size: 1x, 2x, 3x, 4x"),
    format: Optional[str] = Query(None, description="Image format: webp, avif, gif"),
    registry: EmoteRegistry = Depends(get_registry),
    resolver: ImageResolver = Depends(get_resolver),
):
    """
    Serve an emote by name.

    Examples:
        GET /KEKW            -> image (or preview page for browsers)
        GET /KEKW.gif        -> GIF
        GET /KEKW?size=1x&format=avif
    """
    emote_name, ext = split_extension(emote_path)

    if ext is not None:
        return await serve_emote_image(registry, resolver, emote_name, size, ext)

    accept = request.headers.get("accept", "")
    if "text/html" in accept:
        emote = _require_emote(registry, emote_name)
        html = render_preview_page(emote_name, str(request.base_url), emote.animated)
        return HTMLResponse(html)

    return await serve_emote_image(registry, resolver, emote_name, size, format or DEFAULT_FORMAT)
