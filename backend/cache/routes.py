"""
Cache API Routes

Inspection endpoints for the emote name index:
- GET  /api/cache/stats     - Name index statistics
- POST /api/cache/clear     - Flush the name index (emote list untouched)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from emotes.dependencies import get_registry
from emotes.registry import EmoteRegistry

router = APIRouter(prefix="/api/cache", tags=["cache"])


# ============================================
# Response Models
# ============================================

class CacheStatsResponse(BaseModel):
    """Response model for stats endpoint"""
    total_entries: int
    live_entries: int
    hits: int
    misses: int
    default_ttl_seconds: float


class CacheClearResponse(BaseModel):
    """Response model for clear endpoint"""
    success: bool
    message: str
    deleted_count: int


# ============================================
# API Endpoints
# ============================================

@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(registry: EmoteRegistry = Depends(get_registry)):
    """
    Get name index statistics
    """
    return CacheStatsResponse(**registry.by_name_cache.stats())


@router.post("/clear", response_model=CacheClearResponse)
async def clear_cache(registry: EmoteRegistry = Depends(get_registry)):
    """
    Clear the name index

    Lookups keep working: they fall back to scanning the loaded emote
    list and repopulate the index as they go.
    """
    count = registry.by_name_cache.clear()
    return CacheClearResponse(
        success=True,
        message=f"Cleared {count} cache entries",
        deleted_count=count,
    )
