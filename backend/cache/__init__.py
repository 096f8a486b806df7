"""
Memory Cache Module

In-memory TTL store used as the emote name index, plus its
inspection routes.
"""

from .memory_store import TTLStore, CacheEntry

__all__ = [
    "TTLStore",
    "CacheEntry",
]
