"""
Emote Registry

Holds every emote loaded from the configured 7TV sets plus a name index
with time-based expiry.

- all_emotes is authoritative; it is replaced wholesale on each load
- the name index is a read-through accelerator; a miss falls back to a
  linear scan of all_emotes
- find() never blocks behind a load: readers see whichever list was
  assigned last
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from cache.memory_store import TTLStore

from .models import Emote
from .normalizer import normalize_many
from .upstream_client import SevenTVClient

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    return name.strip().lower()


class EmoteRegistry:
    """
    Single owner of the loaded emote list and its name index.

    Usage:
        registry = EmoteRegistry(["set-a", "set-b"], client, cache_ttl=3600)
        await registry.load_all()
        emote = registry.find("KEKW")
    """

    def __init__(
        self,
        set_ids: Sequence[str],
        client: SevenTVClient,
        cache_ttl: float = 3600.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.set_ids = [s for s in set_ids if s]
        self.client = client
        self.by_name_cache: TTLStore[Emote] = TTLStore(default_ttl=cache_ttl, clock=clock)

        self._all_emotes: List[Emote] = []
        self._loaded_at: Optional[float] = None
        self._clock = clock or time.time

    @property
    def all_emotes(self) -> List[Emote]:
        """Copy of the current emote list, in load order."""
        return list(self._all_emotes)

    @property
    def is_ready(self) -> bool:
        """False until the first load_all() completes."""
        return self._loaded_at is not None

    async def _fetch_set(self, set_id: str) -> List[Emote]:
        records = await self.client.fetch_emote_set(set_id)
        return normalize_many(records, source=set_id)

    async def load_all(self) -> List[Emote]:
        """
        Fetch every configured set concurrently and rebuild the registry.

        Returns:
            The merged emote list (set order, then upstream order).
        """
        if not self.set_ids:
            logger.warning("[Registry] No emote sets configured. Set EMOTE_SET_IDS in the environment")
            return []

        logger.info(f"[Registry] Fetching emotes from {len(self.set_ids)} emote sets...")

        results = await asyncio.gather(
            *(self._fetch_set(set_id) for set_id in self.set_ids),
            return_exceptions=True,
        )

        # gather keeps argument order, so the merge follows set order
        # regardless of which fetch finished first
        merged: List[Emote] = []
        for set_id, result in zip(self.set_ids, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"[Registry] Emote set {set_id} failed: {result}")
                continue
            merged.extend(result)

        self._all_emotes = merged
        self._loaded_at = self._clock()

        for emote in merged:
            self.by_name_cache.set(emote.lookup_key, emote)

        logger.info(f"[Registry] Loaded {len(merged)} emotes into the cache")
        return list(merged)

    async def refresh(self) -> List[Emote]:
        """Flush the name index, then reload everything."""
        flushed = self.by_name_cache.clear()
        logger.info(f"[Registry] Refresh requested, flushed {flushed} cached names")
        return await self.load_all()

    def _scan(self, key: str) -> Optional[Emote]:
        # Last match wins, consistent with the eager fill in load_all()
        match = None
        for emote in self._all_emotes:
            if emote.lookup_key == key:
                match = emote
        return match

    def find(self, name: str) -> Optional[Emote]:
        """
        Look up an emote by name, case-insensitively.

        Returns:
            The Emote, or None when unknown (never raises).
        """
        if not name:
            return None
        key = normalize_name(name)
        if not key:
            return None

        cached = self.by_name_cache.get(key)
        if cached is not None:
            logger.debug(f"[Registry] Cache hit: {key}")
            return cached

        emote = self._scan(key)
        if emote is not None:
            self.by_name_cache.set(key, emote)
        return emote

    def stats(self) -> Dict[str, Any]:
        """Registry and name index statistics."""
        return {
            "ready": self.is_ready,
            "total_emotes": len(self._all_emotes),
            "emote_sets": len(self.set_ids),
            "loaded_at": self._loaded_at,
            "cache": self.by_name_cache.stats(),
        }
