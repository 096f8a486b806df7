"""
Test fixtures for the emote service.

Upstream 7TV traffic never leaves the process: every test talks to an
httpx.MockTransport (or a FakeSevenTVClient for pure registry tests).
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from config import Settings
from emotes.upstream_client import SevenTVClient

API_BASE = "https://7tv.test/v3"
CDN_BASE = "https://cdn.7tv.test/emote"


# ============================================
# Helper Functions
# ============================================

def emote_record(
    emote_id: Optional[str],
    name: Optional[str],
    owner: Optional[str] = "someone",
    animated: Optional[bool] = False,
    tags: Optional[List[str]] = None,
    mime: Optional[str] = "image/webp",
) -> Dict[str, Any]:
    """Build a raw record shaped like the 7TV v3 emote-set payload."""
    record: Dict[str, Any] = {"data": {}}
    if emote_id is not None:
        record["id"] = emote_id
    if name is not None:
        record["name"] = name
    if owner is not None:
        record["owner"] = {"username": owner}
    if animated is not None:
        record["data"]["animated"] = animated
    if mime is not None:
        record["data"]["mime"] = mime
    if tags is not None:
        record["tags"] = tags
    return record


RouteResult = Union[httpx.Response, Exception, Callable[[httpx.Request], Any]]


def make_transport(routes: Dict[str, RouteResult], calls: Optional[List[str]] = None) -> httpx.MockTransport:
    """
    Build a mock transport keyed by full URL.

    Values may be a Response, an exception to raise, or a (possibly async)
    callable receiving the request. Unknown URLs answer 404.
    """
    async def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        result = routes.get(url)
        if result is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(request)
            if asyncio.iscoroutine(result):
                result = await result
        return result

    return httpx.MockTransport(handler)


def set_url(set_id: str) -> str:
    return f"{API_BASE}/emote-sets/{set_id}"


def set_response(*records: Dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json={"id": "x", "name": "set", "emotes": list(records)})


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSevenTVClient:
    """
    Stand-in for SevenTVClient: returns canned records per set id, with
    optional per-set delays to shuffle completion order.
    """

    def __init__(self, sets: Dict[str, List[Dict[str, Any]]], delays: Optional[Dict[str, float]] = None):
        self.sets = sets
        self.delays = delays or {}
        self.requested: List[str] = []
        self.completed: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_emote_set(self, set_id: str) -> List[Dict[str, Any]]:
        self.requested.append(set_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(set_id, 0))
        finally:
            self.in_flight -= 1
        self.completed.append(set_id)
        return list(self.sets.get(set_id, []))


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        emote_set_ids=("set-a", "set-b"),
        cache_ttl=60.0,
        cache_check_period=0,
        upstream_timeout=5.0,
        api_base_url=API_BASE,
        cdn_base_url=CDN_BASE,
        environment="test",
    )


@pytest.fixture
def make_client():
    """
    Factory for SevenTVClient instances backed by a mock transport.
    Mock transports hold no sockets, so nothing needs closing.
    """

    def _make(routes: Dict[str, RouteResult], calls: Optional[List[str]] = None) -> SevenTVClient:
        http_client = httpx.AsyncClient(transport=make_transport(routes, calls))
        client = SevenTVClient(API_BASE, CDN_BASE, http_client=http_client)
        return client

    return _make
