"""
EmoteRegistry tests

Covers load/find/refresh behaviour:
- case-insensitive lookup
- degraded load when a set fails
- malformed records dropped
- last write wins on duplicate names
- cache miss falls back to scanning the loaded list
- empty names short-circuit
"""

from unittest.mock import Mock

import httpx
import pytest

from conftest import FakeSevenTVClient, emote_record, set_response, set_url
from emotes.registry import EmoteRegistry


def make_registry(sets, set_ids=None, clock=None, ttl=60.0, delays=None):
    client = FakeSevenTVClient(sets, delays=delays)
    ids = list(sets) if set_ids is None else set_ids
    return EmoteRegistry(ids, client, cache_ttl=ttl, clock=clock), client


# ============================================
# load_all
# ============================================

class TestLoadAll:

    @pytest.mark.asyncio
    async def test_merges_sets_in_configured_order(self):
        registry, client = make_registry(
            {
                "set-a": [emote_record("a1", "A1"), emote_record("a2", "A2")],
                "set-b": [emote_record("b1", "B1")],
            },
            # set-a finishes last; merge order must not follow completion order
            delays={"set-a": 0.05},
        )

        emotes = await registry.load_all()

        assert client.completed == ["set-b", "set-a"]
        assert [e.id for e in emotes] == ["a1", "a2", "b1"]
        assert [e.id for e in registry.all_emotes] == ["a1", "a2", "b1"]
        assert registry.is_ready

    @pytest.mark.asyncio
    async def test_fetches_sets_concurrently(self):
        registry, client = make_registry(
            {"set-a": [emote_record("a", "a")], "set-b": [emote_record("b", "b")]},
            delays={"set-a": 0.05, "set-b": 0.05},
        )

        await registry.load_all()

        # Both requests were in flight at the same time
        assert client.max_in_flight == 2
        assert sorted(client.completed) == ["set-a", "set-b"]

    @pytest.mark.asyncio
    async def test_no_sets_configured_returns_empty(self):
        registry, client = make_registry({}, set_ids=[])

        assert await registry.load_all() == []
        assert client.requested == []
        assert not registry.is_ready

    @pytest.mark.asyncio
    async def test_degraded_load_keeps_healthy_sets(self, make_client):
        client = make_client({
            set_url("set-a"): set_response(
                emote_record("1", "one"), emote_record("2", "two"), emote_record("3", "three"),
            ),
            set_url("set-b"): httpx.ConnectError("refused"),
        })
        registry = EmoteRegistry(["set-a", "set-b"], client)

        emotes = await registry.load_all()

        assert [e.id for e in emotes] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_malformed_record_dropped(self, make_client):
        client = make_client({
            set_url("set-a"): set_response(
                emote_record("1", "one"), emote_record(None, "broken"), emote_record("2", "two"),
            ),
        })
        registry = EmoteRegistry(["set-a"], client)

        emotes = await registry.load_all()

        assert [e.name for e in emotes] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_load_populates_name_index(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "KEKW")]})

        await registry.load_all()

        assert "kekw" in registry.by_name_cache

    @pytest.mark.asyncio
    async def test_unexpected_error_in_one_set_is_absorbed(self):
        class ExplodingClient(FakeSevenTVClient):
            async def fetch_emote_set(self, set_id):
                if set_id == "set-b":
                    raise RuntimeError("boom")
                return await super().fetch_emote_set(set_id)

        client = ExplodingClient({"set-a": [emote_record("1", "one")]})
        registry = EmoteRegistry(["set-a", "set-b"], client)

        emotes = await registry.load_all()

        assert [e.id for e in emotes] == ["1"]


# ============================================
# find
# ============================================

class TestFind:

    @pytest.mark.asyncio
    async def test_case_insensitive(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "PogChamp")]})
        await registry.load_all()

        for name in ("PogChamp", "pogchamp", "POGCHAMP", "  PogChamp  "):
            assert registry.find(name).id == "1"

    @pytest.mark.asyncio
    async def test_unknown_name(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "a")]})
        await registry.load_all()

        assert registry.find("missing") is None

    def test_uninitialized_registry_finds_nothing(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "a")]})

        assert registry.find("a") is None

    @pytest.mark.asyncio
    async def test_last_write_wins_on_collision(self):
        registry, _ = make_registry({
            "set-a": [emote_record("from-a", "X")],
            "set-b": [emote_record("from-b", "X")],
        })
        await registry.load_all()

        assert registry.find("x").id == "from-b"

    @pytest.mark.asyncio
    async def test_last_write_wins_survives_cache_flush(self):
        registry, _ = make_registry({
            "set-a": [emote_record("from-a", "X")],
            "set-b": [emote_record("from-b", "x")],
        })
        await registry.load_all()
        registry.by_name_cache.clear()

        assert registry.find("X").id == "from-b"

    @pytest.mark.asyncio
    async def test_scan_after_flush_repopulates_cache(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "KEKW")]})
        await registry.load_all()
        registry.by_name_cache.clear()

        assert "kekw" not in registry.by_name_cache
        assert registry.find("kekw").id == "1"
        assert "kekw" in registry.by_name_cache

    @pytest.mark.asyncio
    async def test_cache_hit_skips_scan(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "KEKW")]})
        await registry.load_all()
        registry._scan = Mock(wraps=registry._scan)

        assert registry.find("KEKW").id == "1"
        registry._scan.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_entry_falls_back_to_scan(self, clock):
        registry, _ = make_registry({"set-a": [emote_record("1", "KEKW")]}, clock=clock, ttl=10)
        await registry.load_all()
        registry._scan = Mock(wraps=registry._scan)

        clock.advance(11)

        assert registry.find("kekw").id == "1"
        registry._scan.assert_called_once_with("kekw")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   "])
    async def test_empty_name_short_circuits(self, name):
        registry, _ = make_registry({"set-a": [emote_record("1", "a")]})
        await registry.load_all()
        registry._scan = Mock(wraps=registry._scan)
        before = registry.by_name_cache.stats()

        assert registry.find(name) is None
        registry._scan.assert_not_called()
        assert registry.by_name_cache.stats() == before

    @pytest.mark.asyncio
    async def test_trailing_whitespace_in_stored_name_is_kept_apart(self):
        registry, _ = make_registry({
            "set-a": [emote_record("plain", "foo")],
            "set-b": [emote_record("padded", "foo ")],
        })
        await registry.load_all()

        assert "foo" in registry.by_name_cache
        assert "foo " in registry.by_name_cache
        assert registry.find("foo").id == "plain"

        registry.by_name_cache.clear()
        assert registry.find("FOO").id == "plain"


# ============================================
# refresh
# ============================================

class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_drops_removed_emotes(self):
        registry, client = make_registry({
            "set-a": [emote_record("1", "stays"), emote_record("2", "goes")],
        })
        await registry.load_all()

        client.sets["set-a"] = [emote_record("1", "stays")]
        emotes = await registry.refresh()

        assert [e.name for e in emotes] == ["stays"]
        assert registry.find("goes") is None

    @pytest.mark.asyncio
    async def test_refresh_builds_new_instances(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "a")]})
        await registry.load_all()
        before = registry.find("a")

        await registry.refresh()
        after = registry.find("a")

        assert after == before
        assert after is not before

    @pytest.mark.asyncio
    async def test_refresh_flushes_cache(self):
        registry, _ = make_registry({"set-a": [emote_record("1", "a")]}, set_ids=["set-a"])
        registry.by_name_cache.set("stale", object())

        await registry.refresh()

        assert "stale" not in registry.by_name_cache
        assert "a" in registry.by_name_cache


@pytest.mark.asyncio
async def test_stats():
    registry, _ = make_registry({"set-a": [emote_record("1", "a")]})
    await registry.load_all()

    stats = registry.stats()

    assert stats["ready"] is True
    assert stats["total_emotes"] == 1
    assert stats["emote_sets"] == 1
    assert stats["cache"]["live_entries"] == 1
