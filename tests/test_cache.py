"""Tests for the two-tier NavigationCache."""

import asyncio
import json
import logging
import os
import time

import pytest

from navsync.cache import NavigationCache
from navsync.errors import ErrorCode, NavsyncError


def make_cache(project, **overrides) -> NavigationCache:
    return NavigationCache(project.context(**overrides))


class TestPrebuild:
    """Tests for prebuild() and get_sync()."""

    def test_get_sync_before_prebuild(self, guide_project) -> None:
        """Test synchronous reads require a completed prebuild."""
        cache = make_cache(guide_project)

        with pytest.raises(NavsyncError) as exc_info:
            cache.get_sync("en")

        assert exc_info.value.code == ErrorCode.NOT_PREBUILT

    def test_get_sync_unknown_language(self, guide_project) -> None:
        """Test an unconfigured language is rejected before the prebuild check."""
        cache = make_cache(guide_project)

        with pytest.raises(NavsyncError) as exc_info:
            cache.get_sync("fr")

        assert exc_info.value.code == ErrorCode.LANGUAGE_NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_prebuild_then_get_sync(self, guide_project) -> None:
        """Test prebuilt data is served from memory and written to disk."""
        cache = make_cache(guide_project)

        results = await cache.prebuild()
        route_map = cache.get_sync("en")

        assert route_map is results["en"]
        assert set(route_map) == {"/en/", "/en/guide/"}
        snapshot = json.loads(cache.snapshot_path("en").read_text(encoding="utf-8"))
        assert snapshot["/en/guide/"][0]["text"] == "Guide"
        assert cache.snapshot_path("en").name == "sidebar_en.json"

    @pytest.mark.asyncio
    async def test_prebuild_rejects_unknown_language(self, guide_project) -> None:
        """Test prebuild validates languages before generating."""
        cache = make_cache(guide_project)

        with pytest.raises(NavsyncError) as exc_info:
            await cache.prebuild(["fr"])

        assert exc_info.value.code == ErrorCode.LANGUAGE_NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_snapshot_served_after_memory_loss(self, guide_project) -> None:
        """Test a fresh file snapshot backs the memory tier."""
        cache = make_cache(guide_project)
        await cache.prebuild()
        cache._memory.clear()

        route_map = cache.get_sync("en")

        assert [item.text for item in route_map["/en/"]] == ["Guide"]
        assert cache.is_generating("en") is False

    @pytest.mark.asyncio
    async def test_stale_data_served_while_regenerating(self, guide_project) -> None:
        """Test expired data is returned and a background pass is scheduled."""
        cache = make_cache(guide_project, cache_ttl=0.0)
        results = await cache.prebuild()

        route_map = cache.get_sync("en")

        assert route_map is results["en"]
        assert cache.is_generating("en") is True
        refreshed = await cache.refresh("en")
        assert set(refreshed) == {"/en/", "/en/guide/"}
        assert cache.is_generating("en") is False

    @pytest.mark.asyncio
    async def test_invalidated_cache_returns_empty(self, guide_project) -> None:
        """Test an invalidated language reads empty until regenerated."""
        cache = make_cache(guide_project)
        await cache.prebuild()

        cache.invalidate("en")

        assert not cache.snapshot_path("en").exists()
        assert cache.get_sync("en") == {}
        await cache.refresh("en")
        assert set(cache.get_sync("en")) == {"/en/", "/en/guide/"}


class TestRegeneration:
    """Tests for background regeneration and freshness."""

    @pytest.mark.asyncio
    async def test_trigger_dropped_while_in_flight(self, guide_project) -> None:
        """Test a second trigger for the same language is ignored."""
        cache = make_cache(guide_project)

        task = cache.trigger_regeneration("en")
        second = cache.trigger_regeneration("en")

        assert task is not None
        assert second is None
        await task
        assert cache.is_generating("en") is False

    @pytest.mark.asyncio
    async def test_background_failure_is_logged(
        self, guide_project, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a failed background pass is logged and stale data keeps being served."""
        cache = make_cache(guide_project, cache_ttl=0.0)
        results = await cache.prebuild()

        async def failing(context, lang):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr("navsync.cache.generate", failing)

        with caplog.at_level(logging.ERROR, logger="navsync.cache"):
            stale = cache.get_sync("en")
            task = cache._in_flight["en"]
            await asyncio.wait([task])
            await asyncio.sleep(0)

        assert stale is results["en"]
        assert cache.is_generating("en") is False
        assert any(
            "Background regeneration failed" in r.getMessage() and "disk on fire" in r.getMessage()
            for r in caplog.records
        )

    def test_trigger_without_loop(self, guide_project) -> None:
        """Test triggering outside an event loop does nothing."""
        cache = make_cache(guide_project)

        assert cache.trigger_regeneration("en") is None

    @pytest.mark.asyncio
    async def test_concurrent_refresh_joins(self, guide_project) -> None:
        """Test concurrent refreshes share one generation pass."""
        cache = make_cache(guide_project)

        first, second = await asyncio.gather(cache.refresh("en"), cache.refresh("en"))

        assert first is second

    @pytest.mark.asyncio
    async def test_needs_regeneration(self, guide_project) -> None:
        """Test content newer than the snapshot marks the language stale."""
        cache = make_cache(guide_project)
        assert cache.needs_regeneration("en") is True

        await cache.prebuild()
        assert cache.needs_regeneration("en") is False

        page = guide_project.docs / "en" / "guide" / "setup.md"
        later = time.time() + 60
        os.utime(page, (later, later))
        assert cache.needs_regeneration("en") is True

    @pytest.mark.asyncio
    async def test_get_reads_through(self, guide_project) -> None:
        """Test get() generates on a cold cache without prebuild."""
        cache = make_cache(guide_project)

        route_map = await cache.get("en")

        assert set(route_map) == {"/en/", "/en/guide/"}
        assert cache.snapshot_path("en").is_file()

    def test_get_unknown_language_raises_immediately(self, guide_project) -> None:
        """Test get() validates before returning an awaitable."""
        cache = make_cache(guide_project)

        with pytest.raises(NavsyncError):
            cache.get("fr")
