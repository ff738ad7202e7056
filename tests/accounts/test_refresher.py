"""Tests for the periodic directory refresher."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

from faxrelay.accounts.refresher import REFRESH_INTERVAL_SECONDS, DirectoryRefresher
from faxrelay.accounts.store import DirectoryStore


def _store_with_mock(refresh: AsyncMock) -> DirectoryStore:
    store = DirectoryStore()
    store.refresh = refresh  # type: ignore[method-assign]
    return store


def test_default_interval_is_ten_seconds() -> None:
    assert REFRESH_INTERVAL_SECONDS == 10.0
    assert DirectoryRefresher(DirectoryStore()).interval == 10.0


class TestLifecycle:
    async def test_start_and_stop(self) -> None:
        refresher = DirectoryRefresher(_store_with_mock(AsyncMock(return_value=True)), interval=60)
        await refresher.start()
        assert refresher.running is True
        await refresher.stop()
        assert refresher.running is False
        assert refresher._task is None

    async def test_start_twice_keeps_one_task(self) -> None:
        refresher = DirectoryRefresher(_store_with_mock(AsyncMock(return_value=True)), interval=60)
        await refresher.start()
        task = refresher._task
        await refresher.start()
        assert refresher._task is task
        await refresher.stop()

    async def test_stop_without_start(self) -> None:
        refresher = DirectoryRefresher(DirectoryStore())
        await refresher.stop()
        assert refresher.running is False


class TestTicks:
    async def test_refreshes_every_interval(self) -> None:
        refresh = AsyncMock(return_value=True)
        refresher = DirectoryRefresher(_store_with_mock(refresh), interval=0.01)
        await refresher.start()
        await asyncio.sleep(0.1)
        await refresher.stop()
        assert refresh.await_count >= 2

    async def test_no_refresh_before_first_interval(self) -> None:
        refresh = AsyncMock(return_value=True)
        refresher = DirectoryRefresher(_store_with_mock(refresh), interval=60)
        await refresher.start()
        await asyncio.sleep(0.02)
        await refresher.stop()
        refresh.assert_not_awaited()

    async def test_failing_tick_does_not_stop_loop(self) -> None:
        calls = 0

        def _tick() -> bool:
            nonlocal calls
            calls += 1
            if calls == 1:
                msg = "boom"
                raise RuntimeError(msg)
            return True

        refresh = AsyncMock(side_effect=_tick)
        refresher = DirectoryRefresher(_store_with_mock(refresh), interval=0.01)
        await refresher.start()
        await asyncio.sleep(0.1)
        assert refresher.running is True
        await refresher.stop()
        assert refresh.await_count >= 2

    async def test_picks_up_file_changes(self, tmp_path: Path) -> None:
        path = tmp_path / "accounts.json"
        path.write_text('[{"fax_number": "1"}]', encoding="utf-8")
        store = DirectoryStore(path)
        store.load()

        refresher = DirectoryRefresher(store, interval=0.01)
        await refresher.start()
        path.write_text('[{"fax_number": "2"}]', encoding="utf-8")
        for _ in range(100):
            if "2" in store.directory:
                break
            await asyncio.sleep(0.01)
        await refresher.stop()

        assert "2" in store.directory
        assert "1" not in store.directory
