"""Shared test fixtures for the repolangs test suite."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import aiosqlite
import httpx
import pytest

from repolangs.cache import SnapshotCache, utc_now
from repolangs.config import Settings
from repolangs.fetcher import PaginatedFetcher
from repolangs.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

API = "https://api.github.com"


class FrozenClock:
    """Manually advanced UTC clock, millisecond precision."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(utc_now())


@pytest.fixture()
def settings() -> Settings:
    return Settings(github={"api_url": API}, cache={"db_path": ":memory:"})


@pytest.fixture()
async def cache(clock: FrozenClock) -> AsyncGenerator[SnapshotCache, None]:
    """SnapshotCache over an in-memory database, driven by the frozen clock."""
    async with aiosqlite.connect(":memory:") as db:
        snapshot_cache = SnapshotCache(db, clock=clock)
        await snapshot_cache.init_db()
        yield snapshot_cache


@pytest.fixture()
async def app_state(
    settings: Settings, cache: SnapshotCache, clock: FrozenClock
) -> AsyncGenerator[AppState, None]:
    """Fully wired AppState sharing the cache's frozen clock.

    HTTP calls are expected to be mocked with respx.
    """
    async with httpx.AsyncClient() as client:
        yield AppState(
            settings=settings,
            http_client=client,
            cache=cache,
            fetcher=PaginatedFetcher(client),
            clock=clock,
        )
