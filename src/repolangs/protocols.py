"""Protocol interfaces for swappable components.

The aggregator and AppState reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory implementations
- Future backends (e.g. Redis cache) to be swapped without changing the aggregator
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from datetime import timedelta

    from repolangs.models.cache import CachedSnapshot
    from repolangs.models.repo import RepoPage


class CacheProtocol(Protocol):
    """Interface for the snapshot cache backend."""

    async def lookup(self, owner_key: str) -> CachedSnapshot | None: ...

    async def store(self, snapshot: CachedSnapshot) -> None: ...

    async def purge_expired(self, retention: timedelta) -> None: ...


class FetcherProtocol(Protocol):
    """Interface for the paginated repository fetcher."""

    def iter_pages(self, start_url: str) -> AsyncIterator[RepoPage]: ...
