"""SQLite snapshot cache for aggregated language counts.

One row per GitHub user: ``owner_key``, ``cached_at`` (epoch milliseconds)
and ``data`` (the JSON-encoded language count map). A snapshot at or past
``FRESHNESS_THRESHOLD`` is reported as absent; it stays on disk until it is
overwritten or purged.

All cache operations catch ``aiosqlite.Error`` (and undecodable stored data)
internally and degrade gracefully: read failures return ``None`` (treated as
a cache miss by callers), write failures are logged and ignored. Cache
failures never cross the class boundary.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

from repolangs.models.cache import CachedSnapshot

log = structlog.get_logger()

FRESHNESS_THRESHOLD = timedelta(milliseconds=3_600_000)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)

_CREATE_SNAPSHOT_TABLE = """
CREATE TABLE IF NOT EXISTS snapshots (
    owner_key  TEXT PRIMARY KEY,
    cached_at  INTEGER NOT NULL,
    data       TEXT NOT NULL
)
"""

# A write never moves cached_at backwards for a key.
_UPSERT_SNAPSHOT = """
INSERT INTO snapshots (owner_key, cached_at, data) VALUES (?, ?, ?)
ON CONFLICT(owner_key) DO UPDATE SET
    cached_at = excluded.cached_at,
    data = excluded.data
WHERE excluded.cached_at >= snapshots.cached_at
"""


def utc_now() -> datetime:
    """Current UTC time truncated to millisecond precision."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def to_epoch_ms(value: datetime) -> int:
    return (value - _EPOCH) // _ONE_MS


def from_epoch_ms(value: int) -> datetime:
    return _EPOCH + value * _ONE_MS


class SnapshotCache:
    """SQLite-backed snapshot cache implementing CacheProtocol."""

    def __init__(
        self,
        db: aiosqlite.Connection,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db
        self._clock = clock

    async def init_db(self) -> None:
        """Create the table and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_SNAPSHOT_TABLE)
        await self._db.commit()

    async def lookup(self, owner_key: str) -> CachedSnapshot | None:
        """Return the fresh snapshot for ``owner_key``.

        ``None`` on a missing key, an expired entry, or a read failure.
        """
        try:
            cursor = await self._db.execute(
                "SELECT owner_key, cached_at, data FROM snapshots WHERE owner_key = ?",
                (owner_key,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            snapshot = CachedSnapshot(
                owner_key=row[0],
                cached_at=from_epoch_ms(row[1]),
                data=json.loads(row[2]),
            )
        except aiosqlite.Error:
            log.warning("cache_read_error", key=owner_key, exc_info=True)
            return None
        except ValueError:
            # JSONDecodeError and pydantic ValidationError both land here
            log.warning("cache_entry_corrupt", key=owner_key, exc_info=True)
            return None

        age = self._clock() - snapshot.cached_at
        if age >= FRESHNESS_THRESHOLD:
            log.debug("cache_entry_expired", key=owner_key, age_seconds=age.total_seconds())
            return None
        return snapshot

    async def store(self, snapshot: CachedSnapshot) -> None:
        """Write a snapshot, replacing any prior one for the key. Non-fatal on failure."""
        try:
            cursor = await self._db.execute(
                _UPSERT_SNAPSHOT,
                (
                    snapshot.owner_key,
                    to_epoch_ms(snapshot.cached_at),
                    json.dumps(snapshot.data, sort_keys=True),
                ),
            )
            await self._db.commit()
            if cursor.rowcount == 0:
                log.debug("cache_write_skipped", key=snapshot.owner_key, reason="older_snapshot")
        except aiosqlite.Error:
            log.warning("cache_write_error", key=snapshot.owner_key, exc_info=True)

    async def purge_expired(self, retention: timedelta) -> None:
        """Delete snapshots older than ``retention``. Non-fatal on failure."""
        try:
            cutoff = to_epoch_ms(self._clock() - retention)
            cursor = await self._db.execute("DELETE FROM snapshots WHERE cached_at < ?", (cutoff,))
            deleted = cursor.rowcount
            await self._db.commit()
            log.info("cache_purge_complete", deleted=deleted)
        except aiosqlite.Error:
            log.warning("cache_purge_error", exc_info=True)
