"""Cache-or-fetch aggregation of a user's repository languages.

Per call:
  Start    → cache lookup (skipped when ``cache.enabled`` is false)
  CacheHit → return the snapshot's counts, ``from_cache=True``
  Fetching → fold every page into an empty count map
  Store    → write the finished map under the lower-cased username,
             unless pagination was truncated
  Done     → return the map, ``from_cache=False``

Provenance travels in the returned RepoDataResult, so consecutive calls
share no mutable state.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from repolangs.colors import load_color_table
from repolangs.fetcher import repos_url
from repolangs.models.cache import CachedSnapshot
from repolangs.models.repo import LanguageData, RepoDataResult

if TYPE_CHECKING:
    from repolangs.models.repo import RepositoryRecord
    from repolangs.state import AppState


def merge_language_counts(
    counts: dict[str, int], records: Iterable[RepositoryRecord]
) -> dict[str, int]:
    """Add one to ``counts[language]`` for every record with a language.

    Records without a language are skipped and never create an entry.
    Mutates and returns ``counts``.
    """
    for record in records:
        if record.language is None:
            continue
        counts[record.language] = counts.get(record.language, 0) + 1
    return counts


async def get_repo_data(username: str, state: AppState) -> RepoDataResult:
    """Return language counts for ``username``, from cache when fresh.

    GitHub logins are case-insensitive, so the snapshot is keyed by the
    lower-cased name. A truncated aggregation is returned but never stored.
    """
    log = structlog.get_logger().bind(username=username)

    if state.cache is None or state.fetcher is None:
        raise RuntimeError("AppState components (cache, fetcher) not initialized")

    owner_key = username.lower()
    if state.settings.cache.enabled:
        snapshot = await state.cache.lookup(owner_key)
        if snapshot is not None:
            log.info("cache_hit", cached_at=snapshot.cached_at.isoformat())
            return RepoDataResult(
                languages=snapshot.data,
                from_cache=True,
                cached_at=snapshot.cached_at,
            )
        log.info("cache_miss_fetching")
    else:
        log.info("cache_bypassed")

    github = state.settings.github
    start_url = repos_url(github.api_url, username, github.per_page)
    counts: dict[str, int] = {}
    pages = 0
    truncated = False
    async for page in state.fetcher.iter_pages(start_url):
        merge_language_counts(counts, page.records)
        pages += 1
        truncated = truncated or page.truncated

    if truncated:
        log.warning("aggregation_truncated", pages=pages, cached=False)
    else:
        # Non-fatal on failure, handled inside the cache
        await state.cache.store(
            CachedSnapshot(owner_key=owner_key, cached_at=state.clock(), data=counts)
        )

    log.info("aggregation_complete", pages=pages, languages=len(counts))
    return RepoDataResult(languages=counts, from_cache=False, truncated=truncated)


async def get_data(username: str, state: AppState) -> LanguageData:
    """Load the color table and the user's language counts concurrently.

    Both are required: the first failure cancels the other task and
    propagates unwrapped.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            colors = tg.create_task(load_color_table())
            repo_data = tg.create_task(get_repo_data(username, state))
    except ExceptionGroup as group:
        raise group.exceptions[0]
    return LanguageData(colors=colors.result(), repo_data=repo_data.result())
