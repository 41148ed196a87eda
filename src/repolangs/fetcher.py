"""Paginated GitHub repository fetcher.

Pages are fetched strictly one after another: the URL of page N+1 is only
known once page N's ``link`` header has arrived. The Fetcher receives an
httpx.AsyncClient via constructor injection; the server lifespan owns the
client lifecycle.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from repolangs.errors import ErrorCode, MalformedLinkHeader, RepoLangsError
from repolangs.models.repo import RepoPage, RepositoryRecord

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from repolangs.config import GitHubSettings

log = structlog.get_logger()

_LINK_URL_RE = re.compile(r"<([^<>]+)>")
_NEXT_REL = 'rel="next"'

_records_adapter = TypeAdapter(list[RepositoryRecord])


def build_http_client(settings: GitHubSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        # GitHub answers 301 for renamed accounts
        follow_redirects=True,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/vnd.github+json",
        },
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def repos_url(api_url: str, username: str, per_page: int = 10) -> str:
    """First-page URL of a user's repository listing."""
    return f"{api_url.rstrip('/')}/users/{username}/repos?page=1&per_page={per_page}"


def next_page_url(link_header: str | None) -> str | None:
    """Return the ``rel="next"`` URL from a ``link`` header, or None on the last page.

    The header is split into its comma-separated segments first and the URL
    pattern is applied only to the segment carrying ``rel="next"``, so a
    ``prev``/``first`` URL earlier in the header is never picked up.

    Raises MalformedLinkHeader if the next segment has no ``<url>``.
    """
    if not link_header:
        return None
    for segment in link_header.split(","):
        if _NEXT_REL not in segment:
            continue
        match = _LINK_URL_RE.search(segment)
        if match is None:
            raise MalformedLinkHeader(segment.strip())
        return match.group(1)
    return None


def _rate_limit_reset(response: httpx.Response) -> str:
    reset = response.headers.get("x-ratelimit-reset", "")
    if reset.isdigit():
        return datetime.fromtimestamp(int(reset), tz=UTC).isoformat()
    return "an unknown time"


def _raise_for_status(url: str, response: httpx.Response) -> None:
    if response.is_success:
        return
    if response.status_code == 404:
        raise RepoLangsError(
            code=ErrorCode.USER_NOT_FOUND,
            message=f"HTTP 404 fetching {url}",
            suggestion="Check that the GitHub username exists.",
            recoverable=False,
        )
    if (
        response.status_code in (403, 429)
        and response.headers.get("x-ratelimit-remaining") == "0"
    ):
        raise RepoLangsError(
            code=ErrorCode.RATE_LIMITED,
            message=(
                f"GitHub API rate limit exhausted fetching {url}; "
                f"resets at {_rate_limit_reset(response)}"
            ),
            suggestion="Wait for the rate limit window to reset and try again.",
            recoverable=True,
        )
    raise RepoLangsError(
        code=ErrorCode.REPO_FETCH_FAILED,
        message=f"HTTP {response.status_code} fetching {url}",
        suggestion="The GitHub API may be temporarily unavailable.",
        recoverable=True,
    )


class PaginatedFetcher:
    """Walks a user's repository listing page by page via the ``link`` header."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_page(self, url: str) -> RepoPage:
        """Fetch one page of repositories.

        Raises RepoLangsError on network errors, non-2xx responses and bodies
        that are not a JSON array of objects. A malformed next link ends
        pagination with ``truncated=True`` instead of failing the page.
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise RepoLangsError(
                code=ErrorCode.REPO_FETCH_FAILED,
                message=f"Network error fetching {url}: {exc}",
                suggestion="The GitHub API may be temporarily unavailable.",
                recoverable=True,
            ) from exc

        _raise_for_status(url, response)

        try:
            records = _records_adapter.validate_json(response.content)
        except ValidationError as exc:
            raise RepoLangsError(
                code=ErrorCode.INVALID_RESPONSE,
                message=f"Unexpected response body from {url}: {exc.error_count()} error(s)",
                suggestion="The API did not return a JSON array of repositories.",
                recoverable=False,
            ) from exc

        truncated = False
        try:
            next_url = next_page_url(response.headers.get("link"))
        except MalformedLinkHeader as exc:
            log.warning(
                "pagination_link_malformed",
                url=url,
                segment=exc.segment,
                records_so_far=len(records),
            )
            next_url = None
            truncated = True

        log.info(
            "fetch_page_complete",
            url=url,
            status_code=response.status_code,
            records=len(records),
            has_next=next_url is not None,
        )
        return RepoPage(records=records, next_url=next_url, truncated=truncated)

    async def iter_pages(self, start_url: str) -> AsyncIterator[RepoPage]:
        """Yield each page in link order until no next link remains."""
        url: str | None = start_url
        while url is not None:
            page = await self.fetch_page(url)
            yield page
            url = page.next_url

    async def fetch_all(self, start_url: str) -> list[RepositoryRecord]:
        """Blocking equivalent of ``iter_pages``: all records, in page order."""
        records: list[RepositoryRecord] = []
        async for page in self.iter_pages(start_url):
            records.extend(page.records)
        return records
