from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, NonNegativeInt


class RepositoryRecord(BaseModel):
    """One entry of a ``/users/{username}/repos`` page.

    Only the fields the aggregation reads are kept; the rest of the API
    payload is dropped at parse time.
    """

    model_config = ConfigDict(extra="ignore")

    language: str | None = None


class RepoPage(BaseModel):
    """A single fetched page plus the continuation link, if any."""

    records: list[RepositoryRecord]
    next_url: str | None = None
    truncated: bool = False  # a rel="next" segment was present but unparseable


class RepoDataResult(BaseModel):
    """Per-language counts and where they came from."""

    languages: dict[str, NonNegativeInt]
    from_cache: bool
    cached_at: datetime | None = None
    truncated: bool = False


class LanguageData(BaseModel):
    """Joined result of the color table and a user's language counts."""

    colors: dict[str, str]
    repo_data: RepoDataResult
