from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, NonNegativeInt


class CachedSnapshot(BaseModel):
    """Aggregated language counts for one user, as stored in the cache."""

    owner_key: str  # GitHub username
    cached_at: datetime  # UTC, millisecond precision
    data: dict[str, NonNegativeInt]
