"""Bundled language color table (GitHub linguist colors)."""

from __future__ import annotations

import asyncio
import json
from importlib.resources import files

import structlog

from repolangs.errors import ErrorCode, RepoLangsError

log = structlog.get_logger()

COLORS_RESOURCE = "colors.json"


def _read_color_table() -> dict[str, str]:
    raw = files("repolangs.data").joinpath(COLORS_RESOURCE).read_text(encoding="utf-8")
    table = json.loads(raw)
    if not isinstance(table, dict):
        raise ValueError(f"{COLORS_RESOURCE} must contain a JSON object")
    return table


async def load_color_table() -> dict[str, str]:
    """Load the language → color mapping shipped with the package."""
    try:
        table = await asyncio.to_thread(_read_color_table)
    except (OSError, ValueError) as exc:
        raise RepoLangsError(
            code=ErrorCode.COLOR_TABLE_UNAVAILABLE,
            message=f"Could not load bundled {COLORS_RESOURCE}: {exc}",
            suggestion="Reinstall the package; the bundled color table is missing or corrupt.",
            recoverable=False,
        ) from exc
    log.debug("color_table_loaded", languages=len(table))
    return table
