"""Tool handler for get_language_data.

Receives AppState, validates the username, runs the color-table load and the
repository aggregation, and returns a structured dict. No MCP or FastMCP
imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repolangs.aggregator import get_data
from repolangs.errors import ErrorCode, RepoLangsError
from repolangs.models.tools import GetLanguageDataInput, GetLanguageDataOutput

if TYPE_CHECKING:
    from repolangs.state import AppState


async def handle(username: str, state: AppState) -> dict:
    """Handle a get_language_data tool call."""
    log = structlog.get_logger().bind(tool="get_language_data", username=username)
    log.info("handler_called")

    # Validate input
    try:
        validated = GetLanguageDataInput(username=username)
    except ValueError as exc:
        raise RepoLangsError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a GitHub username (1-39 alphanumerics or single hyphens).",
            recoverable=False,
        ) from exc

    timeout = state.settings.github.aggregation_timeout_seconds
    try:
        data = await asyncio.wait_for(get_data(validated.username, state), timeout=timeout)
    except TimeoutError as exc:
        raise RepoLangsError(
            code=ErrorCode.TIMEOUT,
            message=f"Fetching language data for {validated.username!r} exceeded {timeout}s",
            suggestion="The GitHub API is slow to respond. Try again later.",
            recoverable=True,
        ) from exc

    log.info(
        "handler_complete",
        from_cache=data.repo_data.from_cache,
        languages=len(data.repo_data.languages),
        truncated=data.repo_data.truncated,
    )
    output = GetLanguageDataOutput(
        username=validated.username,
        colors=data.colors,
        repo_data=data.repo_data,
    )
    return output.model_dump(mode="json")
