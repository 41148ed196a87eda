from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    USER_NOT_FOUND = "USER_NOT_FOUND"
    REPO_FETCH_FAILED = "REPO_FETCH_FAILED"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    COLOR_TABLE_UNAVAILABLE = "COLOR_TABLE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    INVALID_INPUT = "INVALID_INPUT"


class RepoLangsError(Exception):
    """Raised for all expected failure conditions of a language-data request.

    Caught by server.py and serialised into the MCP error response.
    Business logic lets it propagate; nothing below the tool handler retries.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class MalformedLinkHeader(ValueError):
    """A ``rel="next"`` link segment carried no ``<url>`` part.

    Internal to the fetcher: it is converted into "no next page" plus a
    truncation flag and never reaches callers.
    """

    def __init__(self, segment: str) -> None:
        super().__init__(f"No <url> in link segment: {segment!r}")
        self.segment = segment
