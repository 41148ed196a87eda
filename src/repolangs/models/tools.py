from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

from repolangs.models.repo import RepoDataResult

# GitHub logins: alphanumerics and single hyphens, no leading/trailing hyphen
_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


class GetLanguageDataInput(BaseModel):
    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username must not be empty")
        if not _USERNAME_RE.match(v):
            raise ValueError(f"Invalid GitHub username: {v!r}")
        return v


class GetLanguageDataOutput(BaseModel):
    username: str
    colors: dict[str, str]
    repo_data: RepoDataResult
