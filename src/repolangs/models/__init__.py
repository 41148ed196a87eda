from __future__ import annotations

from repolangs.models.cache import CachedSnapshot
from repolangs.models.repo import LanguageData, RepoDataResult, RepoPage, RepositoryRecord
from repolangs.models.tools import GetLanguageDataInput, GetLanguageDataOutput

__all__ = [
    # cache
    "CachedSnapshot",
    # repo
    "RepositoryRecord",
    "RepoPage",
    "RepoDataResult",
    "LanguageData",
    # tools
    "GetLanguageDataInput",
    "GetLanguageDataOutput",
]
