"""GitHub commit enrichment."""

from __future__ import annotations

from .client import (
    CommitEnricher,
    GitHubClientConfig,
    GitHubCommitClient,
    commit_path,
)
from .errors import FetchError, GitHubConfigError
from .models import CommitInfo, GitIdentity

__all__ = [
    "CommitEnricher",
    "CommitInfo",
    "FetchError",
    "GitHubClientConfig",
    "GitHubCommitClient",
    "GitHubConfigError",
    "GitIdentity",
    "commit_path",
]
