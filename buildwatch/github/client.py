"""GitHub REST client used to enrich build events with commit metadata."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
import urllib.parse

import httpx
import msgspec

from .errors import FetchError, GitHubConfigError
from .models import CommitInfo

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_TIMEOUT_S = 20.0
_HTTP_ERROR_STATUS_THRESHOLD = 400

_COMMIT_DECODER = msgspec.json.Decoder(CommitInfo)


class CommitEnricher(typ.Protocol):
    """Interface for fetching commit metadata for a build event."""

    async def fetch_commit(self, commit_sha: str, repo_name: str) -> CommitInfo:
        """Return metadata for ``commit_sha`` in ``repo_name``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubClientConfig:
    """Configuration for the GitHub commit API client.

    Attributes
    ----------
    token
        Credential sent verbatim after ``Basic`` in the Authorization header.
    owner
        Organisation or user that owns every watched repository.
    api_url
        Base URL of the GitHub REST API.
    timeout_s
        Request timeout in seconds.

    """

    token: str
    owner: str
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    user_agent: str = "buildwatch/0.1"

    @classmethod
    def from_env(cls) -> GitHubClientConfig:
        """Build configuration from the ``GITHUB_*`` environment variables.

        ``GITHUB_TOKEN`` and ``GITHUB_OWNER`` are required;
        ``GITHUB_API_URL`` overrides the public API host.

        Raises
        ------
        GitHubConfigError
            If the token or owner is unset or blank.

        """
        token = os.environ.get("GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing("GITHUB_TOKEN")
        owner = os.environ.get("GITHUB_OWNER", "").strip()
        if not owner:
            raise GitHubConfigError.missing("GITHUB_OWNER")
        api_url = os.environ.get("GITHUB_API_URL", "").strip() or _DEFAULT_API_URL
        return cls(token=token, owner=owner, api_url=api_url.rstrip("/"))


def commit_path(owner: str, repo_name: str, commit_sha: str) -> str:
    """Return the git-commits API path for a commit.

    >>> commit_path("trunghlt", "superset", "abc123")
    '/repos/trunghlt/superset/git/commits/abc123'

    """
    parts = (owner, repo_name, commit_sha)
    owner_q, repo_q, sha_q = (urllib.parse.quote(part, safe="") for part in parts)
    return f"/repos/{owner_q}/{repo_q}/git/commits/{sha_q}"


class GitHubCommitClient:
    """httpx implementation of :class:`CommitEnricher`."""

    def __init__(
        self,
        config: GitHubClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._headers = {
            "Authorization": f"Basic {config.token}",
            "User-Agent": config.user_agent,
            "Accept": "application/vnd.github+json",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_commit(self, commit_sha: str, repo_name: str) -> CommitInfo:
        """Fetch author, committer and message metadata for a commit.

        Raises
        ------
        FetchError
            If the reference is incomplete, the request fails, GitHub answers
            with an error status or the body is not a commit object.

        """
        if not commit_sha or not repo_name:
            raise FetchError.missing_reference(commit_sha, repo_name)

        url = self._config.api_url + commit_path(
            self._config.owner, repo_name, commit_sha
        )
        try:
            response = await self._client.get(url, headers=self._headers)
        except httpx.TimeoutException as exc:
            raise FetchError.timeout() from exc
        except httpx.RequestError as exc:
            raise FetchError.network_error(str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise FetchError.http_error(response.status_code)

        try:
            return _COMMIT_DECODER.decode(response.content)
        except msgspec.DecodeError as exc:
            raise FetchError.invalid_body(str(exc)) from exc
