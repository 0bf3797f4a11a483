"""Errors raised by the GitHub commit enricher."""

from __future__ import annotations

from buildwatch.errors import BuildWatchError


class FetchError(BuildWatchError):
    """Raised when commit metadata cannot be fetched from GitHub."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> FetchError:
        """Return an error for HTTP error responses."""
        return cls(f"GitHub commit API HTTP {status_code}", status_code=status_code)

    @classmethod
    def timeout(cls) -> FetchError:
        """Return an error for request timeouts."""
        return cls("GitHub commit API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> FetchError:
        """Return an error for DNS, connection and TLS failures."""
        return cls(f"GitHub commit API network error: {detail}")

    @classmethod
    def invalid_body(cls, detail: str) -> FetchError:
        """Return an error for non-JSON or wrongly shaped response bodies."""
        return cls(f"GitHub commit API returned an unusable body: {detail}")

    @classmethod
    def missing_reference(cls, commit_sha: str, repo_name: str) -> FetchError:
        """Return an error when the event lacks a commit or repository."""
        return cls(
            "cannot fetch commit without both a commit SHA and a repository "
            f"(commit_sha={commit_sha!r}, repo_name={repo_name!r})"
        )


class GitHubConfigError(BuildWatchError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing(cls, env_var: str) -> GitHubConfigError:
        """Return an error for a required but unset environment variable."""
        return cls(f"{env_var} is required for the GitHub commit API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
