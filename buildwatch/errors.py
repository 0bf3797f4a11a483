"""Base exceptions shared across buildwatch packages."""

from __future__ import annotations


class BuildWatchError(Exception):
    """Base class for buildwatch errors.

    Gives callers a single catch point; each package defines the concrete
    subclasses it raises.
    """


class StartupError(BuildWatchError):
    """Raised when the service cannot start.

    Covers missing or invalid configuration and a message bus that cannot be
    reached. The runtime logs it and exits with status 1.
    """

    @classmethod
    def from_error(cls, exc: BaseException) -> StartupError:
        """Wrap a configuration or connection failure."""
        return cls(f"buildwatch failed to start: {exc}")

    @classmethod
    def invalid_setting(cls, env_var: str, value: str, constraint: str) -> StartupError:
        """Return an error for an environment value that fails validation."""
        return cls(f"invalid {env_var} {value!r}: {constraint}")

    @classmethod
    def missing_setting(cls, env_var: str) -> StartupError:
        """Return an error for a required but unset environment variable."""
        return cls(f"{env_var} environment variable is required")
