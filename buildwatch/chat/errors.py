"""Errors raised while delivering chat notifications."""

from __future__ import annotations

from buildwatch.errors import BuildWatchError


class DeliveryError(BuildWatchError):
    """Raised when the chat webhook does not accept a notification."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def rejected(cls, status_code: int) -> DeliveryError:
        """Return an error for any webhook response other than 200."""
        return cls(
            f"chat webhook rejected the message with HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def transport(cls, detail: str) -> DeliveryError:
        """Return an error for timeouts and network failures."""
        return cls(f"chat webhook request failed: {detail}")


class ChatConfigError(BuildWatchError):
    """Raised when the chat webhook is not configured."""

    @classmethod
    def missing_url(cls) -> ChatConfigError:
        """Return an error when ``HANGOUT_URL`` is unset."""
        return cls("HANGOUT_URL is required to deliver notifications")
