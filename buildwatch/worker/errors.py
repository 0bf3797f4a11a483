"""Errors raised by the subscription runner."""

from __future__ import annotations

from buildwatch.errors import BuildWatchError


class SubscriptionError(BuildWatchError):
    """Raised when the receive loop cannot continue.

    The runner is ``STOPPED`` once this is raised; the runtime exits.
    """

    @classmethod
    def already_started(cls) -> SubscriptionError:
        """Return an error for a second call to ``run``."""
        return cls("subscription runner can only be started once")

    @classmethod
    def start_failed(cls, queue_name: str, exc: BaseException) -> SubscriptionError:
        """Return an error for a worker that could not start consuming."""
        return cls(f"failed to start consuming subscription {queue_name!r}: {exc}")

    @classmethod
    def consumers_stopped(cls, queue_name: str) -> SubscriptionError:
        """Return an error when a consumer thread died while running."""
        return cls(f"consumer for subscription {queue_name!r} stopped unexpectedly")

    @classmethod
    def broker_unavailable(
        cls, queue_name: str, exc: BaseException
    ) -> SubscriptionError:
        """Return an error when the broker rejects us or stays unreachable."""
        return cls(f"broker for subscription {queue_name!r} is unavailable: {exc}")
