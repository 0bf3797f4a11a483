"""Service configuration loaded from the environment.

Usage
-----
Load the full configuration at startup:

>>> config = BuildWatchConfig.from_env()
>>> config.bus.subscription
'cloudBuildSub'

Publishers only need the bus settings:

>>> bus = BusConfig.from_env()

"""

from __future__ import annotations

import dataclasses as dc
import os
import re
from pathlib import Path

from buildwatch.chat import ChatConfigError, ChatWebhookConfig
from buildwatch.errors import StartupError
from buildwatch.github import GitHubClientConfig, GitHubConfigError
from buildwatch.notify import (
    NotificationRoutes,
    RoutesValidationError,
    default_routes,
    load_routes,
)

DEFAULT_SUBSCRIPTION = "cloudBuildSub"
DEFAULT_BROKER_URL = "redis://localhost:6379/0"
DEFAULT_WORKER_THREADS = 8

# dramatiq queue names share this grammar
_QUEUE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9._-]*$")


def _parse_positive_int(env_var: str, default: int) -> int:
    """Read a positive integer env var, falling back to a default."""
    raw = os.environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise StartupError.invalid_setting(env_var, raw, "must be an integer") from exc
    if value < 1:
        raise StartupError.invalid_setting(env_var, raw, "must be positive")
    return value


@dc.dataclass(frozen=True, slots=True)
class BusConfig:
    """Message bus settings.

    Attributes
    ----------
    project_id
        Bus project; used as the broker namespace so several projects can
        share one Redis instance.
    subscription
        Queue the build events are published to.
    broker_url
        Redis URL of the dramatiq broker.
    worker_threads
        Number of callbacks processed concurrently.

    """

    project_id: str
    subscription: str = DEFAULT_SUBSCRIPTION
    broker_url: str = DEFAULT_BROKER_URL
    worker_threads: int = DEFAULT_WORKER_THREADS

    @classmethod
    def from_env(cls) -> BusConfig:
        """Create bus configuration from environment variables.

        Reads ``PROJECT_ID`` (required), ``BUILDWATCH_SUBSCRIPTION``,
        ``BUILDWATCH_BROKER_URL`` and ``BUILDWATCH_WORKER_THREADS``.

        Raises
        ------
        StartupError
            If ``PROJECT_ID`` is missing or a value is invalid.

        """
        project_id = os.environ.get("PROJECT_ID", "").strip()
        if not project_id:
            raise StartupError.missing_setting("PROJECT_ID")

        subscription = (
            os.environ.get("BUILDWATCH_SUBSCRIPTION", "").strip()
            or DEFAULT_SUBSCRIPTION
        )
        if not _QUEUE_NAME_RE.match(subscription):
            raise StartupError.invalid_setting(
                "BUILDWATCH_SUBSCRIPTION",
                subscription,
                "must start with a letter or underscore and contain only "
                "letters, digits, '.', '_' or '-'",
            )

        broker_url = (
            os.environ.get("BUILDWATCH_BROKER_URL", "").strip() or DEFAULT_BROKER_URL
        )
        worker_threads = _parse_positive_int(
            "BUILDWATCH_WORKER_THREADS", DEFAULT_WORKER_THREADS
        )
        return cls(
            project_id=project_id,
            subscription=subscription,
            broker_url=broker_url,
            worker_threads=worker_threads,
        )


@dc.dataclass(frozen=True, slots=True)
class BuildWatchConfig:
    """Complete configuration of the notification service."""

    bus: BusConfig
    github: GitHubClientConfig
    chat: ChatWebhookConfig
    routes_path: Path | None = None

    @classmethod
    def from_env(cls) -> BuildWatchConfig:
        """Create configuration from environment variables.

        Besides the bus settings this reads ``HANGOUT_URL``,
        ``GITHUB_TOKEN``, ``GITHUB_OWNER``, ``GITHUB_API_URL`` and
        ``BUILDWATCH_ROUTES_PATH``.

        Raises
        ------
        StartupError
            If any required value is absent or invalid.

        """
        bus = BusConfig.from_env()
        try:
            chat = ChatWebhookConfig.from_env()
            github = GitHubClientConfig.from_env()
        except (ChatConfigError, GitHubConfigError) as exc:
            raise StartupError.from_error(exc) from exc

        routes_path: Path | None = None
        raw_routes_path = os.environ.get("BUILDWATCH_ROUTES_PATH", "")
        if raw_routes_path.strip():
            routes_path = Path(raw_routes_path.strip())

        return cls(bus=bus, github=github, chat=chat, routes_path=routes_path)

    def load_routes(self) -> NotificationRoutes:
        """Return the configured routes, or the built-in defaults.

        Raises
        ------
        StartupError
            If the routes file cannot be parsed or fails validation.

        """
        if self.routes_path is None:
            return default_routes()
        try:
            return load_routes(self.routes_path)
        except RoutesValidationError as exc:
            raise StartupError.from_error(exc) from exc
