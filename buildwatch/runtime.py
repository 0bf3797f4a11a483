"""buildwatch service entrypoint.

Loads configuration, connects to the message bus and runs the subscription
runner until SIGINT/SIGTERM or an unrecoverable subscription error.

Configuration is driven by environment variables, optionally read from a
``.env`` file in the working directory:

- ``PROJECT_ID``: Bus project, used as the broker namespace (required)
- ``HANGOUT_URL``: Chat webhook URL (required)
- ``GITHUB_TOKEN`` and ``GITHUB_OWNER``: Commit API access (required)
- ``BUILDWATCH_SUBSCRIPTION``: Queue name (default ``cloudBuildSub``)
- ``BUILDWATCH_BROKER_URL``: Redis URL (default ``redis://localhost:6379/0``)
- ``BUILDWATCH_ROUTES_PATH``: Optional YAML routes file
- ``BUILDWATCH_WORKER_THREADS``: Concurrent callbacks (default ``8``)
- ``BUILDWATCH_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m buildwatch.runtime``.
"""

from __future__ import annotations

import functools
import os
import signal
import typing as typ

from dotenv import load_dotenv

from buildwatch.config import BuildWatchConfig
from buildwatch.errors import StartupError
from buildwatch.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_info,
    log_warning,
)
from buildwatch.pipeline import open_pipeline
from buildwatch.worker import (
    PipelineDispatcher,
    SubscriptionError,
    SubscriptionRunner,
    build_broker,
    create_build_event_actor,
    verify_broker,
)

if typ.TYPE_CHECKING:
    import types

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def setup_logging() -> None:
    """Configure logging from ``BUILDWATCH_LOG_LEVEL``."""
    log_level_str = os.environ.get("BUILDWATCH_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid BUILDWATCH_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )


def build_runner(config: BuildWatchConfig) -> SubscriptionRunner:
    """Connect to the bus and declare the build-event actor.

    Raises
    ------
    StartupError
        If the routes file is invalid or the broker is unreachable.

    """
    routes = config.load_routes()
    broker = build_broker(config.bus)
    verify_broker(broker)
    dispatcher = PipelineDispatcher(
        functools.partial(open_pipeline, config, routes),
        max_workers=config.bus.worker_threads,
    )
    create_build_event_actor(
        broker,
        queue_name=config.bus.subscription,
        dispatcher=dispatcher,
    )
    return SubscriptionRunner(
        broker,
        queue_name=config.bus.subscription,
        worker_threads=config.bus.worker_threads,
        dispatcher=dispatcher,
    )


def _install_signal_handlers(runner: SubscriptionRunner) -> None:
    def _handle(signum: int, _frame: types.FrameType | None) -> None:
        log_info(logger, "Received %s, shutting down", signal.Signals(signum).name)
        runner.stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def run_service() -> int:
    """Run the notification service and return a process exit code."""
    load_dotenv()
    setup_logging()

    try:
        config = BuildWatchConfig.from_env()
        runner = build_runner(config)
    except StartupError as exc:
        log_exception(logger, str(exc), exc)
        return EXIT_FAILURE

    log_info(
        logger,
        "Starting build notifications for project %s on %s",
        config.bus.project_id,
        config.bus.subscription,
    )
    _install_signal_handlers(runner)
    try:
        runner.run()
    except SubscriptionError as exc:
        log_exception(logger, str(exc), exc)
        return EXIT_FAILURE
    return EXIT_OK


def main() -> None:
    """Start the service and exit with its status code."""
    raise SystemExit(run_service())


if __name__ == "__main__":
    main()
