"""Long-lived receive loop for the build-event subscription."""

from __future__ import annotations

import enum
import threading
import typing as typ

import dramatiq
from redis.exceptions import AuthenticationError, RedisError

from buildwatch.logging import get_logger, log_error, log_info, log_warning

from ._broker import ping_broker
from .errors import SubscriptionError

if typ.TYPE_CHECKING:
    from .dispatch import PipelineDispatcher

logger = get_logger(__name__)

_DEFAULT_WORKER_TIMEOUT_MS = 1000
_DEFAULT_HEALTH_INTERVAL_S = 5.0
_DEFAULT_MAX_PING_FAILURES = 3


class RunnerState(enum.StrEnum):
    """Lifecycle states of :class:`SubscriptionRunner`."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SubscriptionRunner:
    """Consume the subscription queue until stopped or broken.

    A dramatiq worker receives each message on its own thread and the
    build-event actor hands it to the dispatcher, so a slow callback delays
    only itself. ``STOPPED`` is terminal: a runner is started at most once.

    Dramatiq consumers reconnect forever on broker errors, so the runner
    pings the broker on every health tick. Rejected credentials stop it at
    once; other broker errors stop it after ``max_ping_failures``
    consecutive failed pings.

    Parameters
    ----------
    broker
        Broker carrying the subscription queue.
    queue_name
        Subscription queue to consume.
    worker_threads
        Number of messages received concurrently.
    worker_timeout_ms
        How long idle worker threads block waiting for messages.
    health_interval_s
        Period between broker and consumer health checks.
    max_ping_failures
        Consecutive failed broker pings tolerated before giving up.
    dispatcher
        Pipeline pool drained after the worker stops, so acknowledged events
        still in flight are finished before :meth:`run` returns.

    """

    def __init__(  # noqa: PLR0913
        self,
        broker: dramatiq.Broker,
        *,
        queue_name: str,
        worker_threads: int = 8,
        worker_timeout_ms: int = _DEFAULT_WORKER_TIMEOUT_MS,
        health_interval_s: float = _DEFAULT_HEALTH_INTERVAL_S,
        max_ping_failures: int = _DEFAULT_MAX_PING_FAILURES,
        dispatcher: PipelineDispatcher | None = None,
    ) -> None:
        """Initialise the runner without touching the broker."""
        self._broker = broker
        self._queue_name = queue_name
        self._worker_threads = worker_threads
        self._worker_timeout_ms = worker_timeout_ms
        self._health_interval_s = health_interval_s
        self._max_ping_failures = max_ping_failures
        self._dispatcher = dispatcher
        self._state = RunnerState.IDLE
        self._state_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._started = threading.Event()
        self._worker: dramatiq.Worker | None = None

    @property
    def state(self) -> RunnerState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def worker(self) -> dramatiq.Worker | None:
        """Return the dramatiq worker once :meth:`run` has created it."""
        return self._worker

    def wait_until_running(self, timeout: float | None = None) -> bool:
        """Block until the worker consumes messages; return False on timeout."""
        return self._started.wait(timeout)

    def stop(self) -> None:
        """Ask the receive loop to finish; safe to call from signal handlers."""
        self._stop_requested.set()

    def run(self) -> None:
        """Consume messages until :meth:`stop` is called.

        Raises
        ------
        SubscriptionError
            If the runner was already started, the worker fails to start, a
            consumer thread dies or the broker becomes unavailable.

        """
        with self._state_lock:
            if self._state is not RunnerState.IDLE:
                raise SubscriptionError.already_started()
            self._state = RunnerState.RUNNING

        worker = dramatiq.Worker(
            self._broker,
            queues={self._queue_name},
            worker_threads=self._worker_threads,
            worker_timeout=self._worker_timeout_ms,
        )
        self._worker = worker
        try:
            worker.start()
        except Exception as exc:
            self._state = RunnerState.STOPPED
            log_error(logger, "Worker failed to start: %s", exc, exc_info=exc)
            self._drain()
            raise SubscriptionError.start_failed(self._queue_name, exc) from exc

        log_info(
            logger,
            "Receiving build events from %s with %d worker threads",
            self._queue_name,
            self._worker_threads,
        )
        self._started.set()
        try:
            self._watch(worker)
        finally:
            worker.stop()
            self._drain()
            self._state = RunnerState.STOPPED
            log_info(logger, "Stopped receiving build events from %s", self._queue_name)

    def _drain(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.shutdown(wait=True)

    def _watch(self, worker: dramatiq.Worker) -> None:
        ping_failures = 0
        while not self._stop_requested.wait(self._health_interval_s):
            if not _consumers_alive(worker):
                log_error(
                    logger,
                    "Consumer for %s is no longer running",
                    self._queue_name,
                )
                raise SubscriptionError.consumers_stopped(self._queue_name)
            try:
                ping_broker(self._broker)
            except AuthenticationError as exc:
                log_error(logger, "Broker rejected credentials: %s", exc)
                raise SubscriptionError.broker_unavailable(
                    self._queue_name, exc
                ) from exc
            except RedisError as exc:
                ping_failures += 1
                log_warning(
                    logger,
                    "Broker ping failed (%d/%d): %s",
                    ping_failures,
                    self._max_ping_failures,
                    exc,
                )
                if ping_failures >= self._max_ping_failures:
                    raise SubscriptionError.broker_unavailable(
                        self._queue_name, exc
                    ) from exc
            else:
                ping_failures = 0


def _consumers_alive(worker: dramatiq.Worker) -> bool:
    consumers: typ.Mapping[str, threading.Thread] = worker.consumers
    return all(consumer.is_alive() for consumer in consumers.values())
