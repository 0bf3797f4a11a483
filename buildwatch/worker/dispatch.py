"""Bounded hand-off of build events from the actor to pipeline threads.

The actor only submits the payload here and returns, so dramatiq
acknowledges each message on receipt. Processing happens on a
:class:`~concurrent.futures.ThreadPoolExecutor`; at most ``max_workers``
events are in flight and further submissions block until a slot frees up.
"""

from __future__ import annotations

import asyncio
import threading
import typing as typ
from concurrent.futures import Future, ThreadPoolExecutor

from buildwatch.logging import get_logger, log_exception, log_info

if typ.TYPE_CHECKING:
    from buildwatch.pipeline import PipelineFactory, PipelineOutcome

logger = get_logger(__name__)

FAILED_OUTCOME = "failed"


async def _process(
    pipeline_factory: PipelineFactory, payload: str
) -> PipelineOutcome:
    async with pipeline_factory() as pipeline:
        return await pipeline.process(payload)


class PipelineDispatcher:
    """Run build events through fresh pipelines on a bounded thread pool.

    Parameters
    ----------
    pipeline_factory
        Callable returning an async context manager that yields a pipeline;
        invoked once per event.
    max_workers
        Number of events processed concurrently.

    """

    def __init__(self, pipeline_factory: PipelineFactory, *, max_workers: int) -> None:
        """Create the executor; threads start lazily on first submit."""
        self._pipeline_factory = pipeline_factory
        self._slots = threading.BoundedSemaphore(max_workers)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="buildwatch-pipeline",
        )

    def submit(self, payload: str) -> Future[str]:
        """Queue ``payload`` for processing and return its outcome future.

        Blocks while every worker is busy. The future resolves to the
        pipeline outcome name, or ``"failed"`` when processing raised.

        Raises
        ------
        RuntimeError
            If the dispatcher has been shut down.

        """
        self._slots.acquire()
        try:
            future = self._executor.submit(self._run, payload)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(self._release_slot)
        return future

    def _release_slot(self, _future: Future[str]) -> None:
        self._slots.release()

    def _run(self, payload: str) -> str:
        try:
            outcome = asyncio.run(_process(self._pipeline_factory, payload))
        except Exception as exc:  # noqa: BLE001 - the message is already acknowledged
            log_exception(
                logger,
                f"Unhandled error while processing build event: {exc}",
                exc,
            )
            return FAILED_OUTCOME
        return str(outcome)

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting events; with ``wait`` finish those in flight."""
        if wait:
            log_info(logger, "Draining in-flight build events")
        self._executor.shutdown(wait=wait)
