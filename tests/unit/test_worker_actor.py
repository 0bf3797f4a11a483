"""Unit tests for the build-event dramatiq actor."""

from __future__ import annotations

import typing as typ

import dramatiq
import pytest
from dramatiq import Message

from buildwatch.worker import (
    ACTOR_NAME,
    PipelineDispatcher,
    build_event_message,
    create_build_event_actor,
)
from tests.helpers.build_events import BuildEventSpec
from tests.helpers.pipeline_fakes import (
    FakeNotifier,
    GatedNotifier,
    build_pipeline,
    pipeline_factory,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dramatiq.brokers.stub import StubBroker

QUEUE = "cloudBuildSub"


class _RecordingDispatcher:
    """Dispatcher double that records payloads or refuses them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.payloads: list[str] = []

    def submit(self, payload: str) -> None:
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)


def _failure_payload(step: str = "pytest") -> str:
    return BuildEventSpec(
        status="FAILURE", repo_name="ProjectStrand", steps=((step, "FAILURE"),)
    ).encoded()


@pytest.fixture
def run_worker(
    stub_broker: StubBroker,
) -> cabc.Iterator[cabc.Callable[[], dramatiq.Worker]]:
    """Start dramatiq workers on the stub broker and stop them afterwards."""
    workers: list[dramatiq.Worker] = []

    def start() -> dramatiq.Worker:
        worker = dramatiq.Worker(stub_broker, worker_threads=4, worker_timeout=100)
        worker.start()
        workers.append(worker)
        return worker

    yield start
    for worker in workers:
        worker.stop()


class TestHandleBuildEvent:
    """Direct invocations of the actor function."""

    def test_hands_payload_to_dispatcher(self, stub_broker: StubBroker) -> None:
        """The actor only submits the payload and returns."""
        dispatcher = _RecordingDispatcher()
        actor = create_build_event_actor(
            stub_broker,
            queue_name=QUEUE,
            dispatcher=dispatcher,  # type: ignore[arg-type]
        )
        payload = _failure_payload()

        assert actor(payload) is None
        assert dispatcher.payloads == [payload]

    def test_dispatch_error_is_absorbed(self, stub_broker: StubBroker) -> None:
        """A dispatcher that refuses work does not make the actor raise."""
        dispatcher = _RecordingDispatcher(RuntimeError("dispatcher shut down"))
        actor = create_build_event_actor(
            stub_broker,
            queue_name=QUEUE,
            dispatcher=dispatcher,  # type: ignore[arg-type]
        )

        assert actor(_failure_payload()) is None

    def test_actor_declaration(self, stub_broker: StubBroker) -> None:
        """The actor is bound to the subscription queue without retries."""
        actor = create_build_event_actor(
            stub_broker,
            queue_name=QUEUE,
            dispatcher=_RecordingDispatcher(),  # type: ignore[arg-type]
        )

        assert actor.actor_name == ACTOR_NAME
        assert actor.queue_name == QUEUE
        assert actor.options["max_retries"] == 0
        assert "time_limit" not in actor.options
        assert QUEUE in stub_broker.get_declared_queues()


def test_message_acknowledged_before_processing_finishes(
    stub_broker: StubBroker, run_worker: cabc.Callable[[], dramatiq.Worker]
) -> None:
    """The queue drains while the notification is still being delivered."""
    notifier = GatedNotifier()
    dispatcher = PipelineDispatcher(
        pipeline_factory(build_pipeline(notifier=notifier)), max_workers=2
    )
    create_build_event_actor(stub_broker, queue_name=QUEUE, dispatcher=dispatcher)
    stub_broker.enqueue(build_event_message(QUEUE, _failure_payload()))

    run_worker()
    try:
        stub_broker.join(QUEUE, timeout=10_000)
        assert notifier.entered.wait(5), "the pipeline should be delivering"
        assert notifier.sent == [], "delivery should still be held"
    finally:
        notifier.gate.set()
        dispatcher.shutdown(wait=True)

    assert len(notifier.sent) == 1
    assert stub_broker.dead_letters == []


def test_worker_acknowledges_every_message(
    stub_broker: StubBroker, run_worker: cabc.Callable[[], dramatiq.Worker]
) -> None:
    """Concurrent messages are all processed and none is dead-lettered."""
    notifier = FakeNotifier()
    dispatcher = PipelineDispatcher(
        pipeline_factory(build_pipeline(notifier=notifier)), max_workers=4
    )
    create_build_event_actor(stub_broker, queue_name=QUEUE, dispatcher=dispatcher)
    payloads = [_failure_payload(f"step-{index}") for index in range(6)]
    payloads.append("{not json")

    for payload in payloads:
        stub_broker.enqueue(build_event_message(QUEUE, payload))

    worker = run_worker()
    stub_broker.join(QUEUE, timeout=10_000)
    worker.join()
    dispatcher.shutdown(wait=True)

    assert stub_broker.dead_letters == [], "no message should be dead-lettered"
    assert len(notifier.sent) == 6
    for index in range(6):
        assert any(f"*step-{index}*" in text for text in notifier.sent)


def test_build_event_message_targets_actor(stub_broker: StubBroker) -> None:
    """Published messages carry the payload for the named actor."""
    stub_broker.declare_queue(QUEUE)
    payload = _failure_payload()

    stub_broker.enqueue(build_event_message(QUEUE, payload))

    decoded = Message.decode(stub_broker.queues[QUEUE].get_nowait())
    assert decoded.actor_name == ACTOR_NAME
    assert decoded.queue_name == QUEUE
    assert list(decoded.args) == [payload]
