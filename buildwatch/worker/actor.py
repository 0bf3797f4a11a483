"""Dramatiq actor that receives build events from the subscription queue.

The actor is built per broker rather than at import time because its queue
name and dispatcher come from runtime configuration. It hands each payload
to a :class:`PipelineDispatcher` and returns at once, so the message is
acknowledged on receipt and never redelivered.

Usage
-----
>>> dispatcher = PipelineDispatcher(
...     lambda: open_pipeline(config, routes), max_workers=8
... )
>>> actor = create_build_event_actor(
...     broker, queue_name="cloudBuildSub", dispatcher=dispatcher
... )
>>> actor.send('{"status": "SUCCESS", ...}')

"""

from __future__ import annotations

import typing as typ

import dramatiq

from buildwatch.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    from .dispatch import PipelineDispatcher

logger = get_logger(__name__)

ACTOR_NAME = "handle_build_event"


def create_build_event_actor(
    broker: dramatiq.Broker,
    *,
    queue_name: str,
    dispatcher: PipelineDispatcher,
) -> dramatiq.Actor:
    """Declare the build-event actor on ``broker``.

    Parameters
    ----------
    broker
        Broker the actor consumes from.
    queue_name
        Subscription queue carrying build events.
    dispatcher
        Bounded pool that runs each event through a fresh pipeline.

    Returns
    -------
    dramatiq.Actor
        The declared actor. It never raises and is never retried, so every
        message is acknowledged as soon as it has been handed off.

    """

    def handle_build_event(payload: str) -> None:
        """Hand one build event to the dispatcher."""
        try:
            dispatcher.submit(payload)
        except Exception as exc:  # noqa: BLE001 - messages are acknowledged regardless
            log_exception(
                logger,
                f"Could not dispatch build event: {exc}",
                exc,
            )

    return dramatiq.actor(
        handle_build_event,
        actor_name=ACTOR_NAME,
        queue_name=queue_name,
        broker=broker,
        max_retries=0,
    )


def build_event_message(queue_name: str, payload: str) -> dramatiq.Message:
    """Return a message that the build-event actor on ``queue_name`` consumes.

    Publishers use this to enqueue events without declaring the actor.
    """
    return dramatiq.Message(
        queue_name=queue_name,
        actor_name=ACTOR_NAME,
        args=(payload,),
        kwargs={},
        options={},
    )
