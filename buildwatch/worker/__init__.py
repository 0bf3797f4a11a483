"""Subscription runner, the dramatiq actor it feeds and the pipeline pool."""

from __future__ import annotations

from ._broker import build_broker, ping_broker, verify_broker
from .actor import ACTOR_NAME, build_event_message, create_build_event_actor
from .dispatch import PipelineDispatcher
from .errors import SubscriptionError
from .runner import RunnerState, SubscriptionRunner

__all__ = [
    "ACTOR_NAME",
    "PipelineDispatcher",
    "RunnerState",
    "SubscriptionError",
    "SubscriptionRunner",
    "build_broker",
    "build_event_message",
    "create_build_event_actor",
    "ping_broker",
    "verify_broker",
]
