"""Broker construction for the build-event subscription.

This private module builds the dramatiq broker from :class:`BusConfig` and
checks that it is reachable before the runner starts consuming.
"""

from __future__ import annotations

import os
import typing as typ

from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker
from redis.exceptions import RedisError

from buildwatch.errors import StartupError

if typ.TYPE_CHECKING:
    import dramatiq

    from buildwatch.config import BusConfig


def _should_use_stub_broker() -> bool:
    """Return True when ``BUILDWATCH_ALLOW_STUB_BROKER`` is truthy.

    The stub broker keeps messages in memory; it serves local runs and tests
    where no Redis instance is available.
    """
    allow_stub = os.environ.get("BUILDWATCH_ALLOW_STUB_BROKER", "")
    return allow_stub.strip().lower() in {"1", "true", "yes"}


def build_broker(config: BusConfig) -> dramatiq.Broker:
    """Return the broker for the configured bus.

    The project id becomes the Redis key namespace so that several projects
    can share one Redis instance without seeing each other's events.

    Raises
    ------
    StartupError
        If the broker URL is rejected by the Redis client.

    """
    if _should_use_stub_broker():
        return StubBroker()
    try:
        return RedisBroker(url=config.broker_url, namespace=config.project_id)
    except ValueError as exc:
        raise StartupError.invalid_setting(
            "BUILDWATCH_BROKER_URL", config.broker_url, str(exc)
        ) from exc


def ping_broker(broker: dramatiq.Broker) -> None:
    """Ping the Redis server behind ``broker``.

    Brokers without a Redis client, such as the stub broker, are always
    considered reachable.

    Raises
    ------
    redis.exceptions.RedisError
        If the server cannot be reached or rejects the credentials.

    """
    client = getattr(broker, "client", None)
    if client is not None:
        client.ping()


def verify_broker(broker: dramatiq.Broker) -> None:
    """Fail fast when the broker cannot be reached or rejects credentials.

    Raises
    ------
    StartupError
        If the Redis server does not answer a ping.

    """
    try:
        ping_broker(broker)
    except RedisError as exc:
        raise StartupError.from_error(exc) from exc
