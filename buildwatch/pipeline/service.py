"""Build notification pipeline.

Runs one bus message through decode, failure lookup, commit enrichment,
rendering and delivery. Every per-stage failure is logged and absorbed so the
caller can acknowledge the message whatever happened downstream.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from buildwatch.chat import DeliveryError
from buildwatch.events import (
    BuildEvent,
    DecodeError,
    decode_build_event,
    locate_failure_step,
)
from buildwatch.github import CommitInfo, FetchError

from .observability import PipelineEventLogger

if typ.TYPE_CHECKING:
    from buildwatch.github import CommitEnricher
    from buildwatch.notify import NotificationFormatter


class PipelineOutcome(enum.StrEnum):
    """Result of processing one message."""

    SENT = "sent"
    SKIPPED = "skipped"
    DELIVERY_FAILED = "delivery_failed"


class Notifier(typ.Protocol):
    """Interface for delivering rendered notification text."""

    async def send(self, text: str) -> None:
        """Deliver ``text`` or raise :class:`DeliveryError`."""
        ...


@dc.dataclass(frozen=True, slots=True)
class PipelineDependencies:
    """Collaborators of :class:`BuildNotificationPipeline`."""

    enricher: CommitEnricher
    formatter: NotificationFormatter
    notifier: Notifier


class BuildNotificationPipeline:
    """Turn a raw build event into at most one chat notification.

    The notification text is a local value of each :meth:`process` call, so
    concurrent calls never observe each other's messages.

    Parameters
    ----------
    dependencies
        Commit enricher, formatter and notifier.
    event_logger
        Structured event logger; a default instance is created when omitted.

    """

    def __init__(
        self,
        dependencies: PipelineDependencies,
        *,
        event_logger: PipelineEventLogger | None = None,
    ) -> None:
        """Initialise the pipeline with its collaborators."""
        self._enricher = dependencies.enricher
        self._formatter = dependencies.formatter
        self._notifier = dependencies.notifier
        self._event_logger = event_logger or PipelineEventLogger()

    def _decode(self, payload: bytes | str) -> BuildEvent:
        try:
            return decode_build_event(payload)
        except DecodeError as exc:
            self._event_logger.log_decode_failed(exc)
            return BuildEvent.empty()

    async def _enrich(self, event: BuildEvent) -> CommitInfo:
        subs = event.substitutions
        try:
            return await self._enricher.fetch_commit(subs.commit_sha, subs.repo_name)
        except FetchError as exc:
            self._event_logger.log_enrichment_failed(event, exc)
            return CommitInfo()

    async def process(self, payload: bytes | str) -> PipelineOutcome:
        """Process one message payload.

        Parameters
        ----------
        payload
            Raw JSON build event.

        Returns
        -------
        PipelineOutcome
            ``SENT`` when a notification was delivered, ``SKIPPED`` when the
            event did not warrant one and ``DELIVERY_FAILED`` when the webhook
            refused it.

        """
        event = self._decode(payload)
        failure_step = locate_failure_step(event.steps)
        self._event_logger.log_event_received(event, failure_step)

        commit = await self._enrich(event)
        message = await self._formatter.render(event, failure_step, commit)
        if not message:
            self._event_logger.log_notification_skipped(event)
            return PipelineOutcome.SKIPPED

        try:
            await self._notifier.send(message)
        except DeliveryError as exc:
            self._event_logger.log_notification_failed(event, exc)
            return PipelineOutcome.DELIVERY_FAILED

        self._event_logger.log_notification_sent(event, message)
        return PipelineOutcome.SENT
