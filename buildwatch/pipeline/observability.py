"""Structured log events for the build notification pipeline.

Each stage of :class:`~buildwatch.pipeline.service.BuildNotificationPipeline`
reports through :class:`PipelineEventLogger`, so operators can follow one
build through the service with a single ``build=`` key.
"""

from __future__ import annotations

import enum
import typing as typ

from buildwatch.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from buildwatch.events import BuildEvent

logger = get_logger(__name__)

_MESSAGE_PREVIEW_LIMIT = 80


class PipelineEventType(enum.StrEnum):
    """Structured log event types for pipeline runs."""

    EVENT_RECEIVED = "buildwatch.event.received"
    DECODE_FAILED = "buildwatch.event.decode_failed"
    ENRICHMENT_FAILED = "buildwatch.enrichment.failed"
    NOTIFICATION_SKIPPED = "buildwatch.notification.skipped"
    NOTIFICATION_SENT = "buildwatch.notification.sent"
    NOTIFICATION_FAILED = "buildwatch.notification.failed"


def describe_build(event: BuildEvent) -> str:
    """Return a compact ``repo@branch:sha`` label for log lines."""
    subs = event.substitutions
    sha = subs.commit_sha[:7] or "-"
    return f"{subs.repo_name or '-'}@{subs.branch_name or '-'}:{sha}"


def _preview(text: str) -> str:
    first_line = text.splitlines()[0] if text else ""
    if len(first_line) > _MESSAGE_PREVIEW_LIMIT:
        return first_line[:_MESSAGE_PREVIEW_LIMIT] + "..."
    return first_line


class PipelineEventLogger:
    """Emit structured pipeline events via femtologging."""

    def log_event_received(self, event: BuildEvent, failure_step: str) -> None:
        """Log a decoded event together with its failed step, if any."""
        log_info(
            logger,
            "[%s] build=%s status=%s steps=%d failure_step=%s",
            PipelineEventType.EVENT_RECEIVED,
            describe_build(event),
            event.status or "-",
            len(event.steps),
            failure_step or "-",
        )

    def log_decode_failed(self, error: BaseException) -> None:
        """Log a payload that could not be decoded."""
        log_error(
            logger,
            "[%s] error_type=%s error_message=%s",
            PipelineEventType.DECODE_FAILED,
            type(error).__name__,
            str(error),
        )

    def log_enrichment_failed(self, event: BuildEvent, error: BaseException) -> None:
        """Log a commit lookup failure; the event proceeds without metadata."""
        log_warning(
            logger,
            "[%s] build=%s error_type=%s error_message=%s",
            PipelineEventType.ENRICHMENT_FAILED,
            describe_build(event),
            type(error).__name__,
            str(error),
        )

    def log_notification_skipped(self, event: BuildEvent) -> None:
        """Log an event that produced no notification."""
        log_info(
            logger,
            "[%s] build=%s status=%s",
            PipelineEventType.NOTIFICATION_SKIPPED,
            describe_build(event),
            event.status or "-",
        )

    def log_notification_sent(self, event: BuildEvent, message: str) -> None:
        """Log a delivered notification."""
        log_info(
            logger,
            "[%s] build=%s message=%s",
            PipelineEventType.NOTIFICATION_SENT,
            describe_build(event),
            _preview(message),
        )

    def log_notification_failed(self, event: BuildEvent, error: BaseException) -> None:
        """Log a notification the webhook did not accept."""
        log_error(
            logger,
            "[%s] build=%s error_type=%s error_message=%s",
            PipelineEventType.NOTIFICATION_FAILED,
            describe_build(event),
            type(error).__name__,
            str(error),
            exc_info=error,
        )
