"""Build notification pipeline.

Public API
----------
BuildNotificationPipeline
    Decode, enrich, render and deliver one build event.
PipelineDependencies
    Frozen dataclass grouping the pipeline collaborators.
PipelineOutcome
    Enum describing what happened to a message.
PipelineEventLogger
    Structured log events for each pipeline stage.
open_pipeline
    Async context manager building a pipeline with its own HTTP clients.

"""

from __future__ import annotations

from .factory import PipelineFactory, open_pipeline
from .observability import PipelineEventLogger, PipelineEventType
from .service import (
    BuildNotificationPipeline,
    Notifier,
    PipelineDependencies,
    PipelineOutcome,
)

__all__ = [
    "BuildNotificationPipeline",
    "Notifier",
    "PipelineDependencies",
    "PipelineEventLogger",
    "PipelineEventType",
    "PipelineFactory",
    "PipelineOutcome",
    "open_pipeline",
]
