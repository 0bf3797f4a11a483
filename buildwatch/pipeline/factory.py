"""Construct a pipeline with fresh HTTP clients for one invocation."""

from __future__ import annotations

import contextlib
import typing as typ

from buildwatch.chat import ChatWebhookNotifier
from buildwatch.github import GitHubCommitClient
from buildwatch.notify import NotificationFormatter

from .service import BuildNotificationPipeline, PipelineDependencies

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from buildwatch.config import BuildWatchConfig
    from buildwatch.notify import NotificationRoutes

type PipelineFactory = cabc.Callable[
    [], contextlib.AbstractAsyncContextManager[BuildNotificationPipeline]
]


@contextlib.asynccontextmanager
async def open_pipeline(
    config: BuildWatchConfig,
    routes: NotificationRoutes,
) -> cabc.AsyncIterator[BuildNotificationPipeline]:
    """Yield a pipeline whose HTTP clients are closed on exit.

    Clients are bound to the running event loop, so each callback invocation
    opens its own.
    """
    enricher = GitHubCommitClient(config.github)
    notifier = ChatWebhookNotifier(config.chat)
    try:
        yield BuildNotificationPipeline(
            PipelineDependencies(
                enricher=enricher,
                formatter=NotificationFormatter(routes),
                notifier=notifier,
            )
        )
    finally:
        await enricher.aclose()
        await notifier.aclose()
