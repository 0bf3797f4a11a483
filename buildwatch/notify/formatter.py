"""Render build events into chat notification text.

The formatter decides whether an event is worth announcing and, when it is,
which template to use. The decision is driven entirely by
:class:`~buildwatch.notify.routes.NotificationRoutes`.

Usage
-----
>>> formatter = NotificationFormatter(default_routes())
>>> text = await formatter.render(event, failure_step, commit)

"""

from __future__ import annotations

import asyncio
import enum
import typing as typ

from buildwatch.events import BuildStatus
from buildwatch.logging import get_logger, log_info

from .routes import BuildFailureRoute, DeploymentRoute

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from buildwatch.events import BuildEvent
    from buildwatch.github import CommitInfo

    from .routes import NotificationRoutes

logger = get_logger(__name__)

type Sleep = cabc.Callable[[float], cabc.Awaitable[object]]


class BuildType(enum.StrEnum):
    """Label describing which kind of build failed."""

    UNIT_TESTING = "unit-testing"
    NIGHTLY = "nightly"
    PRODUCTION = "production"


def build_type_label(event: BuildEvent, route: BuildFailureRoute) -> BuildType:
    """Classify a build as unit-testing, nightly or production.

    The test namespace takes precedence over the branch.
    """
    if event.substitutions.namespace == route.test_namespace:
        return BuildType.UNIT_TESTING
    if event.branch_name == route.nightly_branch:
        return BuildType.NIGHTLY
    return BuildType.PRODUCTION


def render_commit_details(event: BuildEvent, commit: CommitInfo) -> str:
    """Render the fenced details block shared by every template."""
    lines = [
        f"Repo: {event.repo_name}",
        f"Branch: {event.branch_name}",
        f"Commit message: {commit.message}",
        f"Commit Url: {commit.html_url}",
        f"Author: {commit.author.name}({commit.author.email})",
        f"Committer:{commit.committer.name}({commit.committer.email})",
    ]
    body = "\n".join(lines)
    return f"```{body}\n```"


def render_deployment_success(
    event: BuildEvent, commit: CommitInfo, route: DeploymentRoute
) -> str:
    """Render the announcement of a new version reaching its environment."""
    return (
        f"The new version of *{route.environment}* is available at "
        f"{route.environment_url}. Details: "
        f"{render_commit_details(event, commit)}"
    )


def render_deployment_failure(
    event: BuildEvent,
    failure_step: str,
    commit: CommitInfo,
    route: DeploymentRoute,
) -> str:
    """Render the announcement of a stopped deployment."""
    return (
        f"The deployment of *{route.environment}* on {route.environment_url} "
        f"has been stopped with status *{event.status}* at step "
        f"*{failure_step}*. Details: {render_commit_details(event, commit)}"
    )


def render_build_failure(
    event: BuildEvent,
    failure_step: str,
    commit: CommitInfo,
    route: BuildFailureRoute,
) -> str:
    """Render the announcement of a failed build."""
    build_type = build_type_label(event, route)
    return (
        f"Cloud build for *{build_type}* has been finished with status "
        f"*{event.status}* at step *{failure_step}*. Details: "
        f"{render_commit_details(event, commit)}"
    )


class NotificationFormatter:
    """Decide whether to announce a build event and render the message.

    Parameters
    ----------
    routes
        Watched branches and per-repository handlers.
    sleep
        Awaitable used for the deployment propagation delay. Tests inject a
        recorder in place of :func:`asyncio.sleep`.

    """

    def __init__(
        self,
        routes: NotificationRoutes,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialise the formatter with its routes."""
        self._routes = routes
        self._sleep = sleep

    @property
    def routes(self) -> NotificationRoutes:
        """Return the routes the formatter was built with."""
        return self._routes

    async def render(
        self,
        event: BuildEvent,
        failure_step: str,
        commit: CommitInfo,
    ) -> str | None:
        """Return the notification text for ``event``, or ``None`` to skip it.

        Parameters
        ----------
        event
            Decoded build event.
        failure_step
            Identifier of the failed step, empty when no step failed.
        commit
            Enriched commit metadata, possibly empty.

        Returns
        -------
        str | None
            Message text, or ``None`` when the branch is not watched, the
            repository has no route or the status is not announced.

        """
        if not self._routes.watches_branch(event.branch_name):
            return None

        route = self._routes.route_for(event.repo_name)
        if isinstance(route, DeploymentRoute):
            return await self._render_deployment(event, failure_step, commit, route)
        if isinstance(route, BuildFailureRoute):
            return self._render_build_failure(event, failure_step, commit, route)
        return None

    async def _render_deployment(
        self,
        event: BuildEvent,
        failure_step: str,
        commit: CommitInfo,
        route: DeploymentRoute,
    ) -> str | None:
        status = event.build_status
        if status is BuildStatus.SUCCESS:
            if route.success_delay_s > 0:
                log_info(
                    logger,
                    "Waiting %.0fs for %s to reach %s before announcing",
                    route.success_delay_s,
                    event.repo_name,
                    route.environment,
                )
                await self._sleep(route.success_delay_s)
            return render_deployment_success(event, commit, route)
        if status is BuildStatus.FAILURE:
            return render_deployment_failure(event, failure_step, commit, route)
        return None

    def _render_build_failure(
        self,
        event: BuildEvent,
        failure_step: str,
        commit: CommitInfo,
        route: BuildFailureRoute,
    ) -> str | None:
        if event.build_status is not BuildStatus.FAILURE:
            return None
        return render_build_failure(event, failure_step, commit, route)
