"""Notification routes mapping repositories to message handlers.

Routes replace hard-coded repository names: each entry binds a repository to
a handler kind together with the values its templates need.

Example routes file::

    branches: [dev, master]
    routes:
      - kind: deployment
        repository: superset
        environment: actable-dev
        environment_url: https://dev-nightly.actable.ai
        success_delay_s: 360
      - kind: build_failure
        repository: ProjectStrand

"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from buildwatch.errors import BuildWatchError

YAML_VERSION = (1, 2)

DEFAULT_BRANCHES = ("dev", "master")
DEFAULT_SUCCESS_DELAY_S = 360.0


class RoutesValidationError(BuildWatchError):
    """Raised when a routes file cannot be loaded or is inconsistent."""

    def __init__(self, issues: list[str]) -> None:
        """Initialise with the list of detected issues."""
        self.issues = tuple(issues)
        super().__init__("; ".join(self.issues))


class DeploymentRoute(
    msgspec.Struct, kw_only=True, frozen=True, tag_field="kind", tag="deployment"
):
    """Route for an application that deploys to a shared environment.

    Successful builds are announced once ``success_delay_s`` has elapsed so
    the new version has time to reach the environment; failed builds are
    announced immediately with the failing step.

    Attributes
    ----------
    repository : str
        Repository name as reported in the ``REPO_NAME`` substitution.
    environment : str
        Name of the environment the build deploys to.
    environment_url : str
        Public URL of that environment.
    success_delay_s : float
        Propagation delay applied before announcing a successful build.

    """

    repository: str
    environment: str = "actable-dev"
    environment_url: str = "https://dev-nightly.actable.ai"
    success_delay_s: float = DEFAULT_SUCCESS_DELAY_S


class BuildFailureRoute(
    msgspec.Struct, kw_only=True, frozen=True, tag_field="kind", tag="build_failure"
):
    """Route for a project whose failed builds alone are announced.

    Attributes
    ----------
    repository : str
        Repository name as reported in the ``REPO_NAME`` substitution.
    test_namespace : str
        Namespace marking unit-test builds.
    nightly_branch : str
        Branch whose builds are labelled nightly; other branches are
        labelled production.

    """

    repository: str
    test_namespace: str = "test"
    nightly_branch: str = "dev"


type Route = DeploymentRoute | BuildFailureRoute


class NotificationRoutes(msgspec.Struct, kw_only=True, frozen=True):
    """Branches to watch and the route for each repository."""

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    routes: tuple[DeploymentRoute | BuildFailureRoute, ...] = ()

    def route_for(self, repository: str) -> Route | None:
        """Return the route registered for ``repository``, if any."""
        for route in self.routes:
            if route.repository == repository:
                return route
        return None

    def watches_branch(self, branch: str) -> bool:
        """Return True when builds of ``branch`` may produce notifications."""
        return branch in self.branches


def default_routes() -> NotificationRoutes:
    """Return the built-in routes used when no routes file is configured."""
    return NotificationRoutes(
        routes=(
            DeploymentRoute(repository="superset"),
            BuildFailureRoute(repository="ProjectStrand"),
        ),
    )


def validate_routes(routes: NotificationRoutes) -> NotificationRoutes:
    """Check cross-field rules msgspec cannot express.

    Raises
    ------
    RoutesValidationError
        If no branch is watched, a repository appears twice, a name is blank
        or a delay is negative.

    """
    issues: list[str] = []
    if not routes.branches:
        issues.append("at least one branch must be watched")
    issues.extend(
        f"branch names must be non-empty (entry {index})"
        for index, branch in enumerate(routes.branches)
        if not branch.strip()
    )

    seen: set[str] = set()
    for index, route in enumerate(routes.routes):
        if not route.repository.strip():
            issues.append(f"route {index} has an empty repository name")
        elif route.repository in seen:
            issues.append(f"repository {route.repository!r} is routed more than once")
        seen.add(route.repository)
        if isinstance(route, DeploymentRoute) and route.success_delay_s < 0:
            issues.append(
                f"route {route.repository!r} has a negative success_delay_s "
                f"({route.success_delay_s})"
            )

    if issues:
        raise RoutesValidationError(issues)
    return routes


def load_routes(path: Path | str) -> NotificationRoutes:
    """Parse and validate a YAML routes file."""
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded: typ.Any = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        msg = f"failed to parse routes file {path_obj}: {exc}"
        raise RoutesValidationError([msg]) from exc

    if loaded is None:
        raise RoutesValidationError([f"routes file {path_obj} is empty"])

    try:
        routes = msgspec.convert(loaded, type=NotificationRoutes)
    except msgspec.ValidationError as exc:
        msg = f"schema validation failed: {exc}"
        raise RoutesValidationError([msg]) from exc

    return validate_routes(routes)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
