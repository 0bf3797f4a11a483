"""Unit tests for notification routes loading and validation."""

from __future__ import annotations

import typing as typ

import pytest

from buildwatch.notify import (
    BuildFailureRoute,
    DeploymentRoute,
    NotificationRoutes,
    RoutesValidationError,
    default_routes,
    load_routes,
    validate_routes,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

ROUTES_YAML = """\
branches: [dev, master, release]
routes:
  - kind: deployment
    repository: superset
    environment: staging
    environment_url: https://staging.example.com
    success_delay_s: 90
  - kind: build_failure
    repository: ProjectStrand
    nightly_branch: release
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "routes.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_routes_parses_both_kinds(tmp_path: Path) -> None:
    """Tagged entries decode into their route types."""
    routes = load_routes(_write(tmp_path, ROUTES_YAML))

    assert routes.branches == ("dev", "master", "release")
    deployment = routes.route_for("superset")
    assert isinstance(deployment, DeploymentRoute)
    assert deployment.environment == "staging"
    assert deployment.success_delay_s == 90
    failure = routes.route_for("ProjectStrand")
    assert isinstance(failure, BuildFailureRoute)
    assert failure.nightly_branch == "release"
    assert failure.test_namespace == "test", "unset fields keep their defaults"


def test_route_fields_default(tmp_path: Path) -> None:
    """A bare deployment route inherits the built-in environment."""
    text = "routes:\n  - kind: deployment\n    repository: superset\n"
    routes = load_routes(_write(tmp_path, text))

    assert routes.branches == ("dev", "master")
    assert routes.route_for("superset") == DeploymentRoute(repository="superset")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", "is empty"),
        ("routes: [\n", "failed to parse"),
        (
            "routes:\n  - kind: webhook\n    repository: superset\n",
            "schema validation failed",
        ),
        ("routes:\n  - kind: deployment\n", "schema validation failed"),
        ("branches: []\n", "at least one branch"),
        (
            "routes:\n"
            "  - {kind: deployment, repository: superset}\n"
            "  - {kind: build_failure, repository: superset}\n",
            "routed more than once",
        ),
        (
            "routes:\n"
            "  - {kind: deployment, repository: superset, success_delay_s: -1}\n",
            "negative success_delay_s",
        ),
        ("branches: [dev]\nbranches: [master]\n", "failed to parse"),
    ],
    ids=[
        "empty",
        "bad-yaml",
        "unknown-kind",
        "missing-repository",
        "no-branches",
        "duplicate-repository",
        "negative-delay",
        "duplicate-key",
    ],
)
def test_load_routes_rejects_invalid_files(
    tmp_path: Path, text: str, expected: str
) -> None:
    """Invalid routes files raise RoutesValidationError with an issue."""
    with pytest.raises(RoutesValidationError) as excinfo:
        load_routes(_write(tmp_path, text))

    assert any(expected in issue for issue in excinfo.value.issues), (
        f"expected an issue containing {expected!r}, got {excinfo.value.issues}"
    )


def test_load_routes_missing_file(tmp_path: Path) -> None:
    """A missing file is reported rather than raising OSError."""
    with pytest.raises(RoutesValidationError, match="failed to parse"):
        load_routes(tmp_path / "absent.yaml")


def test_validate_routes_collects_every_issue() -> None:
    """All problems are reported together."""
    routes = NotificationRoutes(
        branches=("dev", " "),
        routes=(
            DeploymentRoute(repository="", success_delay_s=-5),
            BuildFailureRoute(repository="ProjectStrand"),
            BuildFailureRoute(repository="ProjectStrand"),
        ),
    )

    with pytest.raises(RoutesValidationError) as excinfo:
        validate_routes(routes)

    assert len(excinfo.value.issues) == 4, excinfo.value.issues


def test_default_routes() -> None:
    """The built-in routes cover the deployment and failure projects."""
    routes = default_routes()

    assert routes.watches_branch("dev")
    assert routes.watches_branch("master")
    assert not routes.watches_branch("feature/login")
    assert isinstance(routes.route_for("superset"), DeploymentRoute)
    assert isinstance(routes.route_for("ProjectStrand"), BuildFailureRoute)
    assert routes.route_for("unknown") is None
    assert validate_routes(routes) is routes
