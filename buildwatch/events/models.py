"""Typed build-event structures decoded from bus payloads."""

from __future__ import annotations

import enum

import msgspec


class BuildStatus(enum.StrEnum):
    """Terminal and in-flight statuses reported by the CI system."""

    STATUS_UNKNOWN = "STATUS_UNKNOWN"
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    WORKING = "WORKING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


def parse_build_status(raw: str) -> BuildStatus:
    """Return the :class:`BuildStatus` for ``raw``, or ``STATUS_UNKNOWN``.

    Matching is exact: ``"success"`` is not ``SUCCESS``.
    """
    try:
        return BuildStatus(raw)
    except ValueError:
        return BuildStatus.STATUS_UNKNOWN


class BuildStep(msgspec.Struct, kw_only=True, frozen=True):
    """One step of a build.

    Attributes
    ----------
    id : str
        Step identifier as configured in the build definition.
    status : str
        Raw step status, e.g. ``SUCCESS`` or ``FAILURE``.

    """

    id: str = ""
    status: str = ""


class Substitutions(msgspec.Struct, kw_only=True, frozen=True):
    """Build substitutions describing the source that triggered the build.

    The wire names are the upper-case keys the CI system attaches to every
    build (``COMMIT_SHA``, ``REPO_NAME``, ``BRANCH_NAME``, ``NAMESPACE``).
    """

    commit_sha: str = msgspec.field(default="", name="COMMIT_SHA")
    repo_name: str = msgspec.field(default="", name="REPO_NAME")
    branch_name: str = msgspec.field(default="", name="BRANCH_NAME")
    namespace: str = msgspec.field(default="", name="NAMESPACE")


_NO_SUBSTITUTIONS = Substitutions()


class BuildEvent(msgspec.Struct, kw_only=True, frozen=True):
    """Build-completion event as published on the bus.

    ``steps`` and ``substitutions`` may be ``null`` on the wire; they are
    kept as sent and read through the :attr:`steps` and
    :attr:`substitutions` properties, which treat ``null`` as empty.

    Attributes
    ----------
    status : str
        Raw build status. Kept verbatim so re-encoding is lossless; use
        :attr:`build_status` for comparisons.
    raw_steps : tuple[BuildStep, ...] | None
        Build steps in execution order, as decoded.
    raw_substitutions : Substitutions | None
        Commit, repository, branch and namespace metadata, as decoded.

    """

    status: str
    raw_steps: tuple[BuildStep, ...] | None = msgspec.field(default=(), name="steps")
    raw_substitutions: Substitutions | None = msgspec.field(
        default=None, name="substitutions"
    )

    @classmethod
    def empty(cls) -> BuildEvent:
        """Return the zero-valued event used when a payload cannot be decoded."""
        return cls(status="")

    @property
    def steps(self) -> tuple[BuildStep, ...]:
        """Return the build steps, empty when none were sent."""
        return self.raw_steps or ()

    @property
    def substitutions(self) -> Substitutions:
        """Return the substitutions, all empty when none were sent."""
        if self.raw_substitutions is None:
            return _NO_SUBSTITUTIONS
        return self.raw_substitutions

    @property
    def build_status(self) -> BuildStatus:
        """Return the parsed build status."""
        return parse_build_status(self.status)

    @property
    def repo_name(self) -> str:
        """Return the repository name substitution."""
        return self.substitutions.repo_name

    @property
    def branch_name(self) -> str:
        """Return the branch name substitution."""
        return self.substitutions.branch_name
