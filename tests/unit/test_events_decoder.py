"""Unit tests for build-event decoding."""

from __future__ import annotations

import json

import pytest

from buildwatch.events import (
    BuildEvent,
    BuildStatus,
    BuildStep,
    DecodeError,
    decode_build_event,
    encode_build_event,
    locate_failure_step,
    parse_build_status,
)
from tests.helpers.build_events import BuildEventSpec


class TestDecodeBuildEvent:
    """Tests for decode_build_event."""

    def test_decodes_full_payload(self) -> None:
        """Status, steps and substitutions are all populated."""
        spec = BuildEventSpec(
            status="FAILURE",
            repo_name="ProjectStrand",
            branch_name="master",
            namespace="test",
            steps=(("lint", "SUCCESS"), ("pytest", "FAILURE")),
        )

        event = decode_build_event(spec.encoded())

        assert event.status == "FAILURE", "status should be kept verbatim"
        assert event.build_status is BuildStatus.FAILURE
        assert event.steps == (
            BuildStep(id="lint", status="SUCCESS"),
            BuildStep(id="pytest", status="FAILURE"),
        )
        assert event.repo_name == "ProjectStrand"
        assert event.branch_name == "master"
        assert event.substitutions.namespace == "test"
        assert event.substitutions.commit_sha == spec.commit_sha

    def test_accepts_bytes(self) -> None:
        """Raw message bodies are decoded without a str round trip."""
        event = decode_build_event(BuildEventSpec().encoded().encode("utf-8"))
        assert event.build_status is BuildStatus.SUCCESS

    def test_optional_fields_default_to_empty(self) -> None:
        """Only status is required."""
        event = decode_build_event('{"status": "QUEUED"}')

        assert event.steps == ()
        assert event.repo_name == ""
        assert event.branch_name == ""
        assert event.substitutions.commit_sha == ""

    def test_null_steps_and_substitutions_read_as_empty(self) -> None:
        """Explicit nulls decode like absent fields."""
        event = decode_build_event(
            '{"status": "FAILURE", "steps": null, "substitutions": null}'
        )

        assert event.build_status is BuildStatus.FAILURE
        assert event.steps == ()
        assert event.repo_name == ""
        assert event.substitutions.commit_sha == ""
        assert locate_failure_step(event.steps) == ""

    def test_ignores_unknown_fields(self) -> None:
        """Extra fields emitted by the CI system do not break decoding."""
        payload = BuildEventSpec().payload()
        payload["logUrl"] = "https://console.example.com/builds/1"
        payload["substitutions"]["_HEAD_BRANCH"] = "dev"

        event = decode_build_event(json.dumps(payload))

        assert event.repo_name == "superset"

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[1, 2, 3]",
            '{"steps": []}',
            '{"status": 5}',
            '{"status": "SUCCESS", "steps": "build"}',
        ],
        ids=["not-json", "not-object", "missing-status", "status-type", "steps-type"],
    )
    def test_rejects_malformed_payloads(self, payload: str) -> None:
        """Malformed payloads raise DecodeError."""
        with pytest.raises(DecodeError, match="invalid build event payload"):
            decode_build_event(payload)

    def test_error_preview_is_truncated(self) -> None:
        """Long payloads are shortened in the error message."""
        with pytest.raises(DecodeError) as excinfo:
            decode_build_event("x" * 500)

        assert "x" * 101 not in str(excinfo.value), "preview should be capped"
        assert "..." in str(excinfo.value)


def test_encode_uses_wire_names() -> None:
    """Encoding restores the upper-case substitution keys."""
    event = BuildEventSpec(repo_name="superset", branch_name="dev").event()

    encoded = json.loads(encode_build_event(event))

    assert encoded["substitutions"]["REPO_NAME"] == "superset"
    assert encoded["substitutions"]["BRANCH_NAME"] == "dev"
    assert decode_build_event(encode_build_event(event)) == event


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("SUCCESS", BuildStatus.SUCCESS),
        ("FAILURE", BuildStatus.FAILURE),
        ("success", BuildStatus.STATUS_UNKNOWN),
        (" FAILURE ", BuildStatus.STATUS_UNKNOWN),
        ("TIMEOUT", BuildStatus.TIMEOUT),
        ("", BuildStatus.STATUS_UNKNOWN),
        ("EXPLODED", BuildStatus.STATUS_UNKNOWN),
    ],
)
def test_parse_build_status(raw: str, expected: BuildStatus) -> None:
    """Only exact status names match; anything else is STATUS_UNKNOWN."""
    assert parse_build_status(raw) is expected


def test_empty_event_has_no_fields() -> None:
    """The fallback event carries no status, steps or substitutions."""
    event = BuildEvent.empty()

    assert event.status == ""
    assert event.build_status is BuildStatus.STATUS_UNKNOWN
    assert event.steps == ()
    assert event.repo_name == ""


class TestLocateFailureStep:
    """Tests for locate_failure_step."""

    def test_last_failure_wins(self) -> None:
        """When several steps failed the last one is reported."""
        steps = [
            BuildStep(id="A", status="SUCCESS"),
            BuildStep(id="B", status="FAILURE"),
            BuildStep(id="C", status="FAILURE"),
        ]
        assert locate_failure_step(steps) == "C"

    def test_no_failure_returns_empty(self) -> None:
        """Successful and cancelled steps are not failures."""
        steps = [
            BuildStep(id="A", status="SUCCESS"),
            BuildStep(id="B", status="CANCELLED"),
        ]
        assert locate_failure_step(steps) == ""

    def test_empty_steps(self) -> None:
        """An event without steps has no failed step."""
        assert locate_failure_step(()) == ""

    def test_failure_step_without_id(self) -> None:
        """A failed step lacking an id yields an empty string."""
        steps = [BuildStep(id="A", status="FAILURE"), BuildStep(status="FAILURE")]
        assert locate_failure_step(steps) == ""
