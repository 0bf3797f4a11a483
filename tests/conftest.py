"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import dramatiq
import pytest
from dramatiq.brokers.stub import StubBroker

if typ.TYPE_CHECKING:
    from pathlib import Path

ROUTES_YAML = """\
branches: [dev, master]
routes:
  - kind: deployment
    repository: superset
    success_delay_s: 0
  - kind: build_failure
    repository: ProjectStrand
"""


@pytest.fixture
def stub_broker() -> typ.Iterator[StubBroker]:
    """Provide an in-memory dramatiq broker and make it the global default."""
    broker = StubBroker()
    broker.emit_after("process_boot")
    dramatiq.set_broker(broker)
    yield broker
    broker.flush_all()
    broker.close()


@pytest.fixture
def routes_file(tmp_path: Path) -> Path:
    """Write a valid routes file without a deployment delay."""
    path = tmp_path / "routes.yaml"
    path.write_text(ROUTES_YAML, encoding="utf-8")
    return path
