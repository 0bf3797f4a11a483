"""Command-line interface for running and operating buildwatch."""

from __future__ import annotations

import argparse
from pathlib import Path

from dotenv import load_dotenv

from buildwatch.config import BusConfig
from buildwatch.errors import StartupError
from buildwatch.events import DecodeError, decode_build_event
from buildwatch.notify import RoutesValidationError, load_routes
from buildwatch.runtime import run_service
from buildwatch.worker import build_broker, build_event_message, verify_broker


def _publish(payload_path: Path) -> int:
    """Validate and enqueue a build event payload onto the subscription."""
    try:
        payload = payload_path.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"cannot read {payload_path}: {exc}")
        return 1
    try:
        event = decode_build_event(payload)
    except DecodeError as exc:
        print(f"refusing to publish {payload_path}: {exc}")
        return 1

    try:
        bus = BusConfig.from_env()
        broker = build_broker(bus)
        verify_broker(broker)
    except StartupError as exc:
        print(str(exc))
        return 1

    broker.declare_queue(bus.subscription)
    message = broker.enqueue(build_event_message(bus.subscription, payload))
    subs = event.substitutions
    print(
        f"published {event.status or 'event'} for "
        f"{subs.repo_name or '-'}@{subs.branch_name or '-'} "
        f"to {bus.subscription} (message_id={message.message_id})"
    )
    return 0


def _check_routes(routes_path: Path) -> int:
    """Validate a routes file and summarise it."""
    try:
        routes = load_routes(routes_path)
    except RoutesValidationError as exc:
        print(f"Routes validation failed for {routes_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    print(
        f"routes {routes_path} are valid "
        f"({len(routes.routes)} repositories / "
        f"branches: {', '.join(routes.branches)})"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Dispatch a buildwatch subcommand.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 on failure.

    """
    parser = argparse.ArgumentParser(prog="buildwatch", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Consume build events and send notifications")

    publish = subparsers.add_parser(
        "publish", help="Enqueue a JSON build event onto the subscription"
    )
    publish.add_argument("payload", type=Path, help="JSON build event file")

    check = subparsers.add_parser("check-routes", help="Validate a routes file")
    check.add_argument("routes", type=Path, help="YAML routes file to validate")

    args = parser.parse_args(argv)

    if args.command == "run":
        return run_service()

    load_dotenv()
    if args.command == "publish":
        return _publish(args.payload)
    return _check_routes(args.routes)


if __name__ == "__main__":
    raise SystemExit(main())
