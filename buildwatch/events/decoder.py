"""Decode bus payloads into build events and locate failed steps."""

from __future__ import annotations

import typing as typ

import msgspec

from .errors import DecodeError
from .models import BuildEvent, BuildStatus

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import BuildStep

_DECODER = msgspec.json.Decoder(BuildEvent)
_ENCODER = msgspec.json.Encoder()


def decode_build_event(payload: bytes | str) -> BuildEvent:
    """Decode a JSON payload into a :class:`BuildEvent`.

    Parameters
    ----------
    payload
        Raw message body. ``status`` is required; ``steps`` and
        ``substitutions`` may be absent or ``null`` and unknown fields are
        ignored.

    Returns
    -------
    BuildEvent
        The decoded, immutable event.

    Raises
    ------
    DecodeError
        If the payload is not JSON, is not an object, lacks ``status`` or
        carries a field of the wrong type.

    """
    try:
        return _DECODER.decode(payload)
    except msgspec.DecodeError as exc:
        raise DecodeError.invalid_payload(payload, str(exc)) from exc


def encode_build_event(event: BuildEvent) -> bytes:
    """Encode ``event`` back to JSON using the wire field names."""
    return _ENCODER.encode(event)


def locate_failure_step(steps: cabc.Iterable[BuildStep]) -> str:
    """Return the id of the failed step, or an empty string.

    Every step is inspected; when several failed, the last one wins.
    """
    failure_step = ""
    for step in steps:
        if step.status == BuildStatus.FAILURE:
            failure_step = step.id
    return failure_step
