"""Build-event models and decoding."""

from __future__ import annotations

from .decoder import decode_build_event, encode_build_event, locate_failure_step
from .errors import DecodeError
from .models import (
    BuildEvent,
    BuildStatus,
    BuildStep,
    Substitutions,
    parse_build_status,
)

__all__ = [
    "BuildEvent",
    "BuildStatus",
    "BuildStep",
    "DecodeError",
    "Substitutions",
    "decode_build_event",
    "encode_build_event",
    "locate_failure_step",
    "parse_build_status",
]
