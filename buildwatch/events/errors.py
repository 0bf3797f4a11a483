"""Errors raised while decoding build events."""

from __future__ import annotations

from buildwatch.errors import BuildWatchError

_PAYLOAD_PREVIEW_LIMIT = 100


class DecodeError(BuildWatchError):
    """Raised when a bus payload cannot be decoded into a build event."""

    @classmethod
    def invalid_payload(cls, payload: bytes | str, detail: str) -> DecodeError:
        """Return an error for malformed JSON or a schema mismatch."""
        text = (
            payload.decode("utf-8", errors="replace")
            if isinstance(payload, bytes)
            else payload
        )
        if len(text) > _PAYLOAD_PREVIEW_LIMIT:
            text = text[:_PAYLOAD_PREVIEW_LIMIT] + "..."
        return cls(f"invalid build event payload ({detail}): {text!r}")
