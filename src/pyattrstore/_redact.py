"""Redaction of attribute payloads for debug logs.

Model attributes often carry form input, so values whose name looks like a
credential are masked before a payload is logged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_FRAGMENTS: tuple[str, ...] = ("password", "secret", "token", "apikey", "cvv", "cardnumber")

_MAX_REPR = 80


def _is_sensitive(name: str) -> bool:
    normalized = name.lower().replace("_", "").replace("-", "")
    return any(fragment in normalized for fragment in _SENSITIVE_FRAGMENTS)


def redact_attributes(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *data* with credential-like attributes masked.

    Nested mappings are redacted the same way; other values longer than a
    short ``repr`` are truncated.
    """
    redacted: dict[str, Any] = {}
    for name, value in data.items():
        if _is_sensitive(str(name)):
            redacted[name] = "<redacted>"
        elif isinstance(value, Mapping):
            redacted[name] = redact_attributes(value)
        elif isinstance(value, (str, bytes, list, tuple)) and len(value) > _MAX_REPR:
            redacted[name] = f"{value[:_MAX_REPR]!r}…<truncated>"
        else:
            redacted[name] = value
    return redacted
