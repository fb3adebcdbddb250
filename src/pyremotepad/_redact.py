"""Helpers for safe logging of transport payloads.

Remote clients send arbitrary bytes and the store configuration carries
credentials. Everything that reaches a log line goes through
:func:`redact_for_log` first so a misbehaving client cannot flood the log
and a broker password never ends up in it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "authorization",
        "cookie",
    }
)


def redact_for_log(value: Any, *, max_string: int = 200, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to put in a log record."""
    if _depth > 8:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="replace")
        return redact_for_log(text, max_string=max_string, _depth=_depth)

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<{len(value) - max_string} more>"
        return value

    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>"
            if str(k).lower() in _SENSITIVE_KEYS
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value[:32]]

    return repr(value)[:max_string]
