"""Normalization helpers.

Centralizes lenient parsing of numbers and truthiness shared by the
decoders.
"""

from __future__ import annotations

import math
from typing import Any


def parse_axis(text: str) -> float | None:
    """Parse a joystick axis from text; ``None`` if it is not a finite number."""
    value = text.strip()
    if not value:
        return None
    try:
        result = float(value)
    except ValueError:
        return None
    if not math.isfinite(result):
        return None
    return result


def interact_truthiness(value: Any) -> bool | None:
    """Interpret an ``interact`` value.

    Booleans are taken as-is and any non-zero integer counts as true.
    Every other type is unsupported and yields ``None``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return None
