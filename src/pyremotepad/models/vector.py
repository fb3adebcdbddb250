"""Immutable 2-D vector used for every input channel."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class Vector2:
    """A 2-D float vector.

    ``lerp`` clamps its interpolation factor to ``[0, 1]`` so a large
    ``rate * dt`` snaps to the target instead of overshooting it.
    """

    x: float = 0.0
    y: float = 0.0

    ZERO: ClassVar[Vector2]

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Vector2:
        length = self.magnitude
        if length == 0.0:
            return Vector2.ZERO
        return Vector2(self.x / length, self.y / length)

    def lerp(self, target: Vector2, t: float) -> Vector2:
        t = 0.0 if t < 0.0 else 1.0 if t > 1.0 else t
        return Vector2(self.x + (target.x - self.x) * t, self.y + (target.y - self.y) * t)

    def clamp_magnitude(self, max_length: float) -> Vector2:
        length = self.magnitude
        if length <= max_length or length == 0.0:
            return self
        scale = max_length / length
        return Vector2(self.x * scale, self.y * scale)

    def is_close(self, other: Vector2, tolerance: float = 1e-9) -> bool:
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"


Vector2.ZERO = Vector2(0.0, 0.0)
