"""Deterministic merge policy.

Pure functions only: the state machine in :mod:`pyremotepad.state.merge`
decides *when* each rule runs, this module decides *what* it computes.
"""

from __future__ import annotations

from pyremotepad.models.vector import Vector2


def has_input(vector: Vector2, dead_zone: float) -> bool:
    """A vector counts as input only strictly outside the dead zone."""
    return vector.magnitude > dead_zone


def keyboard_target(horizontal: int, vertical: int) -> Vector2:
    """Combine the two axes; diagonals are normalized to unit length."""
    target = Vector2(float(horizontal), float(vertical))
    if horizontal != 0 and vertical != 0:
        return target.normalized()
    return target


def smooth_toward(
    current: Vector2,
    target: Vector2,
    *,
    dt: float,
    acceleration: float,
    deceleration: float,
    dead_zone: float,
) -> Vector2:
    """Ease *current* towards *target*, or back to zero inside the dead zone."""
    if has_input(target, dead_zone):
        return current.lerp(target, acceleration * dt)
    return current.lerp(Vector2.ZERO, deceleration * dt)


def select_final_input(mobile: Vector2, keyboard: Vector2, dead_zone: float) -> Vector2:
    """Mobile input overrides keyboard input whenever it is outside the dead zone."""
    if has_input(mobile, dead_zone):
        return mobile
    return keyboard


def resolve_interact(mobile_pending: bool, keyboard_pending: bool) -> bool:
    """At most one interaction fires per tick; mobile is checked first."""
    if mobile_pending:
        return True
    return keyboard_pending
