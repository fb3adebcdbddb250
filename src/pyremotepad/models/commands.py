"""Normalized remote commands and transport payload models.

Every transport decodes its native framing into one of the
:data:`RemoteCommand` variants. Commands are frozen values; once built they
travel through the action queue unchanged.
"""

from __future__ import annotations

import math
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt

from pyremotepad.models._base import RemotePadBaseModel
from pyremotepad.models.vector import Vector2


def _finite_axis(value: float | int) -> float:
    try:
        result = float(value)
    except OverflowError as exc:
        raise ValueError("axis value is too large") from exc
    if not math.isfinite(result):
        raise ValueError("axis value must be finite")
    return result


# Accepts JSON integers and floats but not booleans or numeric strings.
Axis = Annotated[StrictFloat | StrictInt, AfterValidator(_finite_axis)]


class MoveCommand(BaseModel):
    """Set the remote joystick vector.

    ``x``/``y`` are expected in ``[-1, 1]`` but are not clamped here; the
    movement consumer clamps the merged direction instead.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["move"] = "move"
    x: float
    y: float

    @property
    def vector(self) -> Vector2:
        return Vector2(self.x, self.y)


class InteractCommand(BaseModel):
    """A single interaction pulse."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["interact"] = "interact"


RemoteCommand = Annotated[MoveCommand | InteractCommand, Field(discriminator="kind")]


class ControlRequest(RemotePadBaseModel):
    """``POST /control`` body sent by the touch-joystick page."""

    joystick_x: Axis
    joystick_y: Axis
    interact: StrictBool = False


class JoystickValue(RemotePadBaseModel):
    """Value stored under the ``joystick`` key of the real-time store."""

    x: Axis
    y: Axis
