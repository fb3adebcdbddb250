"""Data models for commands, payloads and vectors."""

from pyremotepad.models._base import RemotePadBaseModel
from pyremotepad.models.commands import (
    ControlRequest,
    InteractCommand,
    JoystickValue,
    MoveCommand,
    RemoteCommand,
)
from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2

__all__ = [
    "ControlRequest",
    "InteractCommand",
    "JoystickValue",
    "KeyboardIntent",
    "MoveCommand",
    "RemoteCommand",
    "RemotePadBaseModel",
    "Vector2",
]
