"""Real-time store notification decoding.

The store holds two independently changing keys. Each notification carries
the JSON value of exactly one key and decodes only that key:

- ``joystick``: ``{"x": <number>, "y": <number>}``
- ``interact``: ``true``/``false`` or an integer (non-zero is true)
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from pyremotepad._constants import STORE_INTERACT_KEY, STORE_JOYSTICK_KEY
from pyremotepad.exceptions import CommandDecodeError
from pyremotepad.ingestion.normalize import interact_truthiness
from pyremotepad.models.commands import InteractCommand, JoystickValue, MoveCommand, RemoteCommand

_SOURCE = "store"


def _load_json(key: str, payload: bytes | str) -> Any:
    try:
        return json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CommandDecodeError(f"{key} value is not JSON", source=_SOURCE, raw=payload) from exc


def decode_joystick(value: Any) -> MoveCommand:
    try:
        joystick = JoystickValue.model_validate(value)
        return MoveCommand(x=joystick.x, y=joystick.y)
    except ValidationError as exc:
        raise CommandDecodeError("joystick value needs finite numeric x and y", source=_SOURCE, raw=value) from exc


def decode_interact(value: Any) -> InteractCommand | None:
    truthy = interact_truthiness(value)
    if truthy is None:
        raise CommandDecodeError(
            f"interact value must be bool or int, got {type(value).__name__}",
            source=_SOURCE,
            raw=value,
        )
    return InteractCommand() if truthy else None


def decode_notification(key: str, payload: bytes | str) -> RemoteCommand | None:
    """Decode a value-changed notification for *key*.

    Returns ``None`` when the notification carries no command: the key was
    deleted (empty payload) or ``interact`` changed to false.
    """
    if not payload or not payload.strip():
        return None
    value = _load_json(key, payload)
    if value is None:
        return None
    if key == STORE_JOYSTICK_KEY:
        return decode_joystick(value)
    if key == STORE_INTERACT_KEY:
        return decode_interact(value)
    raise CommandDecodeError(f"unknown store key {key!r}", source=_SOURCE, raw=payload)
