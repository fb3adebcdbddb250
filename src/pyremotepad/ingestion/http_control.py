"""HTTP ``/control`` body decoding."""

from __future__ import annotations

from pydantic import ValidationError

from pyremotepad.exceptions import CommandDecodeError
from pyremotepad.models.commands import ControlRequest, InteractCommand, MoveCommand, RemoteCommand

_SOURCE = "http"


def parse_control_request(body: str | bytes) -> ControlRequest:
    try:
        return ControlRequest.model_validate_json(body)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in exc.errors())
        raise CommandDecodeError(f"invalid control payload ({fields})", source=_SOURCE, raw=body) from exc


def decode_control_body(body: str | bytes) -> list[RemoteCommand]:
    """Decode a control request into the commands it carries.

    The joystick vector is always forwarded, whatever its magnitude, so a
    release (``0, 0``) reaches the merge state. ``interact: true`` adds an
    interaction pulse after the move.
    """
    request = parse_control_request(body)
    try:
        move = MoveCommand(x=request.joystick_x, y=request.joystick_y)
    except ValidationError as exc:
        raise CommandDecodeError("joystick axes out of range", source=_SOURCE, raw=body) from exc
    commands: list[RemoteCommand] = [move]
    if request.interact:
        commands.append(InteractCommand())
    return commands
