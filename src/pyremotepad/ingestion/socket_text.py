"""Socket text protocol decoding.

Frames are newline-delimited UTF-8 lines::

    move,<x>,<y>
    interact
"""

from __future__ import annotations

from pyremotepad._constants import VERB_INTERACT, VERB_MOVE
from pyremotepad.exceptions import CommandDecodeError
from pyremotepad.ingestion.normalize import parse_axis
from pyremotepad.models.commands import InteractCommand, MoveCommand, RemoteCommand

_SOURCE = "socket"


def decode_line(line: str) -> RemoteCommand:
    """Decode one protocol line into a command."""
    text = line.strip()
    parts = text.split(",")
    verb = parts[0].strip()

    if verb == VERB_MOVE:
        if len(parts) != 3:
            raise CommandDecodeError(
                f"move expects 2 arguments, got {len(parts) - 1}",
                source=_SOURCE,
                raw=line,
            )
        x = parse_axis(parts[1])
        y = parse_axis(parts[2])
        if x is None or y is None:
            raise CommandDecodeError("move arguments must be finite numbers", source=_SOURCE, raw=line)
        return MoveCommand(x=x, y=y)

    if verb == VERB_INTERACT:
        if len(parts) != 1:
            raise CommandDecodeError("interact takes no arguments", source=_SOURCE, raw=line)
        return InteractCommand()

    raise CommandDecodeError(f"unknown command {verb!r}", source=_SOURCE, raw=line)


class LineFramer:
    """Split a byte stream into protocol lines.

    Bytes are buffered until a newline arrives. A line that grows past
    ``max_line_bytes`` without a newline is discarded, and the rest of it
    up to the next newline is skipped.
    """

    def __init__(self, *, max_line_bytes: int) -> None:
        self._max_line_bytes = max_line_bytes
        self._buffer = bytearray()
        self._discarding = False
        self.overflows = 0

    def feed(self, data: bytes) -> list[bytes]:
        """Add received bytes; return the complete lines now available."""
        lines: list[bytes] = []
        self._buffer.extend(data)
        while True:
            index = self._buffer.find(b"\n")
            if index < 0:
                break
            line = bytes(self._buffer[:index])
            del self._buffer[: index + 1]
            if self._discarding:
                self._discarding = False
                continue
            lines.append(line)

        if len(self._buffer) > self._max_line_bytes:
            self._buffer.clear()
            if not self._discarding:
                self.overflows += 1
            self._discarding = True
        return lines

    def flush(self) -> bytes | None:
        """Return the unterminated remainder (on disconnect) and reset."""
        remainder = bytes(self._buffer)
        discarding = self._discarding
        self._buffer.clear()
        self._discarding = False
        if discarding or not remainder.strip():
            return None
        return remainder


def decode_frame(frame: bytes) -> RemoteCommand | None:
    """Decode one raw line; blank lines decode to ``None``."""
    try:
        text = frame.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CommandDecodeError("line is not valid UTF-8", source=_SOURCE, raw=frame) from exc
    if not text.strip():
        return None
    return decode_line(text)
