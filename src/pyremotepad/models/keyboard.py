"""Local keyboard intent for one frame."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KeyboardIntent:
    """Raw directional intent read from the local keyboard.

    ``horizontal``/``vertical`` are in ``{-1, 0, 1}``. ``interact`` is an
    edge: true only on the frame the interact key went down.
    """

    horizontal: int = 0
    vertical: int = 0
    interact: bool = False

    def __post_init__(self) -> None:
        if self.horizontal not in (-1, 0, 1) or self.vertical not in (-1, 0, 1):
            raise ValueError(f"axes must be -1, 0 or 1, got ({self.horizontal}, {self.vertical})")

    @classmethod
    def from_keys(
        cls,
        pressed: Collection[str],
        pressed_this_frame: Collection[str] = (),
    ) -> KeyboardIntent:
        """Map held W/A/S/D keys and a space key-down to an intent.

        A wins over D and W wins over S. Key names are case-insensitive.
        """
        held = {key.lower() for key in pressed}
        down = {key.lower() for key in pressed_this_frame}
        horizontal = -1 if "a" in held else 1 if "d" in held else 0
        vertical = 1 if "w" in held else -1 if "s" in held else 0
        return cls(horizontal=horizontal, vertical=vertical, interact="space" in down or " " in down)
