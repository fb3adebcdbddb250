"""pyremotepad - Remote handheld input for a single-threaded simulation loop."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyremotepad")
except PackageNotFoundError:
    __version__ = "0+local"
from pyremotepad.config import MergeTuning, RemotePadConfig, StoreConfig
from pyremotepad.controller import RemoteController
from pyremotepad.exceptions import (
    CommandDecodeError,
    RemotePadConfigError,
    RemotePadError,
    TransportStartError,
)
from pyremotepad.models import (
    InteractCommand,
    KeyboardIntent,
    MoveCommand,
    RemoteCommand,
    Vector2,
)
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.merge import InputMergeState
from pyremotepad.state.status import ConnectionSnapshot
from pyremotepad.tick import FrameInput, TickConsumer

__all__ = [
    "__version__",
    "ActionQueue",
    "CommandDecodeError",
    "ConnectionSnapshot",
    "FrameInput",
    "InputMergeState",
    "InteractCommand",
    "KeyboardIntent",
    "MergeTuning",
    "MoveCommand",
    "RemoteCommand",
    "RemoteController",
    "RemotePadConfig",
    "RemotePadConfigError",
    "RemotePadError",
    "StoreConfig",
    "TickConsumer",
    "TransportStartError",
    "Vector2",
]
