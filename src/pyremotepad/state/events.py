"""Queued actions.

Every transport wraps each decoded command in a :class:`PendingAction` and
hands it to the queue. Only :meth:`InputMergeState.apply
<pyremotepad.state.merge.InputMergeState.apply>` turns an action into a
state change, on the tick thread.
"""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyremotepad.models.commands import RemoteCommand


class IngestionSource(StrEnum):
    SOCKET = "socket"
    HTTP = "http"
    STORE = "store"


class PendingAction(BaseModel):
    """One decoded command waiting for the next drain."""

    model_config = ConfigDict(frozen=True)

    command: RemoteCommand
    source: IngestionSource
    received_at: float = Field(
        default_factory=time.monotonic,
        description="Monotonic time the transport decoded the command.",
    )
