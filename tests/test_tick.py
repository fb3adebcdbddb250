from __future__ import annotations

import pytest

from pyremotepad.config import MergeTuning
from pyremotepad.exceptions import CommandDecodeError
from pyremotepad.ingestion.http_control import decode_control_body
from pyremotepad.ingestion.socket_text import decode_line
from pyremotepad.models.commands import InteractCommand, MoveCommand
from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction
from pyremotepad.state.merge import InputMergeState
from pyremotepad.tick import TickConsumer


class _FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _consumer(tuning: MergeTuning | None = None, clock: _FakeClock | None = None) -> tuple[ActionQueue, TickConsumer]:
    queue = ActionQueue()
    consumer = TickConsumer(queue, InputMergeState(tuning), clock=clock or _FakeClock())
    return queue, consumer


def _enqueue(queue: ActionQueue, command: MoveCommand | InteractCommand, received_at: float = 0.0) -> None:
    queue.enqueue(PendingAction(command=command, source=IngestionSource.SOCKET, received_at=received_at))


def test_moves_drained_in_one_tick_last_write_wins() -> None:
    queue, consumer = _consumer()
    _enqueue(queue, MoveCommand(x=1, y=0))
    _enqueue(queue, MoveCommand(x=0, y=1))

    frame = consumer.tick(0.016)

    assert frame.applied_actions == 2
    assert consumer.state.mobile_input == Vector2(0.0, 1.0)
    assert frame.final_input == Vector2(0.0, 1.0)
    assert len(queue) == 0


def test_socket_interact_pulses_once() -> None:
    queue, consumer = _consumer()
    _enqueue(queue, decode_line("interact"))

    frame = consumer.tick(0.016)

    assert frame.interact is True
    assert consumer.consume_interact_pulse() is True
    assert consumer.consume_interact_pulse() is False

    frame = consumer.tick(0.016)
    assert frame.interact is False
    assert consumer.consume_interact_pulse() is False


def test_small_http_joystick_falls_back_to_keyboard() -> None:
    queue, consumer = _consumer()
    queue.enqueue_many(
        PendingAction(command=command, source=IngestionSource.HTTP)
        for command in decode_control_body(b'{"joystickX":0.05,"joystickY":0.02,"interact":false}')
    )

    frame = consumer.tick(0.05, KeyboardIntent(horizontal=-1))

    assert consumer.state.mobile_input == Vector2(0.05, 0.02)
    assert frame.final_input == consumer.state.keyboard_current
    assert frame.final_input.is_close(Vector2(-0.5, 0.0))
    assert frame.interact is False


def test_mobile_input_overrides_keyboard() -> None:
    queue, consumer = _consumer()
    _enqueue(queue, MoveCommand(x=0, y=1))

    frame = consumer.tick(0.05, KeyboardIntent.from_keys({"a"}))

    assert frame.final_input == Vector2(0.0, 1.0)
    assert frame.direction.is_close(Vector2(0.0, 0.5))


def test_malformed_commands_leave_state_unchanged() -> None:
    queue, consumer = _consumer()
    before = consumer.state.snapshot()

    for decode, raw in (
        (decode_line, "move,abc,1.0"),
        (decode_line, "mov,0,0"),
        (decode_control_body, b'{"joystickX": 0.3}'),
    ):
        with pytest.raises(CommandDecodeError):
            decode(raw)

    frame = consumer.tick(0.016)

    assert frame.applied_actions == 0
    assert consumer.state.snapshot() == before


def test_direction_eases_towards_keyboard_target() -> None:
    _queue, consumer = _consumer()
    intent = KeyboardIntent.from_keys({"d"})

    magnitudes = [consumer.tick(0.02, intent).direction.magnitude for _ in range(20)]

    assert magnitudes == sorted(magnitudes)
    assert 0.0 < magnitudes[0] < magnitudes[-1] <= 1.0
    assert consumer.get_current_direction().magnitude == magnitudes[-1]
    assert consumer.ticks == 20


def test_idle_timeout_expires_mobile_input_on_tick() -> None:
    clock = _FakeClock(100.0)
    queue, consumer = _consumer(MergeTuning(mobile_idle_timeout=0.5), clock)
    _enqueue(queue, MoveCommand(x=1, y=0), received_at=100.0)

    assert consumer.tick(0.016).final_input == Vector2(1.0, 0.0)

    clock.now = 100.6
    assert consumer.tick(0.016).final_input == Vector2.ZERO
    assert consumer.state.mobile_input == Vector2.ZERO


def test_negative_dt_is_rejected() -> None:
    _queue, consumer = _consumer()
    with pytest.raises(ValueError):
        consumer.tick(-0.1)
