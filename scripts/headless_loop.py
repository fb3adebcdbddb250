#!/usr/bin/env python3
"""Headless tick loop for exercising the remote transports.

Starts every enabled transport, ticks at a fixed rate and prints the
merged direction whenever it changes, plus each interaction pulse. Point a
phone browser at the HTTP page, or use ``send_command.py``, and watch the
output. Requires the package to be installed (``pip install -e .``).
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from pyremotepad import MergeTuning, RemoteController, RemotePadConfig, Vector2

_LOG = logging.getLogger("headless_loop")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a headless remote-input tick loop.")
    parser.add_argument("--rate", type=float, default=60.0, help="Ticks per second.")
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--socket-port", type=int, default=None, help="Override the socket listener port.")
    parser.add_argument("--http-port", type=int, default=None, help="Override the HTTP server port.")
    parser.add_argument("--no-socket", action="store_true", help="Disable the socket listener.")
    parser.add_argument("--no-http", action="store_true", help="Disable the HTTP server.")
    parser.add_argument("--store", action="store_true", help="Subscribe to the real-time store.")
    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=0.0,
        help="Zero mobile input after N seconds without a move (0 = never).",
    )
    parser.add_argument(
        "--status-seconds",
        type=float,
        default=10.0,
        help="Print transport status every N seconds.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


def _build_config(args: argparse.Namespace) -> RemotePadConfig:
    overrides: dict[str, object] = {
        "tuning": MergeTuning(keyboard_enabled=False, mobile_idle_timeout=args.idle_timeout),
    }
    if args.socket_port is not None:
        overrides["socket_port"] = args.socket_port
    if args.http_port is not None:
        overrides["http_port"] = args.http_port
    if args.no_socket:
        overrides["socket_enabled"] = False
    if args.no_http:
        overrides["http_enabled"] = False
    if args.store:
        overrides["store_enabled"] = True
    return RemotePadConfig.from_env(**overrides)


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.rate <= 0:
        print("[loop] --rate must be positive", file=sys.stderr)
        return 2

    config = _build_config(args)
    period = 1.0 / args.rate
    started = time.monotonic()
    last_status = started
    last_direction = Vector2.ZERO

    with RemoteController(config) as controller:
        print(f"[loop] {controller.status_text()}")
        previous = time.monotonic()
        try:
            while True:
                now = time.monotonic()
                frame = controller.tick(now - previous)
                previous = now

                if not frame.direction.is_close(last_direction, tolerance=0.01):
                    last_direction = frame.direction
                    print(f"[loop] direction {frame.direction} (final {frame.final_input})")
                if frame.interact:
                    print("[loop] interact")

                if args.status_seconds > 0 and now - last_status >= args.status_seconds:
                    last_status = now
                    print(f"[loop] {controller.status_text()}")
                if args.duration > 0 and now - started >= args.duration:
                    break

                time.sleep(max(0.0, period - (time.monotonic() - now)))
        except KeyboardInterrupt:
            _LOG.info("Interrupted")

    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
