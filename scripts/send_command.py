#!/usr/bin/env python3
"""Send test commands to a running controller over any transport.

Examples::

    send_command.py socket "move,0.5,0" interact
    send_command.py http --x 0 --y 1 --interact
    send_command.py store --joystick 0.3 -0.2
    send_command.py store --interact 1

Requires the package to be installed (``pip install -e .``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import socket
import sys
from typing import Any, cast

import aiohttp
import paho.mqtt.client as mqtt

from pyremotepad.config import RemotePadConfig

_LOG = logging.getLogger("send_command")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send remote-input test commands.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    sub = parser.add_subparsers(dest="transport", required=True)

    sock = sub.add_parser("socket", help="Send protocol lines over TCP.")
    sock.add_argument("--host", default="127.0.0.1")
    sock.add_argument("--port", type=int, default=None)
    sock.add_argument("lines", nargs="+", help='Lines such as "move,0.5,0" or "interact".')

    http = sub.add_parser("http", help="POST one control request.")
    http.add_argument("--url", default=None, help="Base URL (default http://127.0.0.1:<http_port>).")
    http.add_argument("--x", type=float, default=0.0)
    http.add_argument("--y", type=float, default=0.0)
    http.add_argument("--interact", action="store_true")

    store = sub.add_parser("store", help="Publish a retained store value.")
    group = store.add_mutually_exclusive_group(required=True)
    group.add_argument("--joystick", nargs=2, type=float, metavar=("X", "Y"))
    group.add_argument("--interact", type=int, metavar="VALUE", help="Integer; non-zero fires.")
    return parser.parse_args()


def _send_socket(config: RemotePadConfig, args: argparse.Namespace) -> int:
    port = args.port if args.port is not None else config.socket_port
    payload = "".join(f"{line}\n" for line in args.lines).encode("utf-8")
    with socket.create_connection((args.host, port), timeout=5.0) as conn:
        conn.sendall(payload)
    print(f"[send] {len(args.lines)} line(s) to {args.host}:{port}")
    return 0


async def _send_http(config: RemotePadConfig, args: argparse.Namespace) -> int:
    base = args.url or f"http://127.0.0.1:{config.http_port}"
    body = {"joystickX": args.x, "joystickY": args.y, "interact": args.interact}
    async with aiohttp.ClientSession() as session:
        async with session.post(f"{base.rstrip('/')}/control", json=body) as resp:
            text = await resp.text()
            print(f"[send] HTTP {resp.status}: {text}")
            return 0 if resp.status == 200 else 1


def _send_store(config: RemotePadConfig, args: argparse.Namespace) -> int:
    store = config.store
    host, port, use_tls = store.endpoint()
    if args.joystick is not None:
        topic = store.joystick_topic
        payload = json.dumps({"x": args.joystick[0], "y": args.joystick[1]})
    else:
        topic = store.interact_topic
        payload = json.dumps(args.interact)

    client = mqtt.Client(
        callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
        client_id=f"{store.client_id}-sender",
        protocol=mqtt.MQTTv5,
    )
    client.enable_logger(_LOG)
    if store.username is not None:
        client.username_pw_set(store.username, store.password)
    if use_tls:
        client.tls_set()

    client.connect(host, port, keepalive=store.keepalive)
    client.loop_start()
    try:
        info = client.publish(topic, payload, qos=1, retain=True)
        info.wait_for_publish(timeout=5.0)
    finally:
        client.disconnect()
        client.loop_stop()
    print(f"[send] {topic} = {payload}")
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = RemotePadConfig.from_env()

    try:
        if args.transport == "socket":
            return _send_socket(config, args)
        if args.transport == "http":
            return asyncio.run(_send_http(config, args))
        return _send_store(config, args)
    except (OSError, aiohttp.ClientError) as exc:
        print(f"[send] {args.transport} failed: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(_main())
