"""Threaded paho-mqtt subscription to the hosted real-time store."""

from __future__ import annotations

import logging
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyremotepad._constants import (
    STORE_INTERACT_KEY,
    STORE_JOYSTICK_KEY,
    STORE_RECONNECT_MAX_DELAY,
    STORE_RECONNECT_MIN_DELAY,
)
from pyremotepad._redact import redact_for_log
from pyremotepad.config import StoreConfig
from pyremotepad.exceptions import CommandDecodeError, TransportStartError
from pyremotepad.ingestion.store import decode_notification
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction
from pyremotepad.state.status import ConnectionStatus


class StoreSubscriptionRuntime:
    """Subscribes to the store keys and queues a command per value change.

    Each key is a retained topic, so the broker replays the current value
    on (re)subscribe. A payload identical to the last one seen on the same
    topic is not a change and is ignored.
    """

    def __init__(
        self,
        *,
        config: StoreConfig,
        queue: ActionQueue,
        status: ConnectionStatus | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._queue = queue
        self._status = status or ConnectionStatus("store")
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._topics = {
            config.joystick_topic: STORE_JOYSTICK_KEY,
            config.interact_topic: STORE_INTERACT_KEY,
        }
        self._last_payloads: dict[str, bytes] = {}

    @property
    def is_running(self) -> bool:
        """Whether the network loop is running."""
        return self._running

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def topics(self) -> tuple[str, ...]:
        return tuple(self._topics)

    def handle_notification(self, topic: str, payload: bytes) -> None:
        """Decode one value-changed notification and queue its command.

        Called on the paho network thread. Decode failures are logged and
        dropped; the subscription keeps running.
        """
        key = self._topics.get(topic)
        if key is None:
            self._logger.debug("Ignoring store notification on unexpected topic=%s", topic)
            return
        if self._last_payloads.get(topic) == payload:
            self._logger.debug("Store value unchanged topic=%s", topic)
            return
        self._last_payloads[topic] = payload

        try:
            command = decode_notification(key, payload)
        except CommandDecodeError as exc:
            self._logger.warning(
                "Dropped store notification for %s: %s (%r)",
                key,
                exc,
                redact_for_log(payload),
            )
            return

        self._status.mark_seen()
        if command is None:
            self._logger.debug("Store key %s changed without a command", key)
            return
        self._queue.enqueue(PendingAction(command=command, source=IngestionSource.STORE))
        self._logger.debug("Queued %s from store key %s", command, key)

    def handle_disconnect(self, reason: Any) -> None:
        """Record a lost broker connection while paho reconnects."""
        if not self._running:
            return
        self._logger.warning("Store disconnected: %s; reconnecting", reason)
        self._status.mark_failed(f"disconnected: {reason}")

    def start(self) -> None:
        """Start connecting to the broker on the paho network thread.

        A broker that is down or drops the connection is retried with
        backoff; the status reports the transport as not running until a
        connect succeeds. Only invalid connection settings raise.
        """
        self.stop()
        host, port, use_tls = self._config.endpoint()
        self._logger.debug(
            "Store runtime start requested host=%s port=%s tls=%s topics=%s client_id=%s",
            host,
            port,
            use_tls,
            list(self._topics),
            self._config.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._config.client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if self._config.username is not None:
            client.username_pw_set(self._config.username, self._config.password)
        if use_tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("Store connect failed: %s", reason_code)
                self._status.mark_failed(f"connect refused: {reason_code}")
                return
            count = self._status.client_connected()
            self._status.mark_started(f"{host}:{port}")
            self._logger.info("Store connected to %s:%s (connection #%d)", host, port, count)
            # A fresh subscription replays retained values; treat them as changes.
            self._last_payloads.clear()
            c.subscribe([(topic, 0) for topic in self._topics])

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                self.handle_notification(msg.topic, msg.payload)
            except Exception:
                self._logger.warning("Store notification handling failure", exc_info=True)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            self.handle_disconnect(reason_code)

        def on_connect_fail(_client: mqtt.Client, _userdata: Any) -> None:
            self._logger.warning("Store broker %s:%s unreachable; retrying", host, port)
            self._status.mark_failed(f"broker {host}:{port} unreachable")

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect
        client.on_connect_fail = on_connect_fail
        client.reconnect_delay_set(min_delay=STORE_RECONNECT_MIN_DELAY, max_delay=STORE_RECONNECT_MAX_DELAY)

        try:
            client.connect_async(host, port, keepalive=self._config.keepalive)
        except ValueError as exc:
            raise TransportStartError(
                f"Store connection settings for {host}:{port} are invalid: {exc}",
                transport="store",
                address=f"{host}:{port}",
            ) from exc
        self._status.mark_failed(f"connecting to {host}:{port}")
        self._client = client
        self._running = True
        client.loop_start()
        self._logger.debug("Store network loop started")

    def stop(self) -> None:
        """Disconnect and stop the network loop if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("Store disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._status.mark_stopped()
            self._logger.debug("Store network loop stopped")
