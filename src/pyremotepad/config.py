"""Controller configuration for pyremotepad."""

from __future__ import annotations

import dataclasses
import os
from typing import Any
from urllib.parse import urlsplit

from pyremotepad._constants import (
    DEAD_ZONE,
    DEFAULT_ACCELERATION,
    DEFAULT_DECELERATION,
    DEFAULT_HTTP_HOST,
    DEFAULT_HTTP_PORT,
    DEFAULT_SHUTDOWN_TIMEOUT,
    DEFAULT_SOCKET_HOST,
    DEFAULT_SOCKET_PORT,
    DEFAULT_STORE_CLIENT_ID,
    DEFAULT_STORE_KEEPALIVE,
    DEFAULT_STORE_TOPIC_PREFIX,
    DEFAULT_STORE_URL,
    SOCKET_MAX_LINE_BYTES,
    STORE_INTERACT_KEY,
    STORE_JOYSTICK_KEY,
)
from pyremotepad.exceptions import RemotePadConfigError

_PLAIN_SCHEMES = frozenset({"mqtt", "tcp"})
_TLS_SCHEMES = frozenset({"mqtts", "ssl", "tls"})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _check_port(name: str, port: int) -> None:
    # 0 asks the OS for an ephemeral port.
    if not 0 <= port <= 65535:
        raise RemotePadConfigError(f"{name} must be between 0 and 65535, got {port}")


@dataclasses.dataclass(frozen=True)
class MergeTuning:
    """Smoothing and precedence parameters of the merge policy.

    Parameters
    ----------
    acceleration : float
        Lerp rate (per second) towards a non-zero target.
    deceleration : float
        Lerp rate (per second) back to zero when the target is inside
        the dead zone.
    dead_zone : float
        Magnitude at or below which a vector counts as "no input".
    keyboard_enabled : bool
        Whether local keyboard intent takes part in the merge.
    mobile_idle_timeout : float
        Seconds without a move command after which the last mobile input
        is zeroed. ``0`` (the default) disables the timeout, so a remote
        client that disconnects mid-motion keeps the character moving
        until a new move command arrives.
    """

    acceleration: float = DEFAULT_ACCELERATION
    deceleration: float = DEFAULT_DECELERATION
    dead_zone: float = DEAD_ZONE
    keyboard_enabled: bool = True
    mobile_idle_timeout: float = 0.0

    def __post_init__(self) -> None:
        if self.acceleration < 0 or self.deceleration < 0:
            raise RemotePadConfigError("acceleration and deceleration must be non-negative")
        if self.dead_zone < 0:
            raise RemotePadConfigError(f"dead_zone must be non-negative, got {self.dead_zone}")
        if self.mobile_idle_timeout < 0:
            raise RemotePadConfigError("mobile_idle_timeout must be non-negative")


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """Connection options for the hosted real-time store (an MQTT broker).

    ``url`` selects host, port and TLS: ``mqtt://`` / ``tcp://`` are plain
    (default port 1883), ``mqtts://`` / ``ssl://`` use TLS (default port
    8883). Each store key lives at ``<topic_prefix>/<key>``.
    """

    url: str = DEFAULT_STORE_URL
    username: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    client_id: str = DEFAULT_STORE_CLIENT_ID
    topic_prefix: str = DEFAULT_STORE_TOPIC_PREFIX
    keepalive: int = DEFAULT_STORE_KEEPALIVE

    def __post_init__(self) -> None:
        # Fail at construction rather than when the runtime connects.
        self.endpoint()
        if self.keepalive <= 0:
            raise RemotePadConfigError(f"keepalive must be positive, got {self.keepalive}")

    def endpoint(self) -> tuple[str, int, bool]:
        """Return ``(host, port, use_tls)`` parsed from :attr:`url`."""
        value = self.url.strip()
        if not value:
            raise RemotePadConfigError("Store URL is empty")
        if "://" not in value:
            value = f"mqtt://{value}"

        parts = urlsplit(value)
        scheme = parts.scheme.lower()
        if scheme in _TLS_SCHEMES:
            use_tls = True
        elif scheme in _PLAIN_SCHEMES:
            use_tls = False
        else:
            raise RemotePadConfigError(f"Unsupported store URL scheme: {parts.scheme!r}")

        try:
            port = parts.port
        except ValueError as exc:
            raise RemotePadConfigError(f"Invalid store URL port: {self.url!r}") from exc
        if not parts.hostname:
            raise RemotePadConfigError(f"Store URL has no host: {self.url!r}")
        if port is None:
            port = 8883 if use_tls else 1883
        return parts.hostname, port, use_tls

    def topic(self, key: str) -> str:
        prefix = self.topic_prefix.strip("/")
        return f"{prefix}/{key}" if prefix else key

    @property
    def joystick_topic(self) -> str:
        return self.topic(STORE_JOYSTICK_KEY)

    @property
    def interact_topic(self) -> str:
        return self.topic(STORE_INTERACT_KEY)


@dataclasses.dataclass(frozen=True)
class RemotePadConfig:
    """Controller configuration.

    Parameters
    ----------
    socket_enabled : bool
        Run the raw socket text-protocol listener.
    socket_host : str
        Address the socket listener binds to.
    socket_port : int
        TCP port of the socket listener (``0`` picks a free port).
    socket_max_line_bytes : int
        Longest line accepted before the partial buffer is discarded.
    http_enabled : bool
        Run the HTTP control server.
    http_host : str
        Address the HTTP server binds to.
    http_port : int
        TCP port of the HTTP server (``0`` picks a free port).
    store_enabled : bool
        Subscribe to the hosted real-time store.
    store : StoreConfig
        Store connection options.
    tuning : MergeTuning
        Merge policy parameters.
    shutdown_timeout : float
        Seconds to wait for each transport thread when stopping.
    """

    socket_enabled: bool = True
    socket_host: str = DEFAULT_SOCKET_HOST
    socket_port: int = DEFAULT_SOCKET_PORT
    socket_max_line_bytes: int = SOCKET_MAX_LINE_BYTES
    http_enabled: bool = True
    http_host: str = DEFAULT_HTTP_HOST
    http_port: int = DEFAULT_HTTP_PORT
    store_enabled: bool = False
    store: StoreConfig = dataclasses.field(default_factory=StoreConfig)
    tuning: MergeTuning = dataclasses.field(default_factory=MergeTuning)
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT

    def __post_init__(self) -> None:
        _check_port("socket_port", self.socket_port)
        _check_port("http_port", self.http_port)
        if self.socket_max_line_bytes <= 0:
            raise RemotePadConfigError("socket_max_line_bytes must be positive")
        if self.shutdown_timeout < 0:
            raise RemotePadConfigError("shutdown_timeout must be non-negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> RemotePadConfig:
        """Create configuration from ``REMOTEPAD_*`` environment variables.

        Explicit keyword arguments override environment values. ``store``
        and ``tuning`` overrides may be given either as instances or as
        dicts of field values.

        Returns
        -------
        RemotePadConfig
            Populated configuration.
        """
        env = os.environ

        try:
            store_kwargs: dict[str, Any] = {}
            _ENV_STORE_MAP = {
                "REMOTEPAD_STORE_URL": "url",
                "REMOTEPAD_STORE_USERNAME": "username",
                "REMOTEPAD_STORE_PASSWORD": "password",
                "REMOTEPAD_STORE_CLIENT_ID": "client_id",
                "REMOTEPAD_STORE_TOPIC_PREFIX": "topic_prefix",
            }
            for env_key, field_name in _ENV_STORE_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    store_kwargs[field_name] = val
            keepalive_env = env.get("REMOTEPAD_STORE_KEEPALIVE")
            if keepalive_env is not None:
                store_kwargs["keepalive"] = int(keepalive_env)

            store_overrides = overrides.pop("store", None)
            if isinstance(store_overrides, dict):
                store_kwargs.update(store_overrides)
            elif isinstance(store_overrides, StoreConfig):
                store_kwargs = dataclasses.asdict(store_overrides)

            tuning_kwargs: dict[str, Any] = {}
            _ENV_TUNING_FLOATS = {
                "REMOTEPAD_ACCELERATION": "acceleration",
                "REMOTEPAD_DECELERATION": "deceleration",
                "REMOTEPAD_DEAD_ZONE": "dead_zone",
                "REMOTEPAD_MOBILE_IDLE_TIMEOUT": "mobile_idle_timeout",
            }
            for env_key, field_name in _ENV_TUNING_FLOATS.items():
                val = env.get(env_key)
                if val is not None:
                    tuning_kwargs[field_name] = float(val)
            tuning_kwargs["keyboard_enabled"] = _env_bool(env.get("REMOTEPAD_KEYBOARD_ENABLED"), True)

            tuning_overrides = overrides.pop("tuning", None)
            if isinstance(tuning_overrides, dict):
                tuning_kwargs.update(tuning_overrides)
            elif isinstance(tuning_overrides, MergeTuning):
                tuning_kwargs = dataclasses.asdict(tuning_overrides)

            config_kwargs: dict[str, Any] = {
                "store": StoreConfig(**store_kwargs),
                "tuning": MergeTuning(**tuning_kwargs),
            }

            for env_key, field_name in {
                "REMOTEPAD_SOCKET_HOST": "socket_host",
                "REMOTEPAD_HTTP_HOST": "http_host",
            }.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = val

            for env_key, field_name in {
                "REMOTEPAD_SOCKET_PORT": "socket_port",
                "REMOTEPAD_HTTP_PORT": "http_port",
                "REMOTEPAD_SOCKET_MAX_LINE_BYTES": "socket_max_line_bytes",
            }.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)

            for env_key, field_name, default in (
                ("REMOTEPAD_SOCKET_ENABLED", "socket_enabled", True),
                ("REMOTEPAD_HTTP_ENABLED", "http_enabled", True),
                ("REMOTEPAD_STORE_ENABLED", "store_enabled", False),
            ):
                if field_name not in overrides:
                    config_kwargs[field_name] = _env_bool(env.get(env_key), default)

            timeout_env = env.get("REMOTEPAD_SHUTDOWN_TIMEOUT")
            if timeout_env is not None and "shutdown_timeout" not in overrides:
                config_kwargs["shutdown_timeout"] = float(timeout_env)
        except ValueError as exc:
            raise RemotePadConfigError(f"Invalid REMOTEPAD_* environment value: {exc}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
