from __future__ import annotations

import os

import pytest

from pyremotepad.config import MergeTuning, RemotePadConfig, StoreConfig
from pyremotepad.exceptions import RemotePadConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("REMOTEPAD_"):
            monkeypatch.delenv(key)


def test_defaults() -> None:
    config = RemotePadConfig.from_env()
    assert config.socket_enabled is True
    assert config.socket_port == 8888
    assert config.http_port == 8080
    assert config.store_enabled is False
    assert config.tuning == MergeTuning()
    assert config.store.joystick_topic == "controller/joystick"
    assert config.store.interact_topic == "controller/interact"


def test_environment_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMOTEPAD_SOCKET_PORT", "9999")
    monkeypatch.setenv("REMOTEPAD_HTTP_ENABLED", "off")
    monkeypatch.setenv("REMOTEPAD_STORE_ENABLED", "yes")
    monkeypatch.setenv("REMOTEPAD_STORE_URL", "mqtts://broker.example:8884")
    monkeypatch.setenv("REMOTEPAD_STORE_PASSWORD", "s3cret")
    monkeypatch.setenv("REMOTEPAD_DEAD_ZONE", "0.2")
    monkeypatch.setenv("REMOTEPAD_KEYBOARD_ENABLED", "0")

    config = RemotePadConfig.from_env()

    assert config.socket_port == 9999
    assert config.http_enabled is False
    assert config.store_enabled is True
    assert config.store.endpoint() == ("broker.example", 8884, True)
    assert config.store.password == "s3cret"
    assert "s3cret" not in repr(config)
    assert config.tuning.dead_zone == 0.2
    assert config.tuning.keyboard_enabled is False


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMOTEPAD_SOCKET_PORT", "9999")
    monkeypatch.setenv("REMOTEPAD_STORE_CLIENT_ID", "from-env")

    config = RemotePadConfig.from_env(
        socket_port=1234,
        store={"topic_prefix": "pad"},
        tuning=MergeTuning(mobile_idle_timeout=2.0),
    )

    assert config.socket_port == 1234
    assert config.store.client_id == "from-env"
    assert config.store.joystick_topic == "pad/joystick"
    assert config.tuning.mobile_idle_timeout == 2.0


def test_invalid_environment_value_raises_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMOTEPAD_HTTP_PORT", "eighty")
    with pytest.raises(RemotePadConfigError):
        RemotePadConfig.from_env()


def test_port_range_is_validated() -> None:
    with pytest.raises(RemotePadConfigError):
        RemotePadConfig(socket_port=70000)
    assert RemotePadConfig(http_port=0).http_port == 0


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("mqtt://localhost", ("localhost", 1883, False)),
        ("broker.local:1999", ("broker.local", 1999, False)),
        ("ssl://broker.local", ("broker.local", 8883, True)),
        ("tcp://10.0.0.2:1884", ("10.0.0.2", 1884, False)),
    ],
)
def test_store_endpoint_parsing(url: str, expected: tuple[str, int, bool]) -> None:
    assert StoreConfig(url=url).endpoint() == expected


@pytest.mark.parametrize("url", ["", "ws://broker", "mqtt://", "mqtt://broker:notaport"])
def test_store_endpoint_rejects_bad_urls(url: str) -> None:
    with pytest.raises(RemotePadConfigError):
        StoreConfig(url=url)
