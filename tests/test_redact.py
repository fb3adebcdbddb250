from __future__ import annotations

from pyremotepad._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "url": "mqtt://broker",
        "password": "pw",
        "nested": {"Token": "abc", "client_id": "pad"},
    }

    redacted = redact_for_log(payload)
    assert redacted["url"] == "mqtt://broker"
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["Token"] == "<redacted>"
    assert redacted["nested"]["client_id"] == "pad"


def test_redact_for_log_truncates_long_strings_and_bytes() -> None:
    redacted = redact_for_log({"value": "x" * 600}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<590 more>" in redacted["value"]

    assert redact_for_log(b"move,1,0\xff") == "move,1,0�"
    assert redact_for_log(b"y" * 300).endswith("<100 more>")


def test_redact_for_log_caps_sequences() -> None:
    redacted = redact_for_log(list(range(100)))
    assert len(redacted) == 32
    assert redact_for_log((1, "a", None)) == [1, "a", None]
