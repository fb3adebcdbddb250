"""Ingestion layer.

This package contains the decoders that turn what a transport receives
(socket lines, HTTP bodies, store notifications) into normalized
:data:`pyremotepad.models.RemoteCommand` values.

Decoders are pure: they raise :class:`pyremotepad.exceptions.CommandDecodeError`
and never touch the queue or the merge state. The transport runtimes own
logging and dropping.
"""

__all__: list[str] = []
