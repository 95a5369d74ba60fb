# src/newrelic_logsink/transport/__init__.py
"""Built-in batch transports.

Available transports:
- NewRelicLogsTransport: POST gzip JSON batches to the New Relic Log API
- ConsoleTransport: Print batches to stdout/stderr for debugging

Plugin registration:
    Transports are registered via the newrelic_logsink_get_transports hook.
    BuiltinTransportsPlugin in this module registers the built-in transports.
"""

from newrelic_logsink.transport.console import ConsoleTransport
from newrelic_logsink.transport.hookspecs import hookimpl
from newrelic_logsink.transport.http import NewRelicLogsTransport
from newrelic_logsink.transport.protocols import TransportProtocol


class BuiltinTransportsPlugin:
    """Plugin that registers built-in transports."""

    @hookimpl
    def newrelic_logsink_get_transports(self) -> list[type]:
        """Return built-in transport classes."""
        return [NewRelicLogsTransport, ConsoleTransport]


__all__ = [
    "BuiltinTransportsPlugin",
    "ConsoleTransport",
    "NewRelicLogsTransport",
    "TransportProtocol",
]
