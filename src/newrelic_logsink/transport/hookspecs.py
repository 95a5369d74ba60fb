# src/newrelic_logsink/transport/hookspecs.py
"""pluggy hook specifications for batch transports.

Transports implement these hooks to register themselves. The factory calls
them while building a LogPipeline to discover available transports.

Usage (implementing a transport plugin):
    from newrelic_logsink.transport.hookspecs import hookimpl

    class MyTransportPlugin:
        @hookimpl
        def newrelic_logsink_get_transports(self):
            return [MyTransport]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from newrelic_logsink.transport.protocols import TransportProtocol

PROJECT_NAME = "newrelic_logsink"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for transport plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class NewRelicLogsinkTransportSpec:
    """Hook specifications for transport plugins."""

    @hookspec
    def newrelic_logsink_get_transports(self) -> list[type["TransportProtocol"]]:  # type: ignore[empty-body]
        """Return transport classes.

        Returns:
            List of transport classes (not instances) that implement
            TransportProtocol
        """
