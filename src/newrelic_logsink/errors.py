# src/newrelic_logsink/errors.py
"""Configuration errors for transports and metrics sinks.

These are raised while wiring the sink up. They are never raised by
delivery: deliver() and submit() log failures instead.
"""


class TransportConfigurationError(Exception):
    """Raised when a transport cannot be discovered or configured.

    Attributes:
        transport_name: Name of the transport that failed
        message: Human-readable error description
    """

    def __init__(self, transport_name: str, message: str) -> None:
        self.transport_name = transport_name
        self.message = message
        super().__init__(f"Transport '{transport_name}' failed: {message}")


class MetricsSinkError(Exception):
    """Raised when a metrics sink cannot be initialized.

    Attributes:
        sink_name: Name of the metrics sink that failed
        message: Human-readable error description
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        self.message = message
        super().__init__(f"Metrics sink '{sink_name}' failed: {message}")
