# src/newrelic_logsink/metrics/protocols.py
"""Protocol for receivers of classifier effects.

A MetricsSink stands in for the New Relic agent API. Classification and
sanitization only ever talk to this protocol, so they run without an agent
or a network.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from newrelic_logsink.contracts.records import ExceptionInfo


@runtime_checkable
class MetricsSink(Protocol):
    """One method per classifier effect.

    Error handling:
        Methods may raise. The pipeline treats an exception from any method
        as a per-record fault: the record is dropped with a diagnostic and
        the rest of the batch proceeds.

    Thread Safety:
        Methods are called only from the scheduler's flush thread.
    """

    def set_transaction_name(self, category: str, name: str) -> None:
        """Name the current transaction ``category/name``."""
        ...

    def record_timing_metric(self, name: str, elapsed_ms: int) -> None:
        """Record a response-time metric in milliseconds."""
        ...

    def increment_counter(self, name: str) -> None:
        """Increment a counter metric by one."""
        ...

    def record_gauge_metric(self, name: str, value: float) -> None:
        """Record a gauge reading."""
        ...

    def notice_error(self, error: "ExceptionInfo | str", attributes: dict[str, str]) -> None:
        """Report an error: a captured exception or a message."""
        ...

    def record_custom_event(self, event_type: str, attributes: dict[str, Any]) -> None:
        """Record a custom event of the given type."""
        ...
