# src/newrelic_logsink/transport/protocols.py
"""Protocol definitions for batch transports.

Transports ship one Batch per delivery attempt to a destination (the
New Relic Log API, or the console while debugging).
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from newrelic_logsink.contracts.enums import DeliveryOutcome
    from newrelic_logsink.contracts.records import Batch


@runtime_checkable
class TransportProtocol(Protocol):
    """Protocol for batch transports.

    Lifecycle:
        1. Discovery: newrelic_logsink_get_transports hook returns classes
        2. Instantiation: the factory creates one instance
        3. Configuration: configure() called with transport options
        4. Operation: deliver() called once per flushed batch
        5. Shutdown: close() called after the final flush

    Error handling:
        - configure() MUST raise TransportConfigurationError on invalid config
        - deliver() MUST NOT raise - log and return an outcome
        - close() MUST be idempotent
    """

    @property
    def name(self) -> str:
        """Transport name for configuration reference."""
        ...

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the transport.

        Raises:
            TransportConfigurationError: If configuration is invalid or incomplete
        """
        ...

    def deliver(self, batch: "Batch") -> "DeliveryOutcome":
        """Deliver one batch. Best effort, no retry.

        Thread Safety:
            Called only from the scheduler's flush thread, never
            concurrently with itself.
        """
        ...

    def close(self) -> None:
        """Release resources. Safe to call multiple times."""
        ...
