# src/newrelic_logsink/contracts/config.py
"""Runtime configuration dataclass.

RuntimeSinkConfig is what the engine depends on. It is frozen, carries
parsed values (LogLevel, not "warning"), and is built from the validated
Pydantic settings with from_settings().
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from newrelic_logsink.contracts.enums import LogLevel

if TYPE_CHECKING:
    from newrelic_logsink.core.config import NewRelicSinkSettings


@dataclass(frozen=True, slots=True)
class RuntimeSinkConfig:
    """Runtime configuration for the log pipeline.

    Field Origins (all from NewRelicSinkSettings):
        - minimum_level: parsed from str to LogLevel
        - allowed_punctuation: settings.sanitizer.allowed_punctuation
        - transport_options: endpoint, keys and timeout merged with
          settings.transport_options (explicit options win)
        - everything else: direct mapping
    """

    application_name: str
    endpoint_url: str
    license_key: str | None
    insert_key: str | None
    batch_size_limit: int = 1000
    period_seconds: float = 2.0
    queue_limit: int = 100_000
    heartbeat_interval_seconds: float | None = 120.0
    shutdown_grace_seconds: float = 10.0
    send_timeout_seconds: float = 40.0
    minimum_level: LogLevel = LogLevel.VERBOSE
    custom_event_name: str = "LogEvent"
    transport: str = "newrelic_logs"
    allowed_punctuation: str = ":_.- "
    extra_transport_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: "NewRelicSinkSettings") -> "RuntimeSinkConfig":
        """Factory from the validated settings model."""
        return cls(
            application_name=settings.application_name,
            endpoint_url=settings.endpoint_url,
            license_key=settings.license_key,
            insert_key=settings.insert_key,
            batch_size_limit=settings.batch_size_limit,
            period_seconds=settings.period_seconds,
            queue_limit=settings.queue_limit,
            heartbeat_interval_seconds=settings.heartbeat_interval_seconds,
            shutdown_grace_seconds=settings.shutdown_grace_seconds,
            send_timeout_seconds=settings.send_timeout_seconds,
            minimum_level=LogLevel.parse(settings.minimum_level),
            custom_event_name=settings.custom_event_name,
            transport=settings.transport,
            allowed_punctuation=settings.sanitizer.allowed_punctuation,
            extra_transport_options=dict(settings.transport_options),
        )

    @property
    def transport_options(self) -> dict[str, Any]:
        """Options handed to the transport's configure()."""
        return {
            "endpoint_url": self.endpoint_url,
            "license_key": self.license_key,
            "insert_key": self.insert_key,
            "timeout_seconds": self.send_timeout_seconds,
            **self.extra_transport_options,
        }
