# src/newrelic_logsink/contracts/enums.py
"""Levels, outcomes and states used across subsystem boundaries."""

from enum import IntEnum, StrEnum


class LogLevel(IntEnum):
    """Severity of a log record.

    Ordered: comparisons such as ``level >= LogLevel.ERROR`` are meaningful.
    """

    VERBOSE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    @property
    def label(self) -> str:
        """Display name sent to the backend ("Information", "Error", ...)."""
        return self.name.title()

    @classmethod
    def parse(cls, value: "str | int | LogLevel") -> "LogLevel":
        """Parse a level from its name (any case), label, or ordinal.

        Raises:
            ValueError: If the value does not name a level.
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown log level {value!r}. Expected one of: {', '.join(m.label for m in cls)}")


class DeliveryOutcome(StrEnum):
    """Result of one delivery attempt for a batch."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    NETWORK_FAILURE = "network_failure"


class SchedulerState(StrEnum):
    """Lifecycle state of a BatchScheduler."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"
    DRAINING = "draining"
    STOPPED = "stopped"
