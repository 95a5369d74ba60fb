# src/newrelic_logsink/contracts/records.py
"""Log records as received from the logging front-end, and their batch form.

LogRecord is what producers submit. BatchItem is its backend-ready
projection (sanitized keys, simplified values). Batch groups items for one
delivery attempt and is discarded afterwards, success or failure.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from types import MappingProxyType, TracebackType
from typing import Any

from newrelic_logsink.contracts.enums import LogLevel
from newrelic_logsink.contracts.values import Value

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MILLISECOND = timedelta(milliseconds=1)

ExcInfo = tuple[type[BaseException], BaseException, TracebackType | None]


class MarkerKey(StrEnum):
    """Reserved attribute names that turn a record into a telemetry signal.

    Upstream helpers (timed operations, counters, gauges, transaction
    scopes) attach these keys; the classifier looks for them.
    """

    TRANSACTION_NAME = "TransactionName"
    TIMED_OPERATION_ID = "TimedOperationId"
    TIMED_OPERATION_ELAPSED_MS = "TimedOperationElapsedInMs"
    TIMED_OPERATION_DESCRIPTION = "TimedOperationDescription"
    COUNTER_NAME = "CounterName"
    GAUGE_NAME = "GaugeName"
    GAUGE_VALUE = "GaugeValue"


# Field added to custom events carrying the record's message template
MESSAGE_TEMPLATE_FIELD = "MessageTemplate"

# Attribute holding distributed-trace linking metadata (compared case-insensitively)
LINKING_METADATA_KEY = "newrelic.linkingmetadata"


@dataclass(frozen=True, slots=True)
class ExceptionInfo:
    """Exception attached to a record.

    Attributes:
        type_name: Exception class name
        message: str(exception)
        stack_trace: Formatted traceback text (may be empty)
        exc_info: Original (type, value, traceback) when captured in-process
    """

    type_name: str
    message: str
    stack_trace: str = ""
    exc_info: ExcInfo | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExceptionInfo:
        return cls.from_exc_info((type(exc), exc, exc.__traceback__))

    @classmethod
    def from_exc_info(cls, exc_info: ExcInfo) -> ExceptionInfo:
        exc_type, exc_value, exc_tb = exc_info
        stack_trace = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        return cls(
            type_name=exc_type.__name__,
            message=str(exc_value),
            stack_trace=stack_trace,
            exc_info=exc_info,
        )


@dataclass(frozen=True, slots=True)
class LogRecord:
    """One structured log entry.

    Attributes keep their upstream insertion order. A ``None`` attribute
    value means null and is skipped by classification and projection.
    """

    timestamp: datetime
    level: LogLevel
    message_template: str
    rendered_message: str
    attributes: Mapping[str, Value | None] = field(default_factory=dict)
    exception: ExceptionInfo | None = None

    def __post_init__(self) -> None:
        # Freeze a private copy so callers cannot mutate a submitted record
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def timestamp_ms(self) -> int:
        """Milliseconds since the Unix epoch. Naive timestamps are read as UTC."""
        return epoch_millis(self.timestamp)

    def has(self, key: str) -> bool:
        """True if the attribute is present, even when its value is null."""
        return key in self.attributes


def epoch_millis(instant: datetime) -> int:
    """Convert an instant to integer epoch milliseconds (floored)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return (instant - _EPOCH) // _ONE_MILLISECOND


@dataclass(frozen=True, slots=True)
class BatchItem:
    """Backend-ready projection of a LogRecord.

    ``attributes`` always contains ``level`` and ``stack_trace``.
    """

    timestamp_ms: int
    message: str
    attributes: dict[str, Any]


@dataclass(frozen=True, slots=True)
class Batch:
    """Items for one delivery attempt plus their common attributes."""

    application_name: str
    items: tuple[BatchItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)
