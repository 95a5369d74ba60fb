# src/newrelic_logsink/contracts/effects.py
"""Telemetry effects derived from a log record by the classifier.

Each effect is a frozen value describing one call on a MetricsSink.
Classification is pure; applying the effects is a separate step so tests
can assert on what a record means without any agent present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

from newrelic_logsink.contracts.records import ExceptionInfo

if TYPE_CHECKING:
    from newrelic_logsink.metrics.protocols import MetricsSink


@dataclass(frozen=True, slots=True)
class SetTransactionName:
    category: str
    name: str

    def apply(self, sink: MetricsSink) -> None:
        sink.set_transaction_name(self.category, self.name)


@dataclass(frozen=True, slots=True)
class RecordTimingMetric:
    name: str
    elapsed_ms: int

    def apply(self, sink: MetricsSink) -> None:
        sink.record_timing_metric(self.name, self.elapsed_ms)


@dataclass(frozen=True, slots=True)
class IncrementCounter:
    name: str

    def apply(self, sink: MetricsSink) -> None:
        sink.increment_counter(self.name)


@dataclass(frozen=True, slots=True)
class RecordGaugeMetric:
    name: str
    value: float

    def apply(self, sink: MetricsSink) -> None:
        sink.record_gauge_metric(self.name, self.value)


@dataclass(frozen=True, slots=True)
class NoticeError:
    """Report an error, either a captured exception or a message."""

    error: ExceptionInfo | str
    attributes: dict[str, str] = field(default_factory=dict)

    def apply(self, sink: MetricsSink) -> None:
        sink.notice_error(self.error, self.attributes)


@dataclass(frozen=True, slots=True)
class RecordCustomEvent:
    event_type: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def apply(self, sink: MetricsSink) -> None:
        sink.record_custom_event(self.event_type, self.attributes)


Effect: TypeAlias = (
    SetTransactionName | RecordTimingMetric | IncrementCounter | RecordGaugeMetric | NoticeError | RecordCustomEvent
)
