# tests/fixtures/factories.py
"""Record factories and in-memory doubles for the sink's protocols.

Usage:
    from tests.fixtures.factories import make_record, RecordingTransport
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from newrelic_logsink.contracts.config import RuntimeSinkConfig
from newrelic_logsink.contracts.enums import DeliveryOutcome, LogLevel
from newrelic_logsink.contracts.records import Batch, ExceptionInfo, LogRecord
from newrelic_logsink.contracts.values import Value, to_value

FIXED_TIMESTAMP = datetime(2026, 1, 30, 12, 0, 0, tzinfo=UTC)


def make_record(
    message: str = "Something happened",
    *,
    level: LogLevel = LogLevel.INFORMATION,
    template: str | None = None,
    timestamp: datetime = FIXED_TIMESTAMP,
    exception: ExceptionInfo | None = None,
    **attributes: Any,
) -> LogRecord:
    """Build a LogRecord; keyword attributes are captured with to_value()."""
    captured: dict[str, Value | None] = {
        key: None if raw is None else to_value(raw) for key, raw in attributes.items()
    }
    return LogRecord(
        timestamp=timestamp,
        level=level,
        message_template=template if template is not None else message,
        rendered_message=message,
        attributes=captured,
        exception=exception,
    )


def make_config(**overrides: Any) -> RuntimeSinkConfig:
    """RuntimeSinkConfig with test-friendly defaults (console transport, no heartbeat)."""
    values: dict[str, Any] = {
        "application_name": "checkout",
        "endpoint_url": "https://log-api.example.com/log/v1",
        "license_key": "test-license-key",
        "insert_key": None,
        "period_seconds": 60.0,
        "heartbeat_interval_seconds": None,
        "shutdown_grace_seconds": 5.0,
        "transport": "console",
    }
    values.update(overrides)
    return RuntimeSinkConfig(**values)


class RecordingMetricsSink:
    """MetricsSink that records every call as (method, args) tuples."""

    def __init__(self, *, fail_on: str | None = None) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._fail_on = fail_on

    def _record(self, method: str, *args: Any) -> None:
        if method == self._fail_on:
            raise RuntimeError(f"{method} failed")
        self.calls.append((method, args))

    def set_transaction_name(self, category: str, name: str) -> None:
        self._record("set_transaction_name", category, name)

    def record_timing_metric(self, name: str, elapsed_ms: int) -> None:
        self._record("record_timing_metric", name, elapsed_ms)

    def increment_counter(self, name: str) -> None:
        self._record("increment_counter", name)

    def record_gauge_metric(self, name: str, value: float) -> None:
        self._record("record_gauge_metric", name, value)

    def notice_error(self, error: ExceptionInfo | str, attributes: dict[str, str]) -> None:
        self._record("notice_error", error, attributes)

    def record_custom_event(self, event_type: str, attributes: dict[str, Any]) -> None:
        self._record("record_custom_event", event_type, attributes)

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


class RecordingTransport:
    """Transport that keeps every delivered batch in memory.

    ``outcomes`` is consumed one per delivery; when exhausted, every
    delivery is ACCEPTED. ``delivery_delay`` blocks each delivery until
    ``release`` is set, to hold the scheduler in FLUSHING.
    """

    _name = "recording"

    def __init__(self, outcomes: list[DeliveryOutcome] | None = None) -> None:
        self.batches: list[Batch] = []
        self.options: dict[str, Any] | None = None
        self.closed = False
        self.delivered = threading.Event()
        self.release = threading.Event()
        self.release.set()
        self._outcomes = list(outcomes or [])
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        self.options = dict(config)

    def deliver(self, batch: Batch) -> DeliveryOutcome:
        self.release.wait(timeout=10.0)
        with self._lock:
            self.batches.append(batch)
            outcome = self._outcomes.pop(0) if self._outcomes else DeliveryOutcome.ACCEPTED
        self.delivered.set()
        return outcome

    def close(self) -> None:
        self.closed = True

    @property
    def items(self) -> list[Any]:
        with self._lock:
            return [item for batch in self.batches for item in batch.items]


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
