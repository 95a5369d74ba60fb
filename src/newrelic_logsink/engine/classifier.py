# src/newrelic_logsink/engine/classifier.py
"""Classify log records into telemetry effects.

Rules, evaluated in this order for every record:

1. TransactionName marker ("Category::Name"): set the transaction name.
   Not exclusive; the record continues through the rules below.
2. TimedOperationId / TimedOperationElapsedInMs marker: record a timing
   metric, but only when an integer elapsed time is present (operation
   start records carry no elapsed time and produce nothing).
3. CounterName marker: increment a counter.
4. GaugeName + GaugeValue markers: record a gauge when the value parses
   as a float.
5. Level Error or above: notice an error.
6. Anything else: record a custom event.

Rules 2-6 are exclusive: the first that applies wins. Malformed marker
values skip their effect silently.
"""

from __future__ import annotations

import re
from typing import Any

import structlog

from newrelic_logsink.contracts.effects import (
    Effect,
    IncrementCounter,
    NoticeError,
    RecordCustomEvent,
    RecordGaugeMetric,
    RecordTimingMetric,
    SetTransactionName,
)
from newrelic_logsink.contracts.enums import LogLevel
from newrelic_logsink.contracts.records import MESSAGE_TEMPLATE_FIELD, LogRecord, MarkerKey
from newrelic_logsink.contracts.values import render_value
from newrelic_logsink.core.sanitizer import Sanitizer
from newrelic_logsink.core.simplifier import simplify

logger = structlog.get_logger(__name__)

TRANSACTION_SEPARATOR = "::"

_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")


class Classifier:
    """Turns one LogRecord into the effects it stands for.

    Pure apart from diagnostics: classify() never touches a MetricsSink.
    Unexpected faults (e.g. a timed-operation record with no description)
    propagate to the caller, which drops the record.

    Example:
        classifier = Classifier(Sanitizer(), custom_event_name="LogEvent")
        for effect in classifier.classify(record):
            effect.apply(metrics_sink)
    """

    def __init__(self, sanitizer: Sanitizer | None = None, *, custom_event_name: str = "LogEvent") -> None:
        self._sanitizer = sanitizer or Sanitizer()
        self._custom_event_name = custom_event_name

    @property
    def custom_event_name(self) -> str:
        return self._custom_event_name

    def classify(self, record: LogRecord) -> list[Effect]:
        effects: list[Effect] = []

        if record.has(MarkerKey.TRANSACTION_NAME):
            transaction = self._transaction_effect(record)
            if transaction is not None:
                effects.append(transaction)

        category: Effect | None
        if record.has(MarkerKey.TIMED_OPERATION_ID) or record.has(MarkerKey.TIMED_OPERATION_ELAPSED_MS):
            category = self._timing_effect(record)
        elif record.has(MarkerKey.COUNTER_NAME):
            category = IncrementCounter(self._marker_name(record, MarkerKey.COUNTER_NAME))
        elif record.has(MarkerKey.GAUGE_NAME) and record.has(MarkerKey.GAUGE_VALUE):
            category = self._gauge_effect(record)
        elif record.level >= LogLevel.ERROR:
            category = self._error_effect(record)
        else:
            category = self._custom_event_effect(record)

        if category is not None:
            effects.append(category)
        return effects

    def _transaction_effect(self, record: LogRecord) -> SetTransactionName | None:
        raw = render_value(record.attributes[MarkerKey.TRANSACTION_NAME]).strip('"')
        segments = raw.split(TRANSACTION_SEPARATOR)
        if len(segments) < 2:
            return None
        return SetTransactionName(
            category=self._sanitizer.sanitize(segments[0]),
            name=self._sanitizer.sanitize(segments[1]),
        )

    def _timing_effect(self, record: LogRecord) -> RecordTimingMetric | None:
        if not record.has(MarkerKey.TIMED_OPERATION_ELAPSED_MS):
            # Operation start: paired later by the upstream timer
            return None

        elapsed_text = render_value(record.attributes[MarkerKey.TIMED_OPERATION_ELAPSED_MS])
        if not _INTEGER.match(elapsed_text):
            return None

        if not record.has(MarkerKey.TIMED_OPERATION_DESCRIPTION):
            raise ValueError(f"Timed operation record has no {MarkerKey.TIMED_OPERATION_DESCRIPTION} attribute")
        return RecordTimingMetric(
            name=self._marker_name(record, MarkerKey.TIMED_OPERATION_DESCRIPTION),
            elapsed_ms=int(elapsed_text),
        )

    def _gauge_effect(self, record: LogRecord) -> RecordGaugeMetric | None:
        try:
            value = float(render_value(record.attributes[MarkerKey.GAUGE_VALUE]))
        except ValueError:
            return None
        return RecordGaugeMetric(name=self._marker_name(record, MarkerKey.GAUGE_NAME), value=value)

    def _error_effect(self, record: LogRecord) -> NoticeError:
        attributes: dict[str, str] = {}
        for key, value in record.attributes.items():
            if value is None:
                continue
            safe_key = self._sanitizer.sanitize(key)
            if safe_key in attributes:
                _log_duplicate_key(safe_key, record)
                continue
            attributes[safe_key] = render_value(value)

        if record.exception is not None:
            return NoticeError(error=record.exception, attributes=attributes)
        return NoticeError(error=self._sanitizer.sanitize(record.rendered_message), attributes=attributes)

    def _custom_event_effect(self, record: LogRecord) -> RecordCustomEvent:
        properties: dict[str, Any] = {MESSAGE_TEMPLATE_FIELD: record.message_template}
        for key, value in record.attributes.items():
            if value is None:
                continue
            safe_key = self._sanitizer.sanitize(key)
            if safe_key in properties:
                _log_duplicate_key(safe_key, record)
                continue
            simplified = simplify(value)
            if isinstance(simplified, str):
                simplified = self._sanitizer.sanitize(simplified)
            properties[safe_key] = simplified
        return RecordCustomEvent(event_type=self._custom_event_name, attributes=properties)

    def _marker_name(self, record: LogRecord, key: MarkerKey) -> str:
        return self._sanitizer.sanitize(render_value(record.attributes[key]))


def _log_duplicate_key(safe_key: str, record: LogRecord) -> None:
    logger.warning(
        "Sanitized attribute key already present, dropping duplicate",
        key=safe_key,
        message_template=record.message_template,
    )
