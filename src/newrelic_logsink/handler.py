# src/newrelic_logsink/handler.py
"""stdlib logging adapter.

Attach NewRelicLogHandler to any logger to ship its records through a
LogPipeline:

    pipeline = create_log_pipeline(config, metrics_sink=sink)
    logging.getLogger().addHandler(NewRelicLogHandler(pipeline))

    logger.info("Order %s paid", order_id, extra={"CounterName": "OrdersPaid"})

Fields passed with ``extra=`` become record attributes, so the marker keys
(TransactionName, CounterName, GaugeName, ...) work from plain logging calls.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from newrelic_logsink.contracts.enums import LogLevel
from newrelic_logsink.contracts.records import ExceptionInfo, LogRecord
from newrelic_logsink.contracts.values import Value, to_value
from newrelic_logsink.core.logging import DIAGNOSTIC_LOGGER_PREFIX

if TYPE_CHECKING:
    from newrelic_logsink.engine.pipeline import LogPipeline

# Attributes every stdlib LogRecord carries; anything else came from extra=
_RESERVED_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def to_log_level(levelno: int) -> LogLevel:
    """Map a stdlib level number onto LogLevel."""
    if levelno >= logging.CRITICAL:
        return LogLevel.FATAL
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARNING
    if levelno >= logging.INFO:
        return LogLevel.INFORMATION
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.VERBOSE


class NewRelicLogHandler(logging.Handler):
    """logging.Handler that converts records and submits them to a LogPipeline.

    Records from this package's own loggers are ignored so diagnostics about
    dropped records never loop back into the pipeline. emit() never raises;
    conversion failures go through handleError() like any stdlib handler.
    """

    def __init__(self, pipeline: LogPipeline, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._pipeline = pipeline

    @property
    def pipeline(self) -> LogPipeline:
        return self._pipeline

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.name == DIAGNOSTIC_LOGGER_PREFIX or record.name.startswith(DIAGNOSTIC_LOGGER_PREFIX + "."):
            return False
        return bool(super().filter(record))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._pipeline.submit(self.convert(record))
        except Exception:
            self.handleError(record)

    def convert(self, record: logging.LogRecord) -> LogRecord:
        """Build a LogRecord from a stdlib record."""
        exception = None
        if record.exc_info and record.exc_info[0] is not None:
            exception = ExceptionInfo.from_exc_info(record.exc_info)  # type: ignore[arg-type]

        return LogRecord(
            timestamp=datetime.fromtimestamp(record.created, UTC),
            level=to_log_level(record.levelno),
            message_template=str(record.msg),
            rendered_message=record.getMessage(),
            attributes=_extra_attributes(record),
            exception=exception,
        )


def _extra_attributes(record: logging.LogRecord) -> dict[str, Value | None]:
    attributes: dict[str, Value | None] = {}
    for key, raw in vars(record).items():
        if key in _RESERVED_RECORD_ATTRIBUTES or key.startswith("_"):
            continue
        attributes[key] = _attribute_value(raw)
    return attributes


def _attribute_value(raw: Any) -> Value | None:
    return None if raw is None else to_value(raw)
