# src/newrelic_logsink/engine/projection.py
"""Project LogRecords into backend-ready BatchItems."""

from __future__ import annotations

from typing import Any

import structlog

from newrelic_logsink.contracts.records import LINKING_METADATA_KEY, BatchItem, LogRecord
from newrelic_logsink.contracts.values import MappingValue
from newrelic_logsink.core.sanitizer import Sanitizer
from newrelic_logsink.core.simplifier import simplify, simplify_key

logger = structlog.get_logger(__name__)

LEVEL_ATTRIBUTE = "level"
STACK_TRACE_ATTRIBUTE = "stack_trace"


class BatchItemProjector:
    """Builds the flat attribute map shipped with each log line.

    The map always starts with ``level`` and ``stack_trace`` (empty when the
    record has no exception). Every non-null attribute follows under its
    sanitized key with a simplified value. On a duplicate key the first
    occurrence wins.

    Linking metadata (``newrelic.linkingmetadata``, any case) holding a
    mapping is unrolled: its entries become top-level attributes so the
    backend can correlate the line with traces.
    """

    def __init__(self, sanitizer: Sanitizer | None = None) -> None:
        self._sanitizer = sanitizer or Sanitizer()

    def project(self, record: LogRecord) -> BatchItem:
        attributes: dict[str, Any] = {
            LEVEL_ATTRIBUTE: record.level.label,
            STACK_TRACE_ATTRIBUTE: record.exception.stack_trace if record.exception is not None else "",
        }

        for key, value in record.attributes.items():
            if value is None:
                continue
            if key.lower() == LINKING_METADATA_KEY:
                if isinstance(value, MappingValue):
                    for meta_key, meta_value in value.entries:
                        self._add(attributes, simplify_key(meta_key), simplify(meta_value), record)
                continue
            self._add(attributes, self._sanitizer.sanitize(key), simplify(value), record)

        return BatchItem(
            timestamp_ms=record.timestamp_ms,
            message=record.rendered_message,
            attributes=attributes,
        )

    @staticmethod
    def _add(attributes: dict[str, Any], key: str, value: Any, record: LogRecord) -> None:
        if key in attributes:
            logger.warning(
                "Sanitized attribute key already present, dropping duplicate",
                key=key,
                message_template=record.message_template,
            )
            return
        attributes[key] = value
