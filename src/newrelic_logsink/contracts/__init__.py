"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
newrelic_logsink.core.config.
"""

from newrelic_logsink.contracts.config import RuntimeSinkConfig
from newrelic_logsink.contracts.effects import (
    Effect,
    IncrementCounter,
    NoticeError,
    RecordCustomEvent,
    RecordGaugeMetric,
    RecordTimingMetric,
    SetTransactionName,
)
from newrelic_logsink.contracts.enums import DeliveryOutcome, LogLevel, SchedulerState
from newrelic_logsink.contracts.payload import LogPayload, LogPayloadCommon, LogPayloadItem
from newrelic_logsink.contracts.records import (
    LINKING_METADATA_KEY,
    MESSAGE_TEMPLATE_FIELD,
    Batch,
    BatchItem,
    ExceptionInfo,
    LogRecord,
    MarkerKey,
    epoch_millis,
)
from newrelic_logsink.contracts.values import (
    MappingValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
    Value,
    is_value,
    render_value,
    to_value,
)

__all__ = [
    "LINKING_METADATA_KEY",
    "MESSAGE_TEMPLATE_FIELD",
    "Batch",
    "BatchItem",
    "DeliveryOutcome",
    "Effect",
    "ExceptionInfo",
    "IncrementCounter",
    "LogLevel",
    "LogPayload",
    "LogPayloadCommon",
    "LogPayloadItem",
    "LogRecord",
    "MappingValue",
    "MarkerKey",
    "NoticeError",
    "RecordCustomEvent",
    "RecordGaugeMetric",
    "RecordTimingMetric",
    "RuntimeSinkConfig",
    "ScalarValue",
    "SchedulerState",
    "SequenceValue",
    "SetTransactionName",
    "StructureValue",
    "Value",
    "epoch_millis",
    "is_value",
    "render_value",
    "to_value",
]
