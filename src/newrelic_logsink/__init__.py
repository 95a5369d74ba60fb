"""
newrelic-logsink: ship structured log records to New Relic.

Records are batched and POSTed to the New Relic Log API. Records carrying
marker attributes are also turned into transaction names, metrics, errors
and custom events through a MetricsSink (the New Relic agent in production).

Quick start:
    from newrelic_logsink import NewRelicSinkSettings, RuntimeSinkConfig, create_log_pipeline

    settings = NewRelicSinkSettings(application_name="checkout", endpoint_url=..., license_key=...)
    pipeline = create_log_pipeline(RuntimeSinkConfig.from_settings(settings))
"""

from newrelic_logsink.contracts.config import RuntimeSinkConfig
from newrelic_logsink.contracts.enums import DeliveryOutcome, LogLevel, SchedulerState
from newrelic_logsink.contracts.records import Batch, BatchItem, ExceptionInfo, LogRecord, MarkerKey
from newrelic_logsink.core.config import NewRelicSinkSettings, SanitizerSettings
from newrelic_logsink.engine.pipeline import LogPipeline
from newrelic_logsink.errors import MetricsSinkError, TransportConfigurationError
from newrelic_logsink.handler import NewRelicLogHandler
from newrelic_logsink.transport.factory import create_log_pipeline

__version__ = "0.1.0"

__all__ = [
    "Batch",
    "BatchItem",
    "DeliveryOutcome",
    "ExceptionInfo",
    "LogLevel",
    "LogPipeline",
    "LogRecord",
    "MarkerKey",
    "MetricsSinkError",
    "NewRelicLogHandler",
    "NewRelicSinkSettings",
    "RuntimeSinkConfig",
    "SanitizerSettings",
    "SchedulerState",
    "TransportConfigurationError",
    "create_log_pipeline",
]
