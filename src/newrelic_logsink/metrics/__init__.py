# src/newrelic_logsink/metrics/__init__.py
"""Receivers for the telemetry effects derived from log records.

NewRelicAgentMetricsSink lives in metrics/agent.py and needs the optional
``newrelic`` package; it is not imported here.
"""

from newrelic_logsink.metrics.protocols import MetricsSink

__all__ = ["MetricsSink"]
