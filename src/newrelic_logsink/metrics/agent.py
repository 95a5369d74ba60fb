# src/newrelic_logsink/metrics/agent.py
"""MetricsSink backed by the New Relic Python agent.

Requires the optional ``newrelic`` package (``pip install newrelic-logsink[agent]``).
The agent is imported lazily so the rest of the sink works without it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from newrelic_logsink.contracts.records import ExceptionInfo
from newrelic_logsink.errors import MetricsSinkError

if TYPE_CHECKING:
    from types import ModuleType

logger = structlog.get_logger(__name__)

CUSTOM_METRIC_PREFIX = "Custom/"


class LoggedError(Exception):
    """Stands in for an exception when an error record carries only a message."""


class NewRelicAgentMetricsSink:
    """Forward classifier effects to ``newrelic.agent``.

    Mapping:
        set_transaction_name  -> set_transaction_name(name, group=category)
        record_timing_metric  -> record_custom_metric("Custom/<name>", elapsed_ms)
        increment_counter     -> record_custom_metric("Custom/<name>", 1)
        record_gauge_metric   -> record_custom_metric("Custom/<name>", value)
        notice_error          -> notice_error(exc_info, attributes=...)
        record_custom_event   -> record_custom_event(event_type, attributes)

    Metrics and events are recorded against the registered application, so
    they are kept even when no transaction is active on the flush thread.

    Example:
        sink = NewRelicAgentMetricsSink(application_name="checkout")
        pipeline = create_log_pipeline(config, metrics_sink=sink)
    """

    _name = "newrelic_agent"

    def __init__(
        self,
        application_name: str | None = None,
        *,
        register_timeout_seconds: float | None = None,
        agent: ModuleType | None = None,
    ) -> None:
        """Import the agent and register the application.

        Args:
            application_name: Application to record against. None uses the
                agent's configured app name.
            register_timeout_seconds: Wait for agent registration (None: agent default)
            agent: Pre-imported agent module

        Raises:
            MetricsSinkError: If the newrelic package is not installed
        """
        if agent is None:
            try:
                import newrelic.agent as agent
            except ImportError as e:
                raise MetricsSinkError(
                    self._name,
                    f"newrelic not installed: {e}. Install with: pip install newrelic-logsink[agent]",
                ) from e
        self._agent: Any = agent
        self._application = self._agent.register_application(
            name=application_name,
            timeout=register_timeout_seconds,
        )
        logger.debug("New Relic agent metrics sink ready", application=application_name)

    @property
    def name(self) -> str:
        return self._name

    def set_transaction_name(self, category: str, name: str) -> None:
        self._agent.set_transaction_name(name, group=category)

    def record_timing_metric(self, name: str, elapsed_ms: int) -> None:
        self._record_metric(name, elapsed_ms)

    def increment_counter(self, name: str) -> None:
        self._record_metric(name, 1)

    def record_gauge_metric(self, name: str, value: float) -> None:
        self._record_metric(name, value)

    def notice_error(self, error: ExceptionInfo | str, attributes: dict[str, str]) -> None:
        self._agent.notice_error(
            error=_to_exc_info(error),
            attributes=dict(attributes),
            application=self._application,
        )

    def record_custom_event(self, event_type: str, attributes: dict[str, Any]) -> None:
        self._agent.record_custom_event(event_type, dict(attributes), application=self._application)

    def _record_metric(self, name: str, value: float) -> None:
        self._agent.record_custom_metric(CUSTOM_METRIC_PREFIX + name, value, application=self._application)


def _to_exc_info(error: ExceptionInfo | str) -> tuple[type[BaseException], BaseException, Any]:
    """Build the (type, value, traceback) tuple the agent expects."""
    if isinstance(error, ExceptionInfo):
        if error.exc_info is not None:
            return error.exc_info
        synthesized = LoggedError(f"{error.type_name}: {error.message}")
        return (LoggedError, synthesized, None)
    return (LoggedError, LoggedError(error), None)
