# src/newrelic_logsink/transport/console.py
"""Console transport for batches.

Writes each batch to stdout or stderr instead of the network. Used for
local debugging and in tests.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, Literal, TextIO, TypeGuard

import structlog

from newrelic_logsink.contracts.enums import DeliveryOutcome
from newrelic_logsink.contracts.payload import LogPayload
from newrelic_logsink.errors import TransportConfigurationError

if TYPE_CHECKING:
    from newrelic_logsink.contracts.records import Batch

logger = structlog.get_logger(__name__)


def _is_valid_format(v: str) -> TypeGuard[Literal["json", "pretty"]]:
    return v in {"json", "pretty"}


def _is_valid_output(v: str) -> TypeGuard[Literal["stdout", "stderr"]]:
    return v in {"stdout", "stderr"}


class ConsoleTransport:
    """Print batches for debugging.

    Supports two output formats:
    - json: The exact JSON payload the Log API would receive, one per line
    - pretty: One line per item with timestamp, level and message

    Configuration options:
        format: Output format - "json" (default) or "pretty"
        output: Output stream - "stdout" (default) or "stderr"

    Keys and endpoint options are accepted and ignored, so a configuration
    can switch between this and the HTTP transport by name alone.
    """

    _name = "console"

    _VALID_FORMATS: frozenset[str] = frozenset({"json", "pretty"})
    _VALID_OUTPUTS: frozenset[str] = frozenset({"stdout", "stderr"})

    def __init__(self) -> None:
        self._format: Literal["json", "pretty"] = "json"
        self._output: Literal["stdout", "stderr"] = "stdout"
        self._stream: TextIO = sys.stdout

    @property
    def name(self) -> str:
        """Transport name for configuration reference."""
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        """Configure output format and stream.

        Raises:
            TransportConfigurationError: If configuration values are invalid
        """
        format_value = config.get("format", "json")
        if not isinstance(format_value, str):
            raise TransportConfigurationError(
                self._name,
                f"'format' must be a string, got {type(format_value).__name__}",
            )
        if _is_valid_format(format_value):
            self._format = format_value
        else:
            raise TransportConfigurationError(
                self._name,
                f"Invalid format '{format_value}'. Must be one of: {', '.join(sorted(self._VALID_FORMATS))}",
            )

        output_value = config.get("output", "stdout")
        if not isinstance(output_value, str):
            raise TransportConfigurationError(
                self._name,
                f"'output' must be a string, got {type(output_value).__name__}",
            )
        if _is_valid_output(output_value):
            self._output = output_value
        else:
            raise TransportConfigurationError(
                self._name,
                f"Invalid output '{output_value}'. Must be one of: {', '.join(sorted(self._VALID_OUTPUTS))}",
            )
        self._stream = sys.stdout if self._output == "stdout" else sys.stderr

        logger.debug("Console transport configured", format=self._format, output=self._output)

    def deliver(self, batch: Batch) -> DeliveryOutcome:
        """Print one batch. Never raises."""
        try:
            if self._format == "json":
                print(LogPayload.from_batch(batch).to_json(), file=self._stream)
            else:
                for line in self._format_pretty(batch):
                    print(line, file=self._stream)
        except Exception as e:
            logger.warning(
                "Failed to write log batch",
                transport=self._name,
                item_count=len(batch),
                error=str(e),
            )
            return DeliveryOutcome.REJECTED
        return DeliveryOutcome.ACCEPTED

    @staticmethod
    def _format_pretty(batch: Batch) -> list[str]:
        """Format: [epoch-ms] application Level: message"""
        if not batch.items:
            return [f"[heartbeat] {batch.application_name}"]
        return [
            f"[{item.timestamp_ms}] {batch.application_name} {item.attributes.get('level', '')}: {item.message}"
            for item in batch.items
        ]

    def close(self) -> None:
        """Flush the stream. Does not close stdout/stderr."""
        self._stream.flush()
