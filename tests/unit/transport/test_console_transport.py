# tests/unit/transport/test_console_transport.py
"""Tests for ConsoleTransport."""

import json
from typing import Any

import pytest

from newrelic_logsink.contracts.enums import DeliveryOutcome
from newrelic_logsink.contracts.records import Batch, BatchItem
from newrelic_logsink.errors import TransportConfigurationError
from newrelic_logsink.transport.console import ConsoleTransport


def _batch(*messages: str) -> Batch:
    return Batch(
        application_name="checkout",
        items=tuple(
            BatchItem(timestamp_ms=1000 + i, message=m, attributes={"level": "Warning", "stack_trace": ""})
            for i, m in enumerate(messages)
        ),
    )


class TestConsoleTransportConfigure:
    def test_defaults(self) -> None:
        transport = ConsoleTransport()
        transport.configure({})
        assert transport.name == "console"

    def test_ignores_http_options(self) -> None:
        ConsoleTransport().configure({"endpoint_url": "https://x", "license_key": "k", "timeout_seconds": 40.0})

    @pytest.mark.parametrize(
        ("options", "match"),
        [
            ({"format": "xml"}, "Invalid format"),
            ({"format": 1}, "'format' must be a string"),
            ({"output": "file"}, "Invalid output"),
            ({"output": None}, "'output' must be a string"),
        ],
    )
    def test_invalid_options(self, options: dict[str, Any], match: str) -> None:
        with pytest.raises(TransportConfigurationError, match=match):
            ConsoleTransport().configure(options)


class TestConsoleTransportDeliver:
    def test_json_format_prints_wire_payload(self, capsys: pytest.CaptureFixture[str]) -> None:
        transport = ConsoleTransport()
        transport.configure({"format": "json"})

        assert transport.deliver(_batch("hello")) is DeliveryOutcome.ACCEPTED

        (payload,) = json.loads(capsys.readouterr().out)
        assert payload["common"]["attributes"]["application"] == "checkout"
        assert payload["logs"][0]["message"] == "hello"

    def test_pretty_format_one_line_per_item(self, capsys: pytest.CaptureFixture[str]) -> None:
        transport = ConsoleTransport()
        transport.configure({"format": "pretty", "output": "stderr"})

        transport.deliver(_batch("first", "second"))

        lines = capsys.readouterr().err.splitlines()
        assert lines == ["[1000] checkout Warning: first", "[1001] checkout Warning: second"]

    def test_pretty_heartbeat(self, capsys: pytest.CaptureFixture[str]) -> None:
        transport = ConsoleTransport()
        transport.configure({"format": "pretty"})

        transport.deliver(_batch())

        assert capsys.readouterr().out.strip() == "[heartbeat] checkout"

    def test_unserializable_batch_is_rejected(self, capsys: pytest.CaptureFixture[str]) -> None:
        transport = ConsoleTransport()
        transport.configure({})
        batch = Batch("checkout", (BatchItem(0, "x", {"bad": object()}),))

        assert transport.deliver(batch) is DeliveryOutcome.REJECTED

    def test_close_does_not_close_stream(self) -> None:
        transport = ConsoleTransport()
        transport.configure({})
        transport.close()
        transport.close()
