# tests/unit/core/test_logging_config.py
"""Tests for configure_logging."""

import logging
from collections.abc import Iterator

import pytest
import structlog

from newrelic_logsink.core.logging import DIAGNOSTIC_LOGGER_PREFIX, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    diagnostics = logging.getLogger(DIAGNOSTIC_LOGGER_PREFIX)
    saved = (list(diagnostics.handlers), diagnostics.level, diagnostics.propagate)
    httpx_level = logging.getLogger("httpx").level
    yield
    diagnostics.handlers, diagnostics.propagate = saved[0], saved[2]
    diagnostics.setLevel(saved[1])
    logging.getLogger("httpx").setLevel(httpx_level)
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_diagnostics_get_own_handler(self) -> None:
        configure_logging(level="DEBUG")

        diagnostics = logging.getLogger(DIAGNOSTIC_LOGGER_PREFIX)
        assert len(diagnostics.handlers) == 1
        assert diagnostics.level == logging.DEBUG
        assert diagnostics.propagate is False

    def test_noisy_loggers_held_at_warning(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="INFO")
        handler = logging.getLogger(DIAGNOSTIC_LOGGER_PREFIX).handlers[0]
        assert isinstance(handler, logging.StreamHandler)

        get_logger("newrelic_logsink.engine.pipeline").warning("Record dropped", error="bad value")

        err = capsys.readouterr().err
        assert '"event": "Record dropped"' in err
        assert '"error": "bad value"' in err
        assert "_record" not in err

    def test_repeat_configuration_replaces_handler(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger(DIAGNOSTIC_LOGGER_PREFIX).handlers) == 1
