# tests/fixtures/__init__.py
"""Shared test doubles and record factories."""

from tests.fixtures.factories import (
    RecordingMetricsSink,
    RecordingTransport,
    make_config,
    make_record,
    wait_until,
)

__all__ = [
    "RecordingMetricsSink",
    "RecordingTransport",
    "make_config",
    "make_record",
    "wait_until",
]
