# src/newrelic_logsink/core/__init__.py
"""Core infrastructure: Configuration, Logging, Sanitizer, Simplifier."""

from newrelic_logsink.core.config import DEFAULT_ENDPOINT_URL, NewRelicSinkSettings, SanitizerSettings
from newrelic_logsink.core.logging import configure_logging, get_logger
from newrelic_logsink.core.sanitizer import (
    DEFAULT_ALLOWED_PUNCTUATION,
    RESERVED_WORDS,
    STRICT_ALLOWED_PUNCTUATION,
    Sanitizer,
    sanitize,
)
from newrelic_logsink.core.simplifier import TYPE_TAG_KEY, simplify, simplify_key, simplify_scalar

__all__ = [
    "DEFAULT_ALLOWED_PUNCTUATION",
    "DEFAULT_ENDPOINT_URL",
    "RESERVED_WORDS",
    "STRICT_ALLOWED_PUNCTUATION",
    "TYPE_TAG_KEY",
    "NewRelicSinkSettings",
    "SanitizerSettings",
    "Sanitizer",
    "configure_logging",
    "get_logger",
    "sanitize",
    "simplify",
    "simplify_key",
    "simplify_scalar",
]
