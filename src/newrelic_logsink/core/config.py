# src/newrelic_logsink/core/config.py
"""
Configuration schema for the New Relic log sink.

Uses Pydantic for validation. Settings are frozen (immutable) after
construction. Where the values come from (files, environment, code) is the
caller's concern; build the model from any mapping:

    settings = NewRelicSinkSettings(
        application_name="checkout",
        endpoint_url="https://log-api.newrelic.com/log/v1",
        license_key=os.environ["NEW_RELIC_LICENSE_KEY"],
    )
"""

from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

from newrelic_logsink.contracts.enums import LogLevel
from newrelic_logsink.core.sanitizer import DEFAULT_ALLOWED_PUNCTUATION, QUOTE_CHARACTER

DEFAULT_ENDPOINT_URL = "https://log-api.newrelic.com/log/v1"


class SanitizerSettings(BaseModel):
    """Allow-list for identifiers sent to the backend.

    Letters and digits are always allowed. ``allowed_punctuation`` lists the
    extra characters that survive sanitization. Two variants exist in the
    wild; the permissive one (``":_.- "``) is the default, the strict one
    (``":_ "``) is available as ``STRICT_ALLOWED_PUNCTUATION``.
    """

    model_config = {"frozen": True}

    allowed_punctuation: str = Field(
        default=DEFAULT_ALLOWED_PUNCTUATION,
        description="Characters besides letters and digits kept by the sanitizer",
    )

    @field_validator("allowed_punctuation")
    @classmethod
    def validate_allowed_punctuation(cls, v: str) -> str:
        if QUOTE_CHARACTER in v:
            raise ValueError(f"{QUOTE_CHARACTER!r} is reserved for quoting reserved words and cannot be allow-listed")
        return v


class NewRelicSinkSettings(BaseModel):
    """Settings for shipping log records to New Relic.

    Exactly one of ``license_key`` / ``insert_key`` must be set; it selects
    the authentication header (``X-License-Key`` or ``X-Insert-Key``).

    Example:
        settings = NewRelicSinkSettings(
            application_name="checkout",
            endpoint_url="https://log-api.newrelic.com/log/v1",
            insert_key="NRII-...",
            batch_size_limit=500,
            period_seconds=5,
        )
    """

    model_config = {"frozen": True}

    application_name: str = Field(description="Application name sent as a common attribute")
    endpoint_url: str = Field(description="Log API endpoint (http or https)")
    license_key: str | None = Field(default=None, description="License key (X-License-Key header)")
    insert_key: str | None = Field(default=None, description="Insert key (X-Insert-Key header)")
    batch_size_limit: int = Field(default=1000, ge=1, description="Maximum records per batch")
    period_seconds: float = Field(default=2.0, gt=0, description="Timer flush period")
    queue_limit: int = Field(default=100_000, ge=1, description="Maximum buffered records before oldest are dropped")
    heartbeat_interval_seconds: float | None = Field(
        default=120.0,
        gt=0,
        description="Empty-batch heartbeat interval after first delivery (null disables)",
    )
    shutdown_grace_seconds: float = Field(default=10.0, ge=0, description="Wait for the final flush on close")
    send_timeout_seconds: float = Field(default=40.0, gt=0, description="HTTP send timeout")
    minimum_level: str = Field(default="verbose", description="Records below this level are not shipped")
    custom_event_name: str = Field(default="LogEvent", description="Event type used for custom events")
    transport: str = Field(default="newrelic_logs", description="Transport plugin name")
    transport_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra transport-specific options",
    )
    sanitizer: SanitizerSettings = Field(default_factory=SanitizerSettings)

    @field_validator("application_name", "custom_event_name", "transport")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("license_key", "insert_key")
    @classmethod
    def normalize_blank_key(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid endpoint_url {v!r}. Expected an http(s) URL like {DEFAULT_ENDPOINT_URL}")
        return v

    @field_validator("minimum_level")
    @classmethod
    def validate_minimum_level(cls, v: str) -> str:
        LogLevel.parse(v)
        return v.lower()

    @model_validator(mode="after")
    def validate_exactly_one_key(self) -> "NewRelicSinkSettings":
        has_license = self.license_key is not None
        has_insert = self.insert_key is not None
        if has_license == has_insert:
            raise ValueError("Exactly one of license_key or insert_key must be set")
        return self
