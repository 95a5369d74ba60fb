# src/newrelic_logsink/transport/http.py
"""HTTP transport for the New Relic Log API.

Each batch is sent as one POST whose body is the gzip-compressed UTF-8 JSON
payload (see contracts/payload.py). Only HTTP 202 counts as accepted.
Delivery is best effort: no retries, no persistence.
"""

from __future__ import annotations

import gzip
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from newrelic_logsink.contracts.enums import DeliveryOutcome
from newrelic_logsink.contracts.payload import LogPayload
from newrelic_logsink.errors import TransportConfigurationError

if TYPE_CHECKING:
    from newrelic_logsink.contracts.records import Batch

logger = structlog.get_logger(__name__)

ACCEPTED_STATUS = 202
DEFAULT_TIMEOUT_SECONDS = 40.0

LICENSE_KEY_HEADER = "X-License-Key"
INSERT_KEY_HEADER = "X-Insert-Key"


def _key_or_none(value: Any) -> str | None:
    """Whitespace-only keys count as unset."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def compress_payload(payload: LogPayload) -> bytes:
    """gzip the payload's UTF-8 JSON text."""
    return gzip.compress(payload.to_json().encode("utf-8"))


class NewRelicLogsTransport:
    """POST batches to the New Relic Log API with httpx.

    Configuration options:
        endpoint_url: Log API URL (required, http or https)
        license_key: License key, sent as X-License-Key
        insert_key: Insert key, sent as X-Insert-Key (used when no license key)
        timeout_seconds: Send timeout (default: 40)

    Outcomes:
        - 202: ACCEPTED
        - any other status: REJECTED, logged with the status code
        - timeout or connection error: NETWORK_FAILURE, logged
        - payload that cannot be serialized: REJECTED, logged

    Example configuration:
        transport: newrelic_logs
        transport_options:
          timeout_seconds: 10
    """

    _name = "newrelic_logs"

    def __init__(self, client: httpx.Client | None = None) -> None:
        """Initialize unconfigured transport.

        Args:
            client: Optional pre-built httpx client. The transport closes it
                on close() either way.
        """
        self._client = client
        self._endpoint_url: str | None = None
        self._headers: dict[str, str] = {}
        self._timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    @property
    def name(self) -> str:
        """Transport name for configuration reference."""
        return self._name

    @property
    def endpoint_url(self) -> str | None:
        return self._endpoint_url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def configure(self, config: dict[str, Any]) -> None:
        """Validate options and build the request headers.

        Raises:
            TransportConfigurationError: If the endpoint is missing or no key is set
        """
        endpoint_url = config.get("endpoint_url")
        if not isinstance(endpoint_url, str) or not endpoint_url:
            raise TransportConfigurationError(self._name, "'endpoint_url' is required")
        try:
            scheme = httpx.URL(endpoint_url).scheme
        except httpx.InvalidURL as e:
            raise TransportConfigurationError(self._name, f"Invalid endpoint_url {endpoint_url!r}: {e}") from e
        if scheme not in ("http", "https"):
            raise TransportConfigurationError(self._name, f"endpoint_url must be http or https, got {endpoint_url!r}")

        timeout_seconds = config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)) or timeout_seconds <= 0:
            raise TransportConfigurationError(
                self._name,
                f"'timeout_seconds' must be a positive number, got {timeout_seconds!r}",
            )

        license_key = _key_or_none(config.get("license_key"))
        insert_key = _key_or_none(config.get("insert_key"))
        headers = {
            "Content-Encoding": "gzip",
            "Content-Type": "application/gzip",
            "Accept": "*/*",
        }
        if license_key:
            headers[LICENSE_KEY_HEADER] = license_key
        elif insert_key:
            headers[INSERT_KEY_HEADER] = insert_key
        else:
            raise TransportConfigurationError(self._name, "One of 'license_key' or 'insert_key' is required")

        self._endpoint_url = endpoint_url
        self._headers = headers
        self._timeout_seconds = float(timeout_seconds)
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout_seconds)

        logger.debug(
            "New Relic logs transport configured",
            endpoint_url=endpoint_url,
            auth_header=LICENSE_KEY_HEADER if license_key else INSERT_KEY_HEADER,
            timeout_seconds=self._timeout_seconds,
        )

    def deliver(self, batch: Batch) -> DeliveryOutcome:
        """POST one batch. Never raises."""
        if self._client is None or self._endpoint_url is None:
            logger.warning("Transport not configured, dropping batch", transport=self._name, item_count=len(batch))
            return DeliveryOutcome.REJECTED

        try:
            body = compress_payload(LogPayload.from_batch(batch))
        except (TypeError, ValueError, RecursionError) as e:
            logger.error(
                "Failed to serialize log batch, batch dropped",
                transport=self._name,
                item_count=len(batch),
                error=str(e),
            )
            return DeliveryOutcome.REJECTED

        try:
            response = self._client.post(
                self._endpoint_url,
                content=body,
                headers=self._headers,
                timeout=self._timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Log batch delivery failed, batch dropped",
                transport=self._name,
                item_count=len(batch),
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryOutcome.NETWORK_FAILURE

        if response.status_code != ACCEPTED_STATUS:
            logger.error(
                "Log batch rejected by endpoint, batch dropped",
                transport=self._name,
                item_count=len(batch),
                status_code=response.status_code,
            )
            return DeliveryOutcome.REJECTED
        return DeliveryOutcome.ACCEPTED

    def close(self) -> None:
        """Close the HTTP client. Idempotent."""
        if self._client is not None:
            self._client.close()
            self._client = None
