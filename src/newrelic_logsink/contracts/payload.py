# src/newrelic_logsink/contracts/payload.py
"""Wire payload for the New Relic Log API.

The payload shape is fixed:

    [
      {
        "common": {"attributes": {"application": <name>}},
        "logs": [
          {"timestamp": <epoch-ms>, "message": <str>, "attributes": {...}},
          ...
        ]
      }
    ]

The body is a JSON array holding exactly one batch object.
"""

from __future__ import annotations

import base64
import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from newrelic_logsink.contracts.records import Batch


@dataclass(frozen=True, slots=True)
class LogPayloadCommon:
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"attributes": dict(self.attributes)}


@dataclass(frozen=True, slots=True)
class LogPayloadItem:
    timestamp: int
    message: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "message": self.message,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True, slots=True)
class LogPayload:
    common: LogPayloadCommon
    logs: tuple[LogPayloadItem, ...] = ()

    @classmethod
    def from_batch(cls, batch: Batch) -> LogPayload:
        return cls(
            common=LogPayloadCommon(attributes={"application": batch.application_name}),
            logs=tuple(
                LogPayloadItem(
                    timestamp=item.timestamp_ms,
                    message=item.message,
                    attributes=item.attributes,
                )
                for item in batch.items
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "common": self.common.to_dict(),
            "logs": [item.to_dict() for item in self.logs],
        }

    def to_json(self) -> str:
        """Serialize as the one-element JSON array the Log API expects.

        NaN and the infinities are written as text; bare NaN or Infinity
        tokens are not JSON and would get the whole batch rejected.
        """
        return json.dumps([_finite(self.to_dict())], default=_json_default, ensure_ascii=False, allow_nan=False)


def _json_default(obj: Any) -> Any:
    """Encode the simplified primitives json does not know natively."""
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _finite(obj: Any) -> Any:
    """Copy obj with every non-finite float replaced by its text."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else str(obj)
    if isinstance(obj, Decimal):
        return obj if obj.is_finite() else str(obj)
    if isinstance(obj, dict):
        return {k: _finite(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_finite(v) for v in obj]
    return obj
