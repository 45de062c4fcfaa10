"""Domain models shared across services."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

TimestampLike = Union[str, datetime, None]

# Older observation payloads carried the instant under ``datetime``.
LEGACY_TIMESTAMP_KEY = "datetime"


@dataclass(frozen=True, slots=True)
class RawReading:
    """A single instrument sample as delivered by the observation API."""

    timestamp: TimestampLike
    value: float
    unit: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RawReading":
        timestamp = payload.get("timestamp")
        if timestamp is None or timestamp == "":
            timestamp = payload.get(LEGACY_TIMESTAMP_KEY)
        unit = payload.get("unit")
        return cls(
            timestamp=timestamp,
            value=_coerce_value(payload.get("value")),
            unit=str(unit) if unit is not None else None,
        )

    def with_value(self, value: float) -> "RawReading":
        return RawReading(timestamp=self.timestamp, value=value, unit=self.unit)


@dataclass(frozen=True, slots=True)
class ProcessedPoint:
    """A chart-ready point: UTC instant and processed value."""

    time: datetime
    value: float


def _coerce_value(raw: Any) -> float:
    if isinstance(raw, bool) or raw is None:
        return math.nan
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan
