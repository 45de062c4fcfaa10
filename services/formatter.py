"""Normalisation of processed readings into chart points."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from models.records import LEGACY_TIMESTAMP_KEY, ProcessedPoint, RawReading

logger = logging.getLogger(__name__)

ReadingLike = Union[RawReading, Mapping[str, Any]]


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        candidate = value.strip()
        if not candidate:
            raise ValueError("Timestamp is empty.")

        if candidate.endswith(("Z", "z")):
            candidate = candidate[:-1] + "+00:00"

        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def _fields(point: ReadingLike) -> tuple[Any, Any]:
    if isinstance(point, RawReading):
        return point.timestamp, point.value
    timestamp = point.get("timestamp") or point.get(LEGACY_TIMESTAMP_KEY)
    return timestamp, point.get("value")


def _point_time(raw_timestamp: Any) -> Optional[datetime]:
    if not isinstance(raw_timestamp, (str, datetime)):
        return None
    try:
        return parse_timestamp(raw_timestamp)
    except (TypeError, ValueError, OverflowError):
        return None


def format_for_visualization(points: Iterable[ReadingLike]) -> List[ProcessedPoint]:
    """Map readings to ``ProcessedPoint`` values, dropping unusable timestamps.

    Every dropped point is logged. Surviving points keep their input order.
    """
    formatted: List[ProcessedPoint] = []
    for point in points:
        raw_timestamp, raw_value = _fields(point)
        if raw_timestamp is None or raw_timestamp == "":
            logger.warning(
                "Dropping point without a timestamp",
                extra={"reason": "missing timestamp"},
            )
            continue

        time = _point_time(raw_timestamp)
        if time is None:
            logger.warning(
                "Dropping point with an invalid timestamp",
                extra={"reason": "invalid timestamp", "timestamp": raw_timestamp},
            )
            continue

        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            value = math.nan
        formatted.append(ProcessedPoint(time=time, value=value))
    return formatted


def filter_by_time_range(
    readings: Iterable[ReadingLike], start: datetime, end: datetime
) -> List[ReadingLike]:
    """Keep readings whose timestamp lies in ``[start, end]``."""
    lower = parse_timestamp(start)
    upper = parse_timestamp(end)
    kept: List[ReadingLike] = []
    for reading in readings:
        raw_timestamp, _ = _fields(reading)
        time = _point_time(raw_timestamp)
        if time is not None and lower <= time <= upper:
            kept.append(reading)
    return kept


def remove_outliers(points: Sequence[ProcessedPoint], threshold: float = 3) -> List[ProcessedPoint]:
    """Drop points more than ``threshold`` population standard deviations from the mean.

    Non-finite values are left out of the statistics and removed with the outliers.
    """
    if len(points) < 3:
        return list(points)

    values = [point.value for point in points if math.isfinite(point.value)]
    if not values:
        return []
    mean = sum(values) / len(values)
    std_dev = math.sqrt(sum((value - mean) * (value - mean) for value in values) / len(values))
    return [point for point in points if abs(point.value - mean) <= threshold * std_dev]
