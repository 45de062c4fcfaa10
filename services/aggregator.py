"""Summary statistics for processed series."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from models.records import ProcessedPoint


@dataclass
class SeriesSummary:
    """Statistics for a processed series.

    ``count`` includes every point; min, max and mean use the finite values only.
    """

    count: int = 0
    min_value: float | None = None
    max_value: float | None = None
    mean_value: float | None = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, points: Iterable[ProcessedPoint]) -> SeriesSummary:
        summary = SeriesSummary()
        finite_count = 0
        total = 0.0

        for point in points:
            summary.count += 1
            value = point.value
            if not math.isfinite(value):
                continue
            finite_count += 1
            total += value

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

        if finite_count:
            summary.mean_value = total / finite_count

        return summary
