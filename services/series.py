"""Fetch, process and format one parameter's series for display."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from models.parameters import (
    MeasurementSystem,
    ParameterType,
    get_parameter_config,
    parameter_label,
    source_parameter,
    unit_abbreviation,
)
from models.records import ProcessedPoint
from services.aggregator import Aggregator, SeriesSummary
from services.formatter import format_for_visualization, parse_timestamp, remove_outliers
from services.observations import ObservationClient, ObservationSource, build_default_client
from services.processor import Calibration, build_default_calibration, process_parameter_data
from settings import get_settings

logger = logging.getLogger(__name__)

TIME_RANGE_PRESETS: Dict[str, timedelta] = {
    "1day": timedelta(days=1),
    "3days": timedelta(days=3),
    "6days": timedelta(days=6),
    "12days": timedelta(days=12),
}
DEFAULT_TIME_RANGE = "1day"


def resolve_time_range(
    preset: str = DEFAULT_TIME_RANGE, now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Return ``(start, end)`` for a dashboard preset ending at ``now``."""
    try:
        span = TIME_RANGE_PRESETS[preset]
    except KeyError as exc:
        choices = ", ".join(TIME_RANGE_PRESETS)
        raise ValueError(f"Unknown time range {preset!r}; expected one of: {choices}.") from exc
    end = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    return end - span, end


@dataclass
class ParameterSeries:
    parameter: ParameterType
    system: MeasurementSystem
    label: str
    unit: str
    start: datetime
    end: datetime
    points: List[ProcessedPoint] = field(default_factory=list)
    summary: SeriesSummary = field(default_factory=SeriesSummary)


class SeriesService:
    """Coordinates the observation source, the processing pipeline and summaries."""

    def __init__(
        self,
        source: ObservationSource,
        calibration: Calibration,
        aggregator: Aggregator,
        fetch_limit: int = 10000,
    ) -> None:
        self.source = source
        self.calibration = calibration
        self.aggregator = aggregator
        self.fetch_limit = fetch_limit

    def load_parameter_series(
        self,
        parameter: ParameterType,
        system: MeasurementSystem,
        start: datetime,
        end: datetime,
        remove_outliers_enabled: bool = False,
    ) -> ParameterSeries:
        start_utc = parse_timestamp(start)
        end_utc = parse_timestamp(end)
        if start_utc >= end_utc:
            raise ValueError("Start time must be before end time.")

        # Derived parameters fetch their source parameter's raw signal.
        config = get_parameter_config(source_parameter(parameter))
        readings = self.source.fetch_observations(
            instrument=config.instrument,
            metric=config.metric,
            medium=config.medium,
            start_time=start_utc,
            end_time=end_utc,
            limit=self.fetch_limit,
        )

        processed = process_parameter_data(readings, parameter, system, self.calibration)
        points = format_for_visualization(processed)
        dropped = len(processed) - len(points)
        if remove_outliers_enabled:
            points = remove_outliers(points)

        if dropped:
            logger.warning(
                "Dropped points while formatting series",
                extra={
                    "parameter_type": parameter.value,
                    "unit_system": system.value,
                    "dropped_count": dropped,
                },
            )

        return ParameterSeries(
            parameter=parameter,
            system=system,
            label=parameter_label(parameter, system),
            unit=unit_abbreviation(parameter, system),
            start=start_utc,
            end=end_utc,
            points=points,
            summary=self.aggregator.aggregate(points),
        )

    def shutdown(self) -> None:
        close = getattr(self.source, "close", None)
        if callable(close):
            close()


@lru_cache
def build_default_series_service() -> SeriesService:
    """Factory that wires the service with the configured observation API."""
    client: ObservationClient = build_default_client()
    return SeriesService(
        source=client,
        calibration=build_default_calibration(),
        aggregator=Aggregator(),
        fetch_limit=get_settings().fetch_limit,
    )
