"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.parameters import MeasurementSystem, ParameterType
from models.records import ProcessedPoint
from services.aggregator import SeriesSummary
from services.series import ParameterSeries


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


class SeriesPoint(BaseModel):
    """One chart point; non-finite values are reported as ``null``."""

    time: datetime
    value: Optional[float] = None

    @classmethod
    def from_point(cls, point: ProcessedPoint) -> "SeriesPoint":
        return cls(time=point.time, value=_finite_or_none(point.value))


class Summary(BaseModel):
    """Aggregate metrics over the returned points."""

    count: int = Field(..., ge=0)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    mean_value: Optional[float] = None

    @classmethod
    def from_summary(cls, summary: SeriesSummary) -> "Summary":
        return cls(
            count=summary.count,
            min_value=summary.min_value,
            max_value=summary.max_value,
            mean_value=summary.mean_value,
        )


class SeriesResponse(BaseModel):
    """Processed series for a single parameter."""

    parameter: ParameterType
    system: MeasurementSystem
    label: str = Field(..., description="Axis title including the unit.")
    unit: str
    start: datetime
    end: datetime
    points: List[SeriesPoint] = Field(default_factory=list)
    summary: Summary

    @classmethod
    def from_series(cls, series: ParameterSeries) -> "SeriesResponse":
        return cls(
            parameter=series.parameter,
            system=series.system,
            label=series.label,
            unit=series.unit,
            start=series.start,
            end=series.end,
            points=[SeriesPoint.from_point(point) for point in series.points],
            summary=Summary.from_summary(series.summary),
        )


class ParameterOption(BaseModel):
    value: ParameterType
    label: str
    unit: str


class ParameterGroupResponse(BaseModel):
    """Dropdown group of parameters, e.g. ``Water Quality``."""

    name: str
    parameters: List[ParameterOption] = Field(default_factory=list)
