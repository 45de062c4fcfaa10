"""Calibration and correction of raw instrument signals."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence

from models.parameters import (
    PARAMETER_CONFIG,
    MeasurementSystem,
    ParameterType,
    ProcessingKind,
    coerce_parameter,
)
from models.records import RawReading
from services.units import convert_to_us_units
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Calibration:
    """Site calibration constants used by the correction formulas."""

    velocity_slope: float = 0.7896014
    velocity_offset: float = -0.016046
    datum_offset: float = 0.128
    elevation: float = 626.0
    air_temperature: float = 10.0
    rating_coefficient: float = 1.27
    rating_exponent: float = 4.19


DEFAULT_CALIBRATION = Calibration()


def process_stage(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    return [reading.with_value(reading.value + calibration.datum_offset) for reading in readings]


def correct_velocity(value: float, calibration: Calibration = DEFAULT_CALIBRATION) -> float:
    return (value * calibration.velocity_slope) + calibration.velocity_offset


def process_downstream_velocity(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    return [reading.with_value(correct_velocity(reading.value, calibration)) for reading in readings]


def smoothing_alpha(corrected: float) -> float:
    return min(max(abs(corrected), 24.5) - 23, 30) / 30


def process_smoothed_velocity(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    """Velocity correction followed by an adaptive exponential filter.

    The first sample seeds the filter unsmoothed. A non-finite sample repeats
    the previous smoothed value so a dropout does not spread down the series.
    """
    corrected = process_downstream_velocity(readings, calibration)
    if not corrected:
        return []

    smoothed = [corrected[0]]
    previous = corrected[0].value
    for reading in corrected[1:]:
        if math.isfinite(reading.value):
            alpha = smoothing_alpha(reading.value)
            previous = (1 - alpha) * previous + alpha * reading.value
        smoothed.append(reading.with_value(previous))
    return smoothed


def flow_rate_from_velocity(velocity_cms: float) -> float:
    velocity = velocity_cms * 0.01
    return (
        2.5715 * velocity * velocity * velocity
        - 1.7058 * velocity * velocity
        + 1.4465 * velocity
        - 0.0324
        + 0.015
    )


def process_flow_rate(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    return [
        reading.with_value(flow_rate_from_velocity(reading.value))
        for reading in process_smoothed_velocity(readings, calibration)
    ]


def process_air_pressure(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    base = 16000 + 64 * calibration.air_temperature
    numerator = base + calibration.elevation
    denominator = base - calibration.elevation
    return [reading.with_value(reading.value * numerator / denominator) for reading in readings]


def rating_curve_flow(stage_m: float, calibration: Calibration = DEFAULT_CALIBRATION) -> float:
    """Flow in m³/s from corrected stage in metres."""
    if stage_m < 0:
        return math.nan
    try:
        return calibration.rating_coefficient * math.pow(stage_m, calibration.rating_exponent)
    except OverflowError:
        return math.inf


def process_rating_curve(
    readings: Sequence[RawReading], calibration: Calibration = DEFAULT_CALIBRATION
) -> List[RawReading]:
    """Derive rating-curve flow from raw stage readings (SI output)."""
    flows: List[RawReading] = []
    for reading in process_stage(readings, calibration):
        flow = rating_curve_flow(reading.value, calibration)
        if math.isnan(flow) and not math.isnan(reading.value):
            logger.warning(
                "Stage below datum has no rating-curve flow",
                extra={
                    "parameter_type": ParameterType.flow_rate_rating_curve.value,
                    "timestamp": reading.timestamp,
                    "reason": "negative stage",
                },
            )
        flows.append(reading.with_value(flow))
    return flows


_Strategy = Callable[[Sequence[RawReading], Calibration], List[RawReading]]

_STRATEGIES: Dict[ProcessingKind, _Strategy] = {
    ProcessingKind.stage: process_stage,
    ProcessingKind.downstream_velocity: process_downstream_velocity,
    ProcessingKind.smoothed_velocity: process_smoothed_velocity,
    ProcessingKind.flow_rate: process_flow_rate,
    ProcessingKind.air_pressure: process_air_pressure,
    ProcessingKind.rating_curve: process_rating_curve,
}


def apply_correction(
    readings: Sequence[RawReading],
    parameter_type: "ParameterType | str",
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> List[RawReading]:
    """Run the correction strategy configured for ``parameter_type``.

    Unknown parameter names pass through unchanged.
    """
    parameter = coerce_parameter(parameter_type)
    if parameter is None:
        logger.debug(
            "Unknown parameter passed through without correction",
            extra={"parameter_type": parameter_type, "reason": "unknown parameter"},
        )
        return list(readings)

    strategy = _STRATEGIES.get(PARAMETER_CONFIG[parameter].processing)
    if strategy is None:
        return list(readings)
    return strategy(readings, calibration)


def process_parameter_data(
    readings: Sequence[RawReading],
    parameter_type: "ParameterType | str",
    unit_system: "MeasurementSystem | str" = MeasurementSystem.SI,
    calibration: Optional[Calibration] = None,
) -> List[RawReading]:
    """Correct ``readings`` for their parameter and convert them to ``unit_system``.

    The result has the same length and order as the input; timestamps are
    carried through untouched for the formatter.
    """
    active_calibration = calibration or build_default_calibration()
    processed = apply_correction(readings, parameter_type, active_calibration)
    if MeasurementSystem(unit_system) is MeasurementSystem.US:
        processed = convert_to_us_units(processed, parameter_type)
    return processed


@lru_cache
def build_default_calibration() -> Calibration:
    """Calibration with the site values from settings."""
    settings = get_settings()
    return Calibration(
        elevation=settings.site_elevation,
        air_temperature=settings.reference_air_temperature,
    )
