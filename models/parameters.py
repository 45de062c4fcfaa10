"""Static configuration for the parameters the creek station reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional


class MeasurementSystem(str, Enum):
    """Unit system a series is presented in."""

    SI = "SI"
    US = "US"


class ParameterType(str, Enum):
    """Every parameter the dashboard can chart."""

    stage = "stage"
    smoothed_velocity = "smoothed_velocity"
    flow_rate = "flow_rate"
    flow_rate_rating_curve = "flow_rate_rating_curve"
    downstream_velocity = "downstream_velocity"
    ph = "ph"
    specific_conductance = "specific_conductance"
    salinity = "salinity"
    turbidity = "turbidity"
    dissolved_oxygen = "dissolved_oxygen"
    water_temperature = "water_temperature"
    orp = "orp"
    air_temperature = "air_temperature"
    humidity = "humidity"
    air_pressure = "air_pressure"
    rain_intensity = "rain_intensity"
    rain_accumulation = "rain_accumulation"
    rain_duration = "rain_duration"


class ProcessingKind(str, Enum):
    """Correction strategy applied to a parameter's raw signal."""

    none = "none"
    stage = "stage"
    downstream_velocity = "downstream_velocity"
    smoothed_velocity = "smoothed_velocity"
    flow_rate = "flow_rate"
    air_pressure = "air_pressure"
    rating_curve = "rating_curve"


class ParameterGroup(str, Enum):
    water_quantity = "Water Quantity"
    water_quality = "Water Quality"
    weather = "Weather"


@dataclass(frozen=True)
class ParameterConfig:
    """Where a parameter's raw data lives and how it is corrected."""

    metric: str
    medium: str
    instrument: str
    processing: ProcessingKind
    group: ParameterGroup
    display_name: str
    source: Optional[ParameterType] = None


_ARGONAUT = "argonaut"
_SONDE = "sonde"
_WEATHER = "weather_station"

_Q = ParameterGroup.water_quantity
_WQ = ParameterGroup.water_quality
_WX = ParameterGroup.weather

PARAMETER_CONFIG: Mapping[ParameterType, ParameterConfig] = MappingProxyType(
    {
        ParameterType.stage: ParameterConfig(
            "velocity-z", "water", _ARGONAUT, ProcessingKind.stage, _Q, "Stage"
        ),
        ParameterType.smoothed_velocity: ParameterConfig(
            "velocity-x", "water", _ARGONAUT, ProcessingKind.smoothed_velocity, _Q, "Smoothed Velocity"
        ),
        ParameterType.flow_rate: ParameterConfig(
            "velocity-x", "water", _ARGONAUT, ProcessingKind.flow_rate, _Q, "Est. Flow Rate"
        ),
        ParameterType.flow_rate_rating_curve: ParameterConfig(
            "velocity-z",
            "water",
            _ARGONAUT,
            ProcessingKind.rating_curve,
            _Q,
            "Est. Flowrate - Rating Curve",
            source=ParameterType.stage,
        ),
        ParameterType.downstream_velocity: ParameterConfig(
            "velocity-x", "water", _ARGONAUT, ProcessingKind.downstream_velocity, _Q, "Downstream Velocity"
        ),
        ParameterType.ph: ParameterConfig("pH", "water", _SONDE, ProcessingKind.none, _WQ, "pH"),
        ParameterType.specific_conductance: ParameterConfig(
            "specific conductance", "water", _SONDE, ProcessingKind.none, _WQ, "Specific conductance"
        ),
        ParameterType.salinity: ParameterConfig(
            "salinity", "water", _SONDE, ProcessingKind.none, _WQ, "Salinity"
        ),
        ParameterType.turbidity: ParameterConfig(
            "turbidity", "water", _SONDE, ProcessingKind.none, _WQ, "Turbidity"
        ),
        ParameterType.dissolved_oxygen: ParameterConfig(
            "dissolved oxygen", "water", _SONDE, ProcessingKind.none, _WQ, "DO"
        ),
        ParameterType.water_temperature: ParameterConfig(
            "temperature", "water", _SONDE, ProcessingKind.none, _WQ, "Water temp."
        ),
        ParameterType.orp: ParameterConfig("ORP", "water", _SONDE, ProcessingKind.none, _WQ, "ORP"),
        ParameterType.air_temperature: ParameterConfig(
            "temperature", "air", _WEATHER, ProcessingKind.none, _WX, "Air temp."
        ),
        ParameterType.humidity: ParameterConfig(
            "humidity", "air", _WEATHER, ProcessingKind.none, _WX, "Humidity"
        ),
        ParameterType.air_pressure: ParameterConfig(
            "pressure", "air", _WEATHER, ProcessingKind.air_pressure, _WX, "Air pressure"
        ),
        ParameterType.rain_intensity: ParameterConfig(
            "rain intensity", "rain", _WEATHER, ProcessingKind.none, _WX, "Rain Intensity"
        ),
        ParameterType.rain_accumulation: ParameterConfig(
            "rain accumulation", "rain", _WEATHER, ProcessingKind.none, _WX, "Rain Accumulation"
        ),
        ParameterType.rain_duration: ParameterConfig(
            "rain duration", "rain", _WEATHER, ProcessingKind.none, _WX, "Rain Duration"
        ),
    }
)


# (SI unit, US unit) shown next to chart axes.
_UNIT_ABBREVIATIONS: Dict[ParameterType, tuple[str, str]] = {
    ParameterType.stage: ("m", "ft"),
    ParameterType.smoothed_velocity: ("m/s", "ft/s"),
    ParameterType.flow_rate: ("m³/s", "ft³/s"),
    ParameterType.flow_rate_rating_curve: ("m³/s", "ft³/s"),
    ParameterType.downstream_velocity: ("m/s", "ft/s"),
    ParameterType.ph: ("", ""),
    ParameterType.specific_conductance: ("μS/cm", "μS/cm"),
    ParameterType.salinity: ("ppt", "ppt"),
    ParameterType.turbidity: ("NTU", "NTU"),
    ParameterType.dissolved_oxygen: ("mg/l", "mg/l"),
    ParameterType.water_temperature: ("°C", "°F"),
    ParameterType.orp: ("mV", "mV"),
    ParameterType.air_temperature: ("°C", "°F"),
    ParameterType.humidity: ("%RH", "%RH"),
    ParameterType.air_pressure: ("hPa", "inHg"),
    ParameterType.rain_intensity: ("mm/h", "in/h"),
    ParameterType.rain_accumulation: ("mm", "in"),
    ParameterType.rain_duration: ("s", "s"),
}

_AXIS_TITLES: Dict[ParameterType, str] = {
    ParameterType.flow_rate_rating_curve: "Est. Flowrate - Rating Curve",
    ParameterType.specific_conductance: "Specific Conductance",
    ParameterType.dissolved_oxygen: "Dissolved Oxygen",
    ParameterType.water_temperature: "Water Temperature",
    ParameterType.orp: "Oxidation Reduct. Potent.",
    ParameterType.air_temperature: "Air Temperature",
    ParameterType.air_pressure: "Air Pressure",
}


def coerce_parameter(value: "ParameterType | str") -> Optional[ParameterType]:
    """Return the enum member for ``value`` or ``None`` when it is not a known parameter."""
    if isinstance(value, ParameterType):
        return value
    try:
        return ParameterType(value)
    except ValueError:
        return None


def get_parameter_config(parameter: ParameterType) -> ParameterConfig:
    return PARAMETER_CONFIG[parameter]


def source_parameter(parameter: ParameterType) -> ParameterType:
    """Parameter whose raw observations must be fetched to build ``parameter``."""
    return PARAMETER_CONFIG[parameter].source or parameter


def unit_abbreviation(parameter: ParameterType, system: MeasurementSystem) -> str:
    si_unit, us_unit = _UNIT_ABBREVIATIONS[parameter]
    return us_unit if system is MeasurementSystem.US else si_unit


def parameter_label(parameter: ParameterType, system: MeasurementSystem) -> str:
    """Axis title with its unit, e.g. ``Stage [ft]``."""
    config = PARAMETER_CONFIG[parameter]
    title = _AXIS_TITLES.get(parameter, config.display_name)
    unit = unit_abbreviation(parameter, system)
    if not unit:
        return title
    return f"{title} [{unit}]"


def parameters_by_group() -> Dict[ParameterGroup, List[ParameterType]]:
    grouped: Dict[ParameterGroup, List[ParameterType]] = {group: [] for group in ParameterGroup}
    for parameter, config in PARAMETER_CONFIG.items():
        grouped[config.group].append(parameter)
    return grouped
