"""SI to US customary conversions for processed series."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Sequence

from models.parameters import ParameterType, coerce_parameter
from models.records import RawReading

logger = logging.getLogger(__name__)

Conversion = Callable[[float], float]


def c_to_f(celsius: float) -> float:
    return (celsius * 1.8) + 32


def f_to_c(fahrenheit: float) -> float:
    return (fahrenheit - 32) * 0.5556


def m_to_ft(meters: float) -> float:
    return meters * 3.28084


def ft_to_m(feet: float) -> float:
    return feet / 3.28084


def ms_to_fts(meters_per_second: float) -> float:
    return meters_per_second * 3.28084


def fts_to_ms(feet_per_second: float) -> float:
    return feet_per_second / 3.28084


def cms_to_fts(centimeters_per_second: float) -> float:
    return centimeters_per_second * 0.0328084


def m3s_to_ft3s(cubic_meters: float) -> float:
    return cubic_meters * 35.3147


def ft3s_to_m3s(cubic_feet: float) -> float:
    return cubic_feet / 35.3147


def hpa_to_inhg(hectopascals: float) -> float:
    return hectopascals / 33.86


def inhg_to_hpa(inches_hg: float) -> float:
    return inches_hg * 33.86


def mm_to_in(millimeters: float) -> float:
    return millimeters * 0.0393


def in_to_mm(inches: float) -> float:
    return inches / 0.0393


def mscm_to_uscm(millisiemens: float) -> float:
    return millisiemens * 1000


def uscm_to_mscm(microsiemens: float) -> float:
    return microsiemens / 1000


CONVERSIONS: Mapping[str, Mapping[str, Conversion]] = MappingProxyType(
    {
        "temperature": {"C_to_F": c_to_f, "F_to_C": f_to_c},
        "distance": {"m_to_ft": m_to_ft, "ft_to_m": ft_to_m},
        "velocity": {"ms_to_fts": ms_to_fts, "fts_to_ms": fts_to_ms, "cms_to_fts": cms_to_fts},
        "flowRate": {"m3s_to_ft3s": m3s_to_ft3s, "ft3s_to_m3s": ft3s_to_m3s},
        "pressure": {"hPa_to_inHg": hpa_to_inhg, "inHg_to_hPa": inhg_to_hpa},
        "precipitation": {"mm_to_in": mm_to_in, "in_to_mm": in_to_mm},
        "conductivity": {"mScm_to_uScm": mscm_to_uscm, "uScm_to_mScm": uscm_to_mscm},
    }
)


@dataclass(frozen=True)
class UnitMapping:
    quantity: str
    from_unit: str
    to_unit: str


US_UNIT_MAPPINGS: Mapping[ParameterType, UnitMapping] = MappingProxyType(
    {
        ParameterType.stage: UnitMapping("distance", "m", "ft"),
        ParameterType.smoothed_velocity: UnitMapping("velocity", "cms", "fts"),
        ParameterType.flow_rate: UnitMapping("flowRate", "m3s", "ft3s"),
        ParameterType.flow_rate_rating_curve: UnitMapping("flowRate", "m3s", "ft3s"),
        ParameterType.downstream_velocity: UnitMapping("velocity", "cms", "fts"),
        ParameterType.water_temperature: UnitMapping("temperature", "C", "F"),
        ParameterType.air_temperature: UnitMapping("temperature", "C", "F"),
        ParameterType.air_pressure: UnitMapping("pressure", "hPa", "inHg"),
        ParameterType.rain_intensity: UnitMapping("precipitation", "mm", "in"),
        ParameterType.rain_accumulation: UnitMapping("precipitation", "mm", "in"),
        ParameterType.specific_conductance: UnitMapping("conductivity", "mScm", "uScm"),
    }
)


def apply_unit_conversion(
    readings: Sequence[RawReading],
    from_unit: str,
    to_unit: str,
    quantity: str,
) -> List[RawReading]:
    """Convert every value in ``readings``.

    Identical units and unregistered pairs both leave the values untouched; the
    latter is logged so a missing table entry is visible without failing the
    request.
    """
    if from_unit == to_unit:
        return list(readings)

    conversion_key = f"{from_unit}_to_{to_unit}"
    convert = CONVERSIONS.get(quantity, {}).get(conversion_key)
    if convert is None:
        logger.warning(
            "No conversion available for %s to %s in %s",
            from_unit,
            to_unit,
            quantity,
            extra={"conversion": conversion_key, "reason": "unregistered conversion"},
        )
        return list(readings)

    return [reading.with_value(convert(reading.value)) for reading in readings]


def convert_to_us_units(
    readings: Sequence[RawReading], parameter_type: "ParameterType | str"
) -> List[RawReading]:
    parameter = coerce_parameter(parameter_type)
    mapping = US_UNIT_MAPPINGS.get(parameter) if parameter is not None else None
    if mapping is None:
        return list(readings)
    return apply_unit_conversion(readings, mapping.from_unit, mapping.to_unit, mapping.quantity)
