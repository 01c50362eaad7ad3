"""
Unit handling for the correction chart inputs.

Every quantity has one base unit used internally: m³/h for the flow rate,
m for the total head, mm²/s for the viscosity and g/l for the density.
Conversions multiply by exact decimal factors, so chaining them does not
accumulate float rounding.
"""

import enum
import logging
from typing import Dict, NamedTuple, Type, TypeVar, Union

from .constants import DEFAULT_FLOAT_PRECISION, FT_to_M, GPM_to_M3H, KGM3_to_GL, LPM_to_M3H, UNITY
from .exact_decimal import ExactDecimal

logger = logging.getLogger("viscocorrect-mcp.unit_conversion")

DecimalLike = Union[ExactDecimal, str, int, float]


class FlowrateUnit(enum.Enum):
    CUBIC_METERS_PER_HOUR = "m3/h"
    LITERS_PER_MINUTE = "l/min"
    GALLONS_PER_MINUTE = "gpm"


class HeadUnit(enum.Enum):
    METERS = "m"
    FEET = "ft"


class ViscosityUnit(enum.Enum):
    SQUARE_MILLIMETERS_PER_SECOND = "mm2/s"
    CENTISTOKES = "cSt"
    CENTIPOISE = "cP"
    MILLIPASCAL_SECONDS = "mPas"


class DensityUnit(enum.Enum):
    GRAMS_PER_LITER = "g/l"
    KILOGRAMS_PER_CUBIC_METER = "kg/m3"


class Units(NamedTuple):
    """Units the four chart inputs are given in."""

    flowrate: FlowrateUnit = FlowrateUnit.CUBIC_METERS_PER_HOUR
    total_head: HeadUnit = HeadUnit.METERS
    viscosity: ViscosityUnit = ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND
    density: DensityUnit = DensityUnit.GRAMS_PER_LITER


STANDARD_UNITS = Units()

# Factors by which a value is multiplied to reach the base unit of its kind
_BASE_FACTORS: Dict[enum.Enum, ExactDecimal] = {
    FlowrateUnit.CUBIC_METERS_PER_HOUR: ExactDecimal.from_string(UNITY),
    FlowrateUnit.LITERS_PER_MINUTE: ExactDecimal.from_string(LPM_to_M3H),
    FlowrateUnit.GALLONS_PER_MINUTE: ExactDecimal.from_string(GPM_to_M3H),
    HeadUnit.METERS: ExactDecimal.from_string(UNITY),
    HeadUnit.FEET: ExactDecimal.from_string(FT_to_M),
    DensityUnit.GRAMS_PER_LITER: ExactDecimal.from_string(UNITY),
    DensityUnit.KILOGRAMS_PER_CUBIC_METER: ExactDecimal.from_string(KGM3_to_GL),
}

# Extra spellings accepted by parse_unit, besides member names and values
_UNIT_ALIASES: Dict[str, enum.Enum] = {
    "m³/h": FlowrateUnit.CUBIC_METERS_PER_HOUR,
    "m3/hr": FlowrateUnit.CUBIC_METERS_PER_HOUR,
    "cmh": FlowrateUnit.CUBIC_METERS_PER_HOUR,
    "lpm": FlowrateUnit.LITERS_PER_MINUTE,
    "l/m": FlowrateUnit.LITERS_PER_MINUTE,
    "usgpm": FlowrateUnit.GALLONS_PER_MINUTE,
    "gal/min": FlowrateUnit.GALLONS_PER_MINUTE,
    "meter": HeadUnit.METERS,
    "meters": HeadUnit.METERS,
    "feet": HeadUnit.FEET,
    "foot": HeadUnit.FEET,
    "mm²/s": ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND,
    "centistokes": ViscosityUnit.CENTISTOKES,
    "centipoise": ViscosityUnit.CENTIPOISE,
    "mpa·s": ViscosityUnit.MILLIPASCAL_SECONDS,
    "mpa*s": ViscosityUnit.MILLIPASCAL_SECONDS,
    "mpa.s": ViscosityUnit.MILLIPASCAL_SECONDS,
    "kg/m³": DensityUnit.KILOGRAMS_PER_CUBIC_METER,
}

_KINEMATIC_UNITS = (ViscosityUnit.SQUARE_MILLIMETERS_PER_SECOND, ViscosityUnit.CENTISTOKES)

UnitT = TypeVar("UnitT", FlowrateUnit, HeadUnit, ViscosityUnit, DensityUnit)


_FIELD_BY_TYPE = {
    FlowrateUnit: "flowrate",
    HeadUnit: "total_head",
    ViscosityUnit: "viscosity",
    DensityUnit: "density",
}


def base_unit_of(unit_type: Type[enum.Enum]) -> enum.Enum:
    """Return the base unit for a unit enum class."""
    return getattr(STANDARD_UNITS, _FIELD_BY_TYPE[unit_type])


def to_base(value: DecimalLike, unit: Union[FlowrateUnit, HeadUnit, DensityUnit],
            precision: int = DEFAULT_FLOAT_PRECISION) -> ExactDecimal:
    """Convert a flow rate, head or density value to its base unit.

    Args:
        value: Value given in ``unit``
        unit: Source unit; viscosity units need ``viscosity_to_base``
        precision: Significant digits kept when ``value`` is a float

    Returns:
        The value in m³/h, m or g/l

    Raises:
        TypeError: If ``unit`` is not a flow rate, head or density unit
    """
    try:
        factor = _BASE_FACTORS[unit]
    except KeyError:
        raise TypeError(f"{unit!r} has no multiplicative base factor; "
                        f"use viscosity_to_base for viscosity units") from None
    return ExactDecimal.coerce(value, precision) * factor


def viscosity_to_base(value: DecimalLike, unit: ViscosityUnit,
                      density: DecimalLike = 0,
                      density_unit: DensityUnit = DensityUnit.GRAMS_PER_LITER,
                      precision: int = DEFAULT_FLOAT_PRECISION) -> ExactDecimal:
    """Convert a viscosity to mm²/s.

    Kinematic units pass through unchanged. Dynamic units (cP, mPa·s) are
    divided by the density in g/l. A zero density gives zero instead of
    dividing, which the range check then rejects. The quotient keeps
    ``precision`` significant digits.
    """
    value = ExactDecimal.coerce(value, precision)
    if unit in _KINEMATIC_UNITS:
        return value

    density_base = to_base(density, density_unit, precision)
    if density_base.is_zero():
        logger.debug("No density given for dynamic viscosity %s %s", value, unit.value)
        return ExactDecimal()
    return value.divide(density_base, precision)


def parse_unit(unit_type: Type[UnitT], text: Union[str, UnitT, None], default: UnitT = None) -> UnitT:
    """Resolve a unit from its member name, symbol or a common alias.

    Matching is case-insensitive. ``None`` or an empty string returns
    ``default`` (the base unit when no default is given).

    Raises:
        ValueError: If ``text`` does not name a unit of ``unit_type``
    """
    if isinstance(text, unit_type):
        return text
    if text is None or not str(text).strip():
        return default if default is not None else base_unit_of(unit_type)

    key = str(text).strip().lower()
    for member in unit_type:
        if key in (member.name.lower(), member.value.lower()):
            return member
    for alias, member in _UNIT_ALIASES.items():
        if isinstance(member, unit_type) and alias.lower() == key:
            return member

    valid = ", ".join(member.value for member in unit_type)
    raise ValueError(f"Unknown {unit_type.__name__} '{text}'. Valid units: {valid}")
