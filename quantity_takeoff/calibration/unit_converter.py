"""
Unit Converter Module

Functions for converting metric quantities into report units.

All formulas work in metres; conversion to feet/inches/millimetres happens
only here, when results leave the engine.
"""

import logging

from ..constants import CM_PER_METER, FEET_PER_METER, INCHES_PER_FOOT, MM_PER_METER

logger = logging.getLogger(__name__)

# Length units per metre
LENGTH_FACTORS = {
    "m": 1.0,
    "meters": 1.0,
    "mm": float(MM_PER_METER),
    "cm": float(CM_PER_METER),
    "ft": FEET_PER_METER,
    "feet": FEET_PER_METER,
    "in": FEET_PER_METER * INCHES_PER_FOOT,
    "inches": FEET_PER_METER * INCHES_PER_FOOT,
}

AREA_UNITS = {"sqm": "m", "m2": "m", "sqft": "ft", "ft2": "ft"}
VOLUME_UNITS = {"m3": "m", "cum": "m", "ft3": "ft", "cuft": "ft"}

# Report units per unit system
UNIT_SYSTEMS = {
    "metric": {"length": "m", "area": "sqm", "volume": "m3"},
    "imperial": {"length": "ft", "area": "sqft", "volume": "ft3"},
}


def _length_factor(unit: str) -> float:
    factor = LENGTH_FACTORS.get(unit)
    if factor is None:
        logger.warning(f"Unknown unit '{unit}', returning meters")
        return 1.0
    return factor


def convert_length(meters: float, output_unit: str = "m") -> float:
    """
    Convert a length in metres.

    Args:
        meters: Length in metres
        output_unit: "m", "mm", "cm", "ft"/"feet", "in"/"inches"

    Returns:
        Length in requested unit
    """
    return meters * _length_factor(output_unit)


def convert_area(square_meters: float, output_unit: str = "sqm") -> float:
    """
    Convert an area in square metres.

    Args:
        square_meters: Area in m²
        output_unit: "sqm"/"m2" or "sqft"/"ft2"

    Returns:
        Area in requested unit
    """
    base = AREA_UNITS.get(output_unit)
    if base is None:
        logger.warning(f"Unknown unit '{output_unit}', returning sqm")
        return square_meters
    return square_meters * (_length_factor(base) ** 2)


def convert_volume(cubic_meters: float, output_unit: str = "m3") -> float:
    """Convert a volume in m³ to "m3"/"cum" or "ft3"/"cuft"."""
    base = VOLUME_UNITS.get(output_unit)
    if base is None:
        logger.warning(f"Unknown unit '{output_unit}', returning m3")
        return cubic_meters
    return cubic_meters * (_length_factor(base) ** 3)


def format_imperial_length(length_feet: float) -> str:
    """
    Format a length in feet as imperial string (e.g., 10'-6").

    Args:
        length_feet: Length in feet

    Returns:
        Formatted string like "10'-6""
    """
    feet = int(length_feet)
    remaining_inches = (length_feet - feet) * INCHES_PER_FOOT

    if remaining_inches < 0.1:
        return f"{feet}'-0\""
    elif abs(remaining_inches - round(remaining_inches)) < 0.1:
        inches = int(round(remaining_inches))
        if inches == INCHES_PER_FOOT:
            return f"{feet + 1}'-0\""
        return f"{feet}'-{inches}\""
    else:
        return f"{feet}'-{remaining_inches:.1f}\""


def format_length(meters: float, unit_system: str = "metric") -> str:
    """
    Format a length for reports.

    Returns:
        "12.35 m" for metric, "40'-6"" for imperial
    """
    if unit_system == "imperial":
        return format_imperial_length(convert_length(meters, "ft"))
    return f"{meters:.2f} m"


def format_area(square_meters: float, unit_system: str = "metric") -> str:
    """
    Format an area with unit.

    Returns:
        Formatted string like "14.0 m²" or "150.5 SF"
    """
    if unit_system == "imperial":
        return f"{convert_area(square_meters, 'sqft'):.1f} SF"
    return f"{square_meters:.1f} m²"


def format_volume(cubic_meters: float, unit_system: str = "metric") -> str:
    if unit_system == "imperial":
        return f"{convert_volume(cubic_meters, 'ft3'):.1f} CF"
    return f"{cubic_meters:.2f} m³"
