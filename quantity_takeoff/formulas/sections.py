"""
Cross-Section Module

Section areas shared by hydro-excavation, vault, beam, column and pile
formulas.
"""

import math
from typing import Optional

from ..constants import SectionShape


def circle_area(diameter_m: float) -> float:
    """Area of a circle from its diameter."""
    radius = diameter_m / 2
    return math.pi * radius * radius


def section_area(
    shape: str,
    width_m: Optional[float] = None,
    height_m: Optional[float] = None,
    diameter_m: Optional[float] = None,
    area_m2: Optional[float] = None
) -> float:
    """
    Area of a circular, rectangular or custom cross-section.

    Missing dimensions count as 0 so a partially specified section yields 0
    rather than an error.

    Args:
        shape: SectionShape value
        width_m: Rectangle width
        height_m: Rectangle height (footprint length for plan sections)
        diameter_m: Circle diameter
        area_m2: Explicit area for custom sections

    Returns:
        Section area in m²
    """
    if shape == SectionShape.CIRCULAR:
        return circle_area(diameter_m or 0.0)
    if shape == SectionShape.CUSTOM:
        return area_m2 or 0.0
    return (width_m or 0.0) * (height_m or 0.0)
