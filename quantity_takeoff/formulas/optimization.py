"""
Optimization Module

Closed-form material-planning helpers. Not used by record builds.

- strongest rectangular beam sawn from a round log
- minimum-perimeter rectangle enclosing a fixed area
- maximum-area rectangle for a fixed perimeter

The three-sided variants assume one long side runs against an existing
wall and needs no material.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class BeamSection:
    width_m: float
    height_m: float
    section_modulus_m3: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Rectangle:
    width_m: float
    length_m: float
    area_m2: float
    perimeter_m: float  # enclosed sides only for three-sided layouts

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def section_modulus(width_m: float, height_m: float) -> float:
    """Rectangular section modulus b·h²/6."""
    return width_m * height_m * height_m / 6


def strongest_beam_from_log(diameter_m: float) -> BeamSection:
    """
    Rectangle of maximum section modulus inscribed in a circle.

    Maximizing b·h²/6 subject to b² + h² = D² gives b = D/√3, h = D·√(2/3).
    """
    if diameter_m <= 0:
        return BeamSection(0.0, 0.0, 0.0)
    width = diameter_m / math.sqrt(3)
    height = diameter_m * math.sqrt(2 / 3)
    return BeamSection(width, height, section_modulus(width, height))


def min_perimeter_rectangle(area_m2: float, sides: int = 4) -> Rectangle:
    """
    Rectangle of fixed area using the least fencing.

    Four sides: a square, side √A. Three sides: the wall side is twice the
    depth, depth √(A/2).
    """
    if area_m2 <= 0:
        return Rectangle(0.0, 0.0, 0.0, 0.0)

    if sides == 3:
        depth = math.sqrt(area_m2 / 2)
        length = 2 * depth
        return Rectangle(depth, length, area_m2, length + 2 * depth)

    side = math.sqrt(area_m2)
    return Rectangle(side, side, area_m2, 4 * side)


def max_area_rectangle(perimeter_m: float, sides: int = 4) -> Rectangle:
    """
    Rectangle of greatest area for a fixed length of fencing.

    Four sides: a square, side P/4. Three sides: depth P/4 and the side
    opposite the wall P/2.
    """
    if perimeter_m <= 0:
        return Rectangle(0.0, 0.0, 0.0, 0.0)

    if sides == 3:
        depth = perimeter_m / 4
        length = perimeter_m / 2
        return Rectangle(depth, length, depth * length, perimeter_m)

    side = perimeter_m / 4
    return Rectangle(side, side, side * side, perimeter_m)
