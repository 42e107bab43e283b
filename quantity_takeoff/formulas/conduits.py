"""
Conduit Formula Module

Internal volume and estimated weight of conduit runs laid along a path.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from ..geometry.coordinate import Coordinate
from ..geometry.kernel import polyline_length_3d


@dataclass
class ConduitRun:
    """Quantities of one conduit type along the path."""
    material: str
    count: int
    outer_diameter_mm: float
    inner_diameter_mm: float
    density_kg_m3: float
    length_m: float
    internal_volume_m3: float
    weight_kg: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def conduit_length(points: Sequence[Coordinate]) -> float:
    """Conduit length: 3D polyline length."""
    return polyline_length_3d(points)


def internal_volume(inner_diameter_mm: float, length_m: float) -> float:
    """Bore volume of a conduit: π r_in² L."""
    radius = inner_diameter_mm / 2 / 1000
    return math.pi * radius * radius * length_m


def conduit_weight(
    density_kg_m3: float,
    outer_diameter_mm: float,
    inner_diameter_mm: float,
    length_m: float
) -> float:
    """
    Estimated conduit weight from its wall volume.

    ρ π (r_out² - r_in²) L
    """
    outer = outer_diameter_mm / 2 / 1000
    inner = inner_diameter_mm / 2 / 1000
    return density_kg_m3 * math.pi * (outer * outer - inner * inner) * length_m


def conduit_run(
    material: str,
    outer_diameter_mm: float,
    inner_diameter_mm: float,
    density_kg_m3: float,
    length_m: float,
    count: int = 1
) -> ConduitRun:
    """Quantities for `count` identical conduits laid over length_m."""
    return ConduitRun(
        material=material,
        count=count,
        outer_diameter_mm=outer_diameter_mm,
        inner_diameter_mm=inner_diameter_mm,
        density_kg_m3=density_kg_m3,
        length_m=length_m * count,
        internal_volume_m3=internal_volume(inner_diameter_mm, length_m) * count,
        weight_kg=conduit_weight(density_kg_m3, outer_diameter_mm, inner_diameter_mm, length_m) * count,
    )
