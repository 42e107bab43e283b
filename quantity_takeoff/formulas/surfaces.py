"""
Surface Formula Module

Roof planes with slope correction and finishing consumption.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..constants import CLOSURE_EPSILON

logger = logging.getLogger(__name__)


# =============================================================================
# ROOF
# =============================================================================

def slope_tangent(
    inclination_degrees: Optional[float] = None,
    inclination_percent: Optional[float] = None
) -> float:
    """
    tan θ of a roof plane.

    A percent inclination (rise per 100 of run) takes precedence over
    degrees. A plane at (or numerically at) 90° is treated as flat rather
    than producing an infinite area.
    """
    if inclination_percent is not None:
        return inclination_percent / 100

    if inclination_degrees is not None:
        radians = math.radians(inclination_degrees)
        if abs(math.cos(radians)) < CLOSURE_EPSILON:
            logger.warning(f"Roof inclination {inclination_degrees}° is vertical, slope ignored")
            return 0.0
        return math.tan(radians)

    return 0.0


def slope_factor(tangent: float) -> float:
    """Secant of the inclination: sqrt(1 + tan²θ)."""
    return math.sqrt(1 + tangent * tangent)


def roof_real_area(
    projected_area_m2: float,
    inclination_degrees: Optional[float] = None,
    inclination_percent: Optional[float] = None
) -> float:
    """Sloped area of a plane from its projected (plan) area."""
    return projected_area_m2 * slope_factor(slope_tangent(inclination_degrees, inclination_percent))


@dataclass
class RoofPlane:
    index: int
    projected_area_m2: float
    slope_factor: float
    real_area_m2: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RoofAreas:
    planes: List[RoofPlane] = field(default_factory=list)

    @property
    def projected_area_m2(self) -> float:
        return sum(p.projected_area_m2 for p in self.planes)

    @property
    def real_area_m2(self) -> float:
        return sum(p.real_area_m2 for p in self.planes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "planes": [p.to_dict() for p in self.planes],
            "projected_area_m2": self.projected_area_m2,
            "real_area_m2": self.real_area_m2,
            "area_m2": self.real_area_m2,
        }


def roof_areas(planes: Sequence[Dict[str, Optional[float]]]) -> RoofAreas:
    """
    Accumulate real and projected area over roof planes.

    Args:
        planes: Dicts with projected_area_m2 and optional
            inclination_degrees / inclination_percent

    Returns:
        RoofAreas
    """
    result = RoofAreas()
    for i, plane in enumerate(planes):
        projected = plane["projected_area_m2"]
        factor = slope_factor(slope_tangent(
            plane.get("inclination_degrees"),
            plane.get("inclination_percent"),
        ))
        result.planes.append(RoofPlane(
            index=i,
            projected_area_m2=projected,
            slope_factor=factor,
            real_area_m2=projected * factor,
        ))
    return result


# =============================================================================
# FINISHING
# =============================================================================

def surface_area(area_m2: float, perimeter_m: float, height_m: Optional[float] = None) -> float:
    """
    Finishable area of one surface.

    Vertical surfaces (with a height) contribute perimeter × height instead
    of their plan area.
    """
    if height_m:
        return perimeter_m * height_m
    return area_m2


def consumption(net_area_m2: float, loss_percent: float) -> float:
    """Material to order: net area × (1 + loss / 100)."""
    return net_area_m2 * (1 + loss_percent / 100)


@dataclass
class FinishingQuantities:
    finishing_type: str
    surface_areas_m2: List[float]
    loss_percent: float

    @property
    def net_area_m2(self) -> float:
        return sum(self.surface_areas_m2)

    @property
    def consumption_m2(self) -> float:
        return consumption(self.net_area_m2, self.loss_percent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finishing_type": self.finishing_type,
            "surface_areas_m2": list(self.surface_areas_m2),
            "net_area_m2": self.net_area_m2,
            "area_m2": self.net_area_m2,
            "loss_percent": self.loss_percent,
            "consumption_m2": self.consumption_m2,
        }
