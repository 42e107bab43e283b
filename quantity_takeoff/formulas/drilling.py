"""
Directional Drilling (HDD) Formula Module

Bore length, bend-radius and cover-depth compliance, and pitch angles of a
bore path. Coordinates are metres with z as depth below grade.

Compliance problems are returned as ValidationFailure data; nothing here
raises for a non-compliant bore.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..constants import CLOSURE_EPSILON, STRAIGHT_ANGLE_EPSILON
from ..errors import ValidationFailure
from ..geometry.coordinate import Coordinate
from ..geometry.kernel import distance_2d, polyline_length_3d
from .sections import circle_area

logger = logging.getLogger(__name__)


@dataclass
class CurvatureCheck:
    """Bend-radius compliance of a bore path."""
    min_radius_required_m: float
    min_radius_actual_m: Optional[float]  # None when every bend is straight
    violations: List[ValidationFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "min_radius_required_m": self.min_radius_required_m,
            "min_radius_actual_m": self.min_radius_actual_m,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass
class DepthCheck:
    """Cover-depth compliance of a bore path."""
    min_depth_required_m: float
    min_depth_actual_m: Optional[float]
    violations: List[ValidationFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "min_depth_required_m": self.min_depth_required_m,
            "min_depth_actual_m": self.min_depth_actual_m,
            "violations": [v.to_dict() for v in self.violations],
        }


def bore_length(points: Sequence[Coordinate]) -> float:
    """Drilled length: 3D polyline length."""
    return polyline_length_3d(points)


def bend_radius(
    p1: Coordinate,
    p2: Coordinate,
    p3: Coordinate,
    straight_epsilon: float = STRAIGHT_ANGLE_EPSILON
) -> float:
    """
    Approximate bend radius at p2.

    With u = p2 - p1 and v = p3 - p2, the deflection angle is
    θ = acos(u·v / (|u||v|)) and the radius is the mean chord over θ.

    Returns:
        Radius in metres, math.inf for a straight run or a degenerate segment
    """
    ux, uy, uz = p2.x - p1.x, p2.y - p1.y, p2.depth - p1.depth
    vx, vy, vz = p3.x - p2.x, p3.y - p2.y, p3.depth - p2.depth

    mag_u = math.sqrt(ux * ux + uy * uy + uz * uz)
    mag_v = math.sqrt(vx * vx + vy * vy + vz * vz)
    if mag_u < CLOSURE_EPSILON or mag_v < CLOSURE_EPSILON:
        return math.inf

    cos_theta = (ux * vx + uy * vy + uz * vz) / (mag_u * mag_v)
    cos_theta = min(1.0, max(-1.0, cos_theta))
    theta = math.acos(cos_theta)

    if theta < straight_epsilon:
        return math.inf

    return ((mag_u + mag_v) / 2) / theta


def check_curvature(
    points: Sequence[Coordinate],
    min_radius_m: float,
    straight_epsilon: float = STRAIGHT_ANGLE_EPSILON
) -> CurvatureCheck:
    """
    Check every interior vertex against the minimum bend radius.

    A violation is recorded with the index of the segment entering the
    bend (the first vertex of the triple).

    Args:
        points: Bore path in metres
        min_radius_m: Minimum allowed radius
        straight_epsilon: Deflection below which a bend counts as straight

    Returns:
        CurvatureCheck
    """
    violations = []
    smallest = math.inf

    for i in range(len(points) - 2):
        radius = bend_radius(points[i], points[i + 1], points[i + 2], straight_epsilon)
        smallest = min(smallest, radius)

        if radius < min_radius_m:
            violations.append(ValidationFailure(
                check="curvature",
                index=i,
                actual=radius,
                required=min_radius_m,
            ))

    if violations:
        logger.debug(f"Curvature check: {len(violations)} bend(s) under {min_radius_m:.2f} m")

    return CurvatureCheck(
        min_radius_required_m=min_radius_m,
        min_radius_actual_m=smallest if math.isfinite(smallest) else None,
        violations=violations,
    )


def check_depth(points: Sequence[Coordinate], min_depth_m: float) -> DepthCheck:
    """
    Check every vertex depth (z, missing = 0) against the minimum cover.

    Returns:
        DepthCheck with one violation per shallow vertex
    """
    violations = []
    for i, point in enumerate(points):
        if point.depth < min_depth_m:
            violations.append(ValidationFailure(
                check="depth",
                index=i,
                actual=point.depth,
                required=min_depth_m,
            ))

    return DepthCheck(
        min_depth_required_m=min_depth_m,
        min_depth_actual_m=min(p.depth for p in points) if points else None,
        violations=violations,
    )


def segment_pitch(p1: Coordinate, p2: Coordinate) -> float:
    """Inclination of a segment from horizontal, in degrees (magnitude)."""
    run = distance_2d(p1, p2)
    rise = abs(p2.depth - p1.depth)
    if run < CLOSURE_EPSILON:
        return 90.0 if rise > 0 else 0.0
    return math.degrees(math.atan(rise / run))


def pitch_angles(points: Sequence[Coordinate]) -> Tuple[float, float]:
    """
    Measured entry and exit pitch of the bore path.

    Returns:
        (entry_degrees, exit_degrees) from the first and last segments
    """
    if len(points) < 2:
        return (0.0, 0.0)
    return (segment_pitch(points[0], points[1]), segment_pitch(points[-2], points[-1]))


def reamed_volume(length_m: float, diameter_mm: float) -> float:
    """Soil displaced by a reaming pass of the given diameter."""
    return circle_area(diameter_mm / 1000) * length_m
