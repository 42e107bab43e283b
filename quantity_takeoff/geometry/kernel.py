"""
Geometry Kernel Module

Pure 2D/3D computational-geometry primitives. Everything here works in
whatever units the coordinates carry; nothing knows about drawing scales.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import numpy as np
from shapely.geometry import Polygon
from shapely.validation import explain_validity

from ..constants import CLOSURE_EPSILON, MIN_POLYGON_VERTICES
from ..errors import GeometryError
from .coordinate import Coordinate

logger = logging.getLogger(__name__)


@dataclass
class PolygonValidation:
    """Outcome of a polygon structure check."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class Slope:
    """Grade between two points."""
    run: float  # horizontal distance
    rise: float  # z2 - z1
    percent: float
    angle_deg: float


@dataclass
class ElevationProfile:
    """Stations along a straight alignment, sorted by distance."""
    total_length: float
    stations: List[Tuple[float, float]] = field(default_factory=list)  # (distance, elevation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_length": self.total_length,
            "stations": [{"distance": d, "elevation": e} for d, e in self.stations],
        }


@dataclass
class MarkerCount:
    """Tally of point markers."""
    total: int
    by_category: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "by_category": dict(self.by_category)}


def distance_2d(p1: Coordinate, p2: Coordinate) -> float:
    """Euclidean distance in the XY plane."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def distance_3d(p1: Coordinate, p2: Coordinate) -> float:
    """Euclidean distance including depth; missing z counts as 0."""
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    dz = p2.depth - p1.depth
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def segment_lengths(points: Sequence[Coordinate], use_3d: bool = False) -> List[float]:
    """Length of each consecutive segment."""
    measure = distance_3d if use_3d else distance_2d
    return [measure(points[i], points[i + 1]) for i in range(len(points) - 1)]


def polyline_length(points: Sequence[Coordinate]) -> float:
    """Sum of 2D segment lengths; 0 for fewer than 2 points."""
    if len(points) < 2:
        return 0.0
    return sum(segment_lengths(points))


def polyline_length_3d(points: Sequence[Coordinate]) -> float:
    """Sum of 3D segment lengths; 0 for fewer than 2 points."""
    if len(points) < 2:
        return 0.0
    return sum(segment_lengths(points, use_3d=True))


def is_closed(points: Sequence[Coordinate], epsilon: float = CLOSURE_EPSILON) -> bool:
    """True if the last vertex repeats the first within epsilon on both axes."""
    if not points:
        return False
    first, last = points[0], points[-1]
    return abs(first.x - last.x) < epsilon and abs(first.y - last.y) < epsilon


def close_ring(points: Sequence[Coordinate], epsilon: float = CLOSURE_EPSILON) -> List[Coordinate]:
    """Return the ring with the first vertex appended if it is open."""
    ring = list(points)
    if ring and not is_closed(ring, epsilon):
        ring.append(ring[0])
    return ring


def polygon_area(points: Sequence[Coordinate], epsilon: float = CLOSURE_EPSILON) -> float:
    """
    Polygon area by the Shoelace formula.

    An open ring is implicitly closed before summing.

    Args:
        points: Polygon vertices
        epsilon: Closure tolerance

    Returns:
        Unsigned area (0 for fewer than 3 vertices)
    """
    if len(points) < 3:
        return 0.0

    ring = close_ring(points, epsilon)
    xs = np.array([p.x for p in ring], dtype=float)
    ys = np.array([p.y for p in ring], dtype=float)

    # sum(x_i * y_{i+1} - x_{i+1} * y_i)
    cross = np.dot(xs[:-1], ys[1:]) - np.dot(xs[1:], ys[:-1])
    return float(abs(cross) / 2.0)


def polygon_perimeter(points: Sequence[Coordinate], epsilon: float = CLOSURE_EPSILON) -> float:
    """Sum of edge lengths, implicitly closing an open ring."""
    if len(points) < 3:
        return 0.0
    return polyline_length(close_ring(points, epsilon))


def validate_polygon(points: Sequence[Coordinate], epsilon: float = CLOSURE_EPSILON) -> PolygonValidation:
    """
    Check polygon structure without raising.

    Errors: fewer than 3 vertices, ring not closed.
    Warnings: self-intersecting ring (does not make the polygon invalid).

    Args:
        points: Polygon vertices, closing vertex included
        epsilon: Closure tolerance

    Returns:
        PolygonValidation
    """
    result = PolygonValidation(valid=True)

    if len(points) < MIN_POLYGON_VERTICES:
        result.errors.append(
            f"Polygon has {len(points)} vertices, at least {MIN_POLYGON_VERTICES} required"
        )

    if points and not is_closed(points, epsilon):
        last = len(points) - 1
        result.errors.append(
            f"Polygon is not closed: vertex {last} differs from vertex 0 "
            f"by more than {epsilon:g}"
        )

    if not result.errors:
        ring = [p.as_tuple() for p in points]
        if len(set(ring)) >= 3:
            shape = Polygon(ring)
            if not shape.is_valid:
                result.warnings.append(f"Polygon ring is not simple: {explain_validity(shape)}")

    result.valid = not result.errors
    return result


def slope_between(p1: Coordinate, p2: Coordinate) -> Slope:
    """
    Grade from p1 to p2 using the horizontal run and the z difference.

    A zero run yields a vertical slope (infinite percent, +/-90 degrees).
    """
    run = distance_2d(p1, p2)
    rise = p2.depth - p1.depth

    if run < CLOSURE_EPSILON:
        if rise == 0:
            return Slope(run=run, rise=rise, percent=0.0, angle_deg=0.0)
        return Slope(
            run=run,
            rise=rise,
            percent=math.copysign(math.inf, rise),
            angle_deg=math.copysign(90.0, rise),
        )

    grade = rise / run
    return Slope(
        run=run,
        rise=rise,
        percent=grade * 100,
        angle_deg=math.degrees(math.atan(grade)),
    )


def segment_directions(points: Sequence[Coordinate]) -> List[Dict[str, float]]:
    """
    Unit direction vector and length of each non-degenerate segment.

    Returns:
        List of {"segment_index", "dx", "dy", "length"}
    """
    directions = []
    for i in range(len(points) - 1):
        length = distance_2d(points[i], points[i + 1])
        if length <= CLOSURE_EPSILON:
            continue
        directions.append({
            "segment_index": i,
            "dx": (points[i + 1].x - points[i].x) / length,
            "dy": (points[i + 1].y - points[i].y) / length,
            "length": length,
        })
    return directions


def offset_polyline(
    points: Sequence[Coordinate],
    distance: float,
    side: str = "both"
) -> Dict[str, List[Coordinate]]:
    """
    Parallel lines at a perpendicular distance from a polyline.

    Each segment is shifted along its left normal; joints are not mitred, so
    consecutive shifted segments simply share the shifted start vertex.

    Args:
        points: Base polyline
        distance: Offset distance in the same units as the points
        side: "left", "right" or "both"

    Returns:
        Mapping of side name to offset vertices
    """
    if side not in ("left", "right", "both"):
        raise ValueError(f"Unknown offset side: {side}")

    sides = ("left", "right") if side == "both" else (side,)
    result: Dict[str, List[Coordinate]] = {s: [] for s in sides}

    last = len(points) - 2
    for i in range(len(points) - 1):
        p1, p2 = points[i], points[i + 1]
        length = distance_2d(p1, p2)
        if length <= CLOSURE_EPSILON:
            nx = ny = 0.0
        else:
            # left normal of the segment direction
            nx = -(p2.y - p1.y) / length
            ny = (p2.x - p1.x) / length

        for s in sides:
            sign = 1.0 if s == "left" else -1.0
            shift_x = sign * distance * nx
            shift_y = sign * distance * ny
            result[s].append(Coordinate(p1.x + shift_x, p1.y + shift_y, p1.z))
            if i == last:
                result[s].append(Coordinate(p2.x + shift_x, p2.y + shift_y, p2.z))

    return result


def bounding_box(points: Sequence[Coordinate]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of the points."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def elevation_profile(
    start: Coordinate,
    end: Coordinate,
    stations: Iterable[Tuple[float, float]],
    epsilon: float = CLOSURE_EPSILON
) -> ElevationProfile:
    """
    Elevation stations along the straight line from start to end.

    Args:
        start: Alignment start
        end: Alignment end
        stations: (distance from start, elevation) pairs in any order
        epsilon: Tolerance on the alignment length

    Returns:
        ElevationProfile with stations sorted by distance

    Raises:
        GeometryError: A station lies beyond the end of the alignment
    """
    total_length = distance_2d(start, end)
    ordered = sorted((float(d), float(e)) for d, e in stations)

    if ordered and ordered[-1][0] > total_length + epsilon:
        raise GeometryError(
            f"Station at {ordered[-1][0]:g} is beyond the alignment length {total_length:g}",
            index=len(ordered) - 1,
            threshold=total_length,
        )

    return ElevationProfile(total_length=total_length, stations=ordered)


def offset_area(
    points: Sequence[Coordinate],
    distance: float,
    epsilon: float = CLOSURE_EPSILON
) -> float:
    """
    Area swept by offsetting a polyline or ring by `distance`.

    An open line covers both sides: length * distance * 2. A closed ring
    grows outward with mitred corners and the grown polygon's area is
    returned.

    Args:
        points: Base polyline or closed ring
        distance: Offset distance, same units as the points
        epsilon: Closure tolerance

    Returns:
        Area in squared point units (0 for fewer than 2 vertices)
    """
    if distance < 0:
        raise GeometryError(f"Offset distance must be >= 0, got {distance}", threshold=0)
    if len(points) < 2:
        return 0.0

    if not is_closed(points, epsilon):
        return polyline_length(points) * distance * 2

    ring = [(p.x, p.y) for p in points]
    if len(set(ring)) < 3:
        return 0.0
    grown = Polygon(ring).buffer(distance, join_style="mitre")
    logger.debug(f"Offset ring by {distance:g}: area {grown.area:.4f}")
    return float(grown.area)


def count_markers(markers: Iterable[Mapping[str, Any]]) -> MarkerCount:
    """Count point markers, grouped by their "category" (blank = uncategorized)."""
    tally = Counter((m.get("category") or "uncategorized") for m in markers)
    return MarkerCount(total=sum(tally.values()), by_category=dict(tally))
