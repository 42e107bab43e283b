"""
Scale Transformer Module

Converts drawing-space (canvas) lengths and areas into real-world metres.

A scale "N:M" means N drawing units represent M real units, so the ratio is
M/N. Zoom is the viewport magnification at capture time; dividing by it
first makes the same physical object measure identically whatever the
canvas zoom was.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..constants import (
    DEFAULT_ZOOM,
    SCALE_PATTERN,
    SCALE_SNAP_TOLERANCE,
    STANDARD_SCALE_DENOMINATORS,
)
from ..errors import ScaleFormatError
from ..geometry.coordinate import Coordinate
from ..geometry.kernel import distance_2d

logger = logging.getLogger(__name__)

_SCALE_RE = re.compile(SCALE_PATTERN)


def parse_scale(scale: str) -> float:
    """
    Parse an "N:M" scale string.

    Args:
        scale: Scale notation such as "1:100"

    Returns:
        Ratio M/N (real units per drawing unit)

    Raises:
        ScaleFormatError: If the string is not "N:M" or either term is zero
    """
    if not isinstance(scale, str):
        raise ScaleFormatError(f"Scale must be a string like '1:100', got {scale!r}")

    match = _SCALE_RE.match(scale.strip())
    if not match:
        raise ScaleFormatError(f"Invalid scale '{scale}': expected format 'N:M' (e.g. '1:100')")

    drawing, real = int(match.group(1)), int(match.group(2))
    if drawing == 0 or real == 0:
        raise ScaleFormatError(f"Invalid scale '{scale}': terms must be non-zero")

    return real / drawing


def validate_zoom(zoom: float) -> float:
    """
    Check a viewport zoom factor.

    Raises:
        ScaleFormatError: If zoom is not a finite number > 0
    """
    if isinstance(zoom, bool) or not isinstance(zoom, (int, float)):
        raise ScaleFormatError(f"Zoom must be a number, got {zoom!r}")
    if not math.isfinite(zoom) or zoom <= 0:
        raise ScaleFormatError(f"Zoom must be > 0, got {zoom}")
    return float(zoom)


@dataclass(frozen=True)
class ScaleContext:
    """Drawing scale and capture zoom attached to every measurement."""
    scale: str
    zoom: float = DEFAULT_ZOOM

    def __post_init__(self):
        parse_scale(self.scale)
        validate_zoom(self.zoom)

    @property
    def ratio(self) -> float:
        return parse_scale(self.scale)

    @property
    def length_factor(self) -> float:
        """Metres per drawing unit after zoom compensation."""
        return self.ratio / self.zoom

    def to_dict(self) -> Dict[str, object]:
        return {"scale": self.scale, "zoom": self.zoom}

    @classmethod
    def from_any(cls, value, default_zoom: float = DEFAULT_ZOOM) -> "ScaleContext":
        """Accept a ScaleContext, a bare scale string or a {scale, zoom} dict."""
        if isinstance(value, ScaleContext):
            return value
        if isinstance(value, str):
            return cls(value, default_zoom)
        if isinstance(value, dict) and "scale" in value:
            return cls(value["scale"], value.get("zoom", default_zoom))
        raise ScaleFormatError(f"Cannot interpret {value!r} as a scale context")


def to_real_length(pixels: float, scale: str, zoom: float = DEFAULT_ZOOM) -> float:
    """
    Convert a drawing-space length to metres.

    Args:
        pixels: Length in drawing units
        scale: "N:M" scale string
        zoom: Viewport zoom at capture time

    Returns:
        (pixels / zoom) * ratio
    """
    ratio = parse_scale(scale)
    zoom = validate_zoom(zoom)
    return (pixels / zoom) * ratio


def to_real_area(pixels_squared: float, scale: str, zoom: float = DEFAULT_ZOOM) -> float:
    """
    Convert a drawing-space area to square metres.

    Area scales quadratically in both the ratio and the zoom compensation.

    Returns:
        (pixels_squared / zoom²) * ratio²
    """
    ratio = parse_scale(scale)
    zoom = validate_zoom(zoom)
    return (pixels_squared / (zoom ** 2)) * (ratio ** 2)


def to_real_coordinates(
    points: Iterable[Coordinate],
    scale: str,
    zoom: float = DEFAULT_ZOOM
) -> List[Coordinate]:
    """
    Scale vertex x/y into metres.

    z is a field depth already expressed in metres and is carried unchanged.
    """
    factor = parse_scale(scale) / validate_zoom(zoom)
    return [Coordinate(p.x * factor, p.y * factor, p.z) for p in points]


def scale_from_calibration(
    point1: Coordinate,
    point2: Coordinate,
    real_length_m: float,
    zoom: float = DEFAULT_ZOOM,
    snap: bool = True
) -> Optional[str]:
    """
    Derive a "1:N" scale from two points of known real distance.

    The raw ratio is snapped to the nearest standard drawing scale when it
    lies within the snap tolerance.

    Args:
        point1: First calibration point (drawing units)
        point2: Second calibration point (drawing units)
        real_length_m: Known distance between them in metres
        zoom: Viewport zoom at capture time
        snap: Snap to a standard scale

    Returns:
        Scale string, or None if the calibration is degenerate
    """
    zoom = validate_zoom(zoom)
    drawing_length = distance_2d(point1, point2) / zoom

    if drawing_length <= 0 or real_length_m <= 0:
        logger.warning("Degenerate calibration: zero drawing or real length")
        return None

    ratio = real_length_m / drawing_length
    denominator = ratio

    if snap:
        nearest = min(STANDARD_SCALE_DENOMINATORS, key=lambda d: abs(d - ratio))
        if abs(nearest - ratio) / nearest <= SCALE_SNAP_TOLERANCE:
            denominator = nearest

    denominator = max(int(round(denominator)), 1)
    logger.info(
        f"Calibration: {drawing_length:.1f} units / {real_length_m:.2f} m "
        f"= ratio {ratio:.3f} -> 1:{denominator}"
    )
    return f"1:{denominator}"
