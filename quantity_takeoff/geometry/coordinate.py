"""
Coordinate Data Structure Module

Defines the vertex type shared by all measurements.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

CoordinateLike = Union["Coordinate", Dict[str, Any], Sequence[float]]


@dataclass(frozen=True)
class Coordinate:
    """
    A digitized vertex.

    x and y are drawing-space units (canvas pixels) until scaled. z is the
    field depth/height in metres and is never scaled.
    """
    x: float
    y: float
    z: Optional[float] = None

    @property
    def depth(self) -> float:
        """z with a missing value read as 0."""
        return self.z if self.z is not None else 0.0

    @property
    def has_z(self) -> bool:
        return self.z is not None

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        d = {"x": self.x, "y": self.y}
        if self.z is not None:
            d["z"] = self.z
        return d

    @classmethod
    def from_any(cls, value: CoordinateLike) -> "Coordinate":
        """
        Build a Coordinate from a dict, a tuple/list or another Coordinate.

        Dicts may carry depth as "z" or "elevation".

        Raises:
            ValueError: If the value has no usable x/y
        """
        if isinstance(value, Coordinate):
            return value

        if isinstance(value, dict):
            if "x" not in value or "y" not in value:
                raise ValueError(f"Coordinate requires x and y: {value!r}")
            z = value.get("z", value.get("elevation"))
            return cls(
                float(value["x"]),
                float(value["y"]),
                float(z) if z is not None else None,
            )

        if isinstance(value, (list, tuple)) and len(value) in (2, 3):
            z = value[2] if len(value) == 3 else None
            return cls(float(value[0]), float(value[1]), float(z) if z is not None else None)

        raise ValueError(f"Cannot interpret {value!r} as a coordinate")


def to_coordinates(points: Iterable[CoordinateLike]) -> List[Coordinate]:
    """Normalize an iterable of coordinate-like values."""
    return [Coordinate.from_any(p) for p in points]
