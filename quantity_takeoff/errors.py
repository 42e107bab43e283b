"""
Error Types Module

Typed failures raised when a measurement input is structurally invalid,
plus the data carriers used for non-fatal findings.

Structural problems abort a build and are raised. Compliance findings
(ValidationFailure) and numeric clamps (NumericGuardClamp) are data: they
travel inside a successfully built record.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


class TakeoffError(ValueError):
    """Base class for all rejected measurement inputs."""


class ScaleFormatError(TakeoffError):
    """Scale string is not "N:M", or zoom is not a positive number."""


class GeometryError(TakeoffError):
    """
    Geometry cannot be measured.

    Raised for too few vertices, unclosed polygons and non-positive
    dimensions. `index` names the offending vertex or segment (when there
    is one) and `threshold` the violated limit.
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        threshold: Optional[Any] = None,
    ):
        super().__init__(message)
        self.index = index
        self.threshold = threshold


class InvalidAttributeError(TakeoffError):
    """Unknown enumerated attribute value or a ratio out of range."""


@dataclass(frozen=True)
class ValidationFailure:
    """A compliance violation found on a built measurement."""
    check: str  # "curvature" or "depth"
    index: int  # segment index (curvature) or point index (depth)
    actual: float
    required: float

    @property
    def deficit(self) -> float:
        return max(self.required - self.actual, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "check": self.check,
            "index": self.index,
            "actual": self.actual,
            "required": self.required,
            "deficit": self.deficit,
        }

    def describe(self) -> str:
        if self.check == "curvature":
            return (
                f"Bend at segment {self.index}: radius {self.actual:.2f} m "
                f"is below the minimum {self.required:.2f} m"
            )
        return (
            f"Point {self.index}: depth {self.actual:.2f} m "
            f"is below the minimum {self.required:.2f} m"
        )


@dataclass(frozen=True)
class NumericGuardClamp:
    """A derived value that was non-finite or negative and was forced to 0."""
    field: str
    original: float

    def describe(self) -> str:
        return f"Clamped {self.field} from {self.original!r} to 0"
