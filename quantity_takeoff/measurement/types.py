"""
Measurement Types Module

The closed set of measurement types and one frozen input dataclass per
type. Every input carries its raw drawing-space geometry, its
type-specific attributes and (for measured types) the ScaleContext.

Optional attributes left as None are filled from the presets at build
time; they are never defaulted here so a rebuild under different settings
picks up the new presets.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from ..calibration.scale_transformer import ScaleContext
from ..constants import HydroSubtype, SectionShape
from ..errors import InvalidAttributeError
from ..geometry.coordinate import Coordinate


class MeasurementType(Enum):
    """Closed tag set of measurement types."""
    TRENCH = "trench"
    BORE_SHOT = "bore_shot"
    HYDRO_EXCAVATION = "hydro_excavation"
    CONDUIT = "conduit"
    VAULT = "vault"
    AREA = "area"
    WALL = "wall"
    SLAB = "slab"
    FOUNDATION = "foundation"
    STRUCTURE = "structure"
    FINISHING = "finishing"
    ROOF = "roof"
    NOTE = "note"
    SELECT = "select"

    @classmethod
    def from_string(cls, value: str) -> "MeasurementType":
        """
        Parse a measurement type tag.

        Case-insensitive; hyphens and spaces are read as underscores.

        Examples:
            >>> MeasurementType.from_string("bore-shot")
            MeasurementType.BORE_SHOT
            >>> MeasurementType.from_string("Hydro Excavation")
            MeasurementType.HYDRO_EXCAVATION

        Raises:
            InvalidAttributeError: For an unknown tag
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidAttributeError(f"Measurement type must be a string, got {value!r}")

        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise InvalidAttributeError(f"Unknown measurement type '{value}' (expected one of: {valid})")


def _coerce_points(value) -> Tuple[Coordinate, ...]:
    return tuple(Coordinate.from_any(p) for p in value)


class _InputBase:
    """
    Normalization shared by all input dataclasses.

    Lists become tuples, "points" become Coordinates and "scale" becomes a
    ScaleContext, so inputs are immutable and compare by value.
    """
    measurement_type: ClassVar[MeasurementType]

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "points" and value is not None:
                value = _coerce_points(value)
            elif f.name == "scale" and value is not None:
                value = ScaleContext.from_any(value)
            elif isinstance(value, dict):
                value = tuple(sorted(value.items()))
            elif isinstance(value, list):
                value = tuple(value)
            object.__setattr__(self, f.name, value)

    def geometry(self) -> Dict[str, Any]:
        """Raw drawing-space geometry of this input."""
        points = getattr(self, "points", None) or ()
        return {"points": [p.to_dict() for p in points]}


# =============================================================================
# ATTRIBUTE SPECS
# =============================================================================

@dataclass(frozen=True)
class DimensionSpec:
    """
    Trench width or depth.

    A constant spec uses `value` everywhere; a variable spec lists one
    value per segment (width) or per vertex (depth).
    """
    kind: str = "constant"
    value: Optional[float] = None
    values: Tuple[float, ...] = ()

    def __post_init__(self):
        if self.kind not in ("constant", "variable"):
            raise InvalidAttributeError(f"Dimension kind must be 'constant' or 'variable', got '{self.kind}'")
        object.__setattr__(self, "values", tuple(self.values))

    @property
    def is_variable(self) -> bool:
        return self.kind == "variable"

    @classmethod
    def constant(cls, value: float) -> "DimensionSpec":
        return cls("constant", value=value)

    @classmethod
    def variable(cls, values) -> "DimensionSpec":
        return cls("variable", values=tuple(values))


@dataclass(frozen=True)
class SoilSpec:
    """Soil swell/shrink parameters; unset rates come from the soil table."""
    soil_type: Optional[str] = None
    expansion_rate: Optional[float] = None
    contraction_rate: Optional[float] = None
    contraction_class: Optional[str] = None  # "normal" or "high"


@dataclass(frozen=True)
class RemovalSpec:
    """Pavement removed over a trench; width defaults to the trench width."""
    thickness_m: float
    width_m: Optional[float] = None


@dataclass(frozen=True)
class SectionSpec:
    """
    Cross-section of a nozzle footprint, beam, column or pile.

    For rectangular plan footprints height_m is the footprint length.
    """
    shape: str = SectionShape.RECTANGULAR
    width_m: Optional[float] = None
    height_m: Optional[float] = None
    diameter_m: Optional[float] = None
    area_m2: Optional[float] = None

    def __post_init__(self):
        valid = (SectionShape.CIRCULAR, SectionShape.RECTANGULAR, SectionShape.CUSTOM)
        if self.shape not in valid:
            raise InvalidAttributeError(f"Unknown section shape '{self.shape}'")


@dataclass(frozen=True)
class ConduitSpec:
    """One conduit size laid along a path, `count` times."""
    outer_diameter_mm: float
    material: str = "pvc"
    wall_thickness_mm: Optional[float] = None
    nominal_diameter_mm: Optional[float] = None
    count: int = 1
    min_curvature_radius_m: Optional[float] = None


@dataclass(frozen=True)
class OpeningSpec:
    """Door or window subtracted from a wall."""
    width_m: Optional[float] = None
    height_m: Optional[float] = None
    quantity: int = 1


@dataclass(frozen=True)
class BlockSpec:
    """Masonry unit dimensions in millimetres."""
    length_mm: float
    height_mm: float
    width_mm: Optional[float] = None
    joint_horizontal_mm: float = 10
    joint_vertical_mm: float = 10

    def to_dict(self) -> Dict[str, float]:
        return {
            "length_mm": self.length_mm,
            "height_mm": self.height_mm,
            "width_mm": self.width_mm,
            "joint_horizontal_mm": self.joint_horizontal_mm,
            "joint_vertical_mm": self.joint_vertical_mm,
        }


@dataclass(frozen=True)
class SurfaceSpec(_InputBase):
    """A finishing surface; a height makes it vertical (perimeter × height)."""
    points: Tuple[Coordinate, ...]
    height_m: Optional[float] = None
    name: str = ""


@dataclass(frozen=True)
class RoofPlaneSpec(_InputBase):
    points: Tuple[Coordinate, ...]
    inclination_degrees: Optional[float] = None
    inclination_percent: Optional[float] = None
    azimuth_degrees: Optional[float] = None


# =============================================================================
# MEASUREMENT INPUTS
# =============================================================================

@dataclass(frozen=True)
class TrenchInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.TRENCH

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    width: Optional[DimensionSpec] = None
    depth: Optional[DimensionSpec] = None
    soil: Optional[SoilSpec] = None
    asphalt_removal: Optional[RemovalSpec] = None
    concrete_removal: Optional[RemovalSpec] = None
    pipe_outer_diameter_m: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class BoreShotInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.BORE_SHOT

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    min_radius_m: Optional[float] = None
    min_depth_m: Optional[float] = None
    entry_angle_degrees: Optional[float] = None
    exit_angle_degrees: Optional[float] = None
    drill_diameter_mm: Optional[float] = None
    backreamer_diameter_mm: Optional[float] = None
    conduits: Tuple[ConduitSpec, ...] = ()
    label: str = ""


@dataclass(frozen=True)
class HydroExcavationInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.HYDRO_EXCAVATION

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    subtype: str = HydroSubtype.TRENCH
    section: Optional[SectionSpec] = None
    depth_m: Optional[float] = None
    efficiency_ratio: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class ConduitInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.CONDUIT

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    conduits: Tuple[ConduitSpec, ...] = ()
    label: str = ""


@dataclass(frozen=True)
class VaultInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.VAULT

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    shape: str = SectionShape.RECTANGULAR
    length_m: Optional[float] = None
    width_m: Optional[float] = None
    diameter_m: Optional[float] = None
    depth_m: Optional[float] = None
    quantity: int = 1
    structure_volume_m3: Optional[float] = None
    asphalt_removal_m3: float = 0.0
    concrete_removal_m3: float = 0.0
    label: str = ""


@dataclass(frozen=True)
class AreaInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.AREA

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    depth_m: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class WallInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.WALL

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    height_m: Optional[float] = None
    thickness_m: Optional[float] = None
    external: bool = True
    material: Optional[str] = None
    block_preset: Optional[str] = None
    block: Optional[BlockSpec] = None
    openings: Tuple[OpeningSpec, ...] = ()
    density_kg_m3: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class SlabInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.SLAB

    points: Tuple[Coordinate, ...]
    scale: ScaleContext
    thickness_m: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class FoundationInput(_InputBase):
    """
    Foundation element.

    pad/footing: length_m × width_m × height_m, quantity units.
    grade_beam: polyline points (or length_m) × width_m × height_m.
    raft: polygon points × thickness_m.
    pile: diameter_m × length_m, quantity units.
    """
    measurement_type: ClassVar[MeasurementType] = MeasurementType.FOUNDATION

    kind: str
    scale: ScaleContext
    points: Tuple[Coordinate, ...] = ()
    length_m: Optional[float] = None
    width_m: Optional[float] = None
    height_m: Optional[float] = None
    diameter_m: Optional[float] = None
    thickness_m: Optional[float] = None
    quantity: int = 1
    rebar_rate_kg_m3: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class StructureInput(_InputBase):
    """
    Structural concrete member.

    beam: section × length_m (or polyline points length).
    column: section × height_m.
    slab: polygon points × thickness_m.
    """
    measurement_type: ClassVar[MeasurementType] = MeasurementType.STRUCTURE

    element: str
    scale: ScaleContext
    points: Tuple[Coordinate, ...] = ()
    section: Optional[SectionSpec] = None
    length_m: Optional[float] = None
    height_m: Optional[float] = None
    thickness_m: Optional[float] = None
    quantity: int = 1
    rebar_rate_kg_m3: Optional[float] = None
    label: str = ""


@dataclass(frozen=True)
class FinishingInput(_InputBase):
    """A single polygon, or a set of named surfaces when points is empty."""
    measurement_type: ClassVar[MeasurementType] = MeasurementType.FINISHING

    scale: ScaleContext
    finishing_type: str = "floor"
    points: Tuple[Coordinate, ...] = ()
    surfaces: Tuple[SurfaceSpec, ...] = ()
    loss_percent: Optional[float] = None
    label: str = ""

    def geometry(self) -> Dict[str, Any]:
        d = super().geometry()
        d["surfaces"] = [[p.to_dict() for p in s.points] for s in self.surfaces]
        return d


@dataclass(frozen=True)
class RoofInput(_InputBase):
    measurement_type: ClassVar[MeasurementType] = MeasurementType.ROOF

    scale: ScaleContext
    planes: Tuple[RoofPlaneSpec, ...] = ()
    label: str = ""

    def geometry(self) -> Dict[str, Any]:
        return {"planes": [[p.to_dict() for p in plane.points] for plane in self.planes]}


@dataclass(frozen=True)
class NoteInput(_InputBase):
    """Free-text annotation; points only anchor it on the drawing."""
    measurement_type: ClassVar[MeasurementType] = MeasurementType.NOTE

    text: str = ""
    points: Tuple[Coordinate, ...] = ()
    scale: Optional[ScaleContext] = None
    author: Optional[str] = None
    linked_measurement_id: Optional[str] = None
    label: str = ""


@dataclass(frozen=True)
class SelectInput(_InputBase):
    """Reference to other records by id. Must carry no geometry."""
    measurement_type: ClassVar[MeasurementType] = MeasurementType.SELECT

    selected_ids: Tuple[str, ...] = ()
    filters: Tuple[Tuple[str, Any], ...] = ()
    points: Tuple[Coordinate, ...] = ()
    scale: Optional[ScaleContext] = None
    label: str = ""


INPUT_TYPES = {
    cls.measurement_type: cls
    for cls in (
        TrenchInput,
        BoreShotInput,
        HydroExcavationInput,
        ConduitInput,
        VaultInput,
        AreaInput,
        WallInput,
        SlabInput,
        FoundationInput,
        StructureInput,
        FinishingInput,
        RoofInput,
        NoteInput,
        SelectInput,
    )
}
