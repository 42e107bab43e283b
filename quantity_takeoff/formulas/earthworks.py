"""
Earthworks Formula Module

Excavation quantities: trench prisms, soil swell/shrink, surface removal,
backfill, spoil, hydro-excavation and vault pits.

All inputs are real-world metres. Functions never raise on finite input;
the builder clamps anything non-finite or negative afterwards.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..constants import HydroSubtype, SectionShape
from ..geometry.coordinate import Coordinate
from ..geometry.kernel import polyline_length, segment_lengths
from .sections import circle_area

logger = logging.getLogger(__name__)

Dimension = Union[float, Sequence[float]]


# =============================================================================
# TRENCH
# =============================================================================

@dataclass
class TrenchSegment:
    """One trapezoidal prism of a variable-section trench."""
    index: int
    length_m: float
    width_m: float
    start_depth_m: float
    end_depth_m: float
    volume_m3: float

    @property
    def average_depth_m(self) -> float:
        return (self.start_depth_m + self.end_depth_m) / 2

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["average_depth_m"] = self.average_depth_m
        return d


@dataclass
class TrenchVolume:
    """Excavated (cut) volume of a trench."""
    length_m: float
    volume_m3: float
    variable: bool
    segments: List[TrenchSegment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "length_m": self.length_m,
            "volume_m3": self.volume_m3,
            "variable_section": self.variable,
            "segments": [s.to_dict() for s in self.segments],
        }


def prism_volume(length_m: float, width_m: float, start_depth_m: float, end_depth_m: float) -> float:
    """Trapezoidal prism: length × width × average of the end depths."""
    return length_m * width_m * (start_depth_m + end_depth_m) / 2


def trench_volume(
    points: Sequence[Coordinate],
    width: Dimension,
    depth: Dimension
) -> TrenchVolume:
    """
    Calculate trench cut volume.

    A scalar width and depth give a constant cross-section, length × width
    × depth. Otherwise the polyline is split into per-segment prisms: width
    is read per segment (n-1 values) and depth per vertex (n values), and
    each segment contributes length × width × (start + end depth) / 2.
    Segments with a non-positive length, width or depth contribute 0.

    Args:
        points: Trench centreline in metres
        width: Constant width or one width per segment
        depth: Constant depth or one depth per vertex

    Returns:
        TrenchVolume
    """
    length = polyline_length(points)
    constant_width = isinstance(width, (int, float))
    constant_depth = isinstance(depth, (int, float))

    if constant_width and constant_depth:
        if width <= 0 or depth <= 0:
            return TrenchVolume(length_m=length, volume_m3=0.0, variable=False)
        return TrenchVolume(length_m=length, volume_m3=length * width * depth, variable=False)

    lengths = segment_lengths(points)
    widths = [width] * len(lengths) if constant_width else list(width)
    depths = [depth] * len(points) if constant_depth else list(depth)

    segments = []
    for i, seg_length in enumerate(lengths):
        seg_width = widths[i] if i < len(widths) else 0.0
        start_depth = depths[i] if i < len(depths) else 0.0
        end_depth = depths[i + 1] if i + 1 < len(depths) else 0.0

        if seg_length <= 0 or seg_width <= 0 or start_depth <= 0 or end_depth <= 0:
            logger.debug(f"Trench segment {i} skipped: non-positive dimension")
            continue

        segments.append(TrenchSegment(
            index=i,
            length_m=seg_length,
            width_m=seg_width,
            start_depth_m=start_depth,
            end_depth_m=end_depth,
            volume_m3=prism_volume(seg_length, seg_width, start_depth, end_depth),
        ))

    total = sum(s.volume_m3 for s in segments)
    return TrenchVolume(length_m=length, volume_m3=total, variable=True, segments=segments)


# =============================================================================
# SOIL SWELL / SHRINK
# =============================================================================

@dataclass
class SoilVolumes:
    """Cut volume converted to loose (transport) and compacted volume."""
    soil_type: str
    cut_m3: float
    expansion_rate: float
    contraction_rate: float
    loose_m3: float
    compacted_m3: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def loose_volume(cut_m3: float, expansion_rate: float) -> float:
    """Swollen volume of excavated soil: cut × (1 + expansion)."""
    return cut_m3 * (1 + expansion_rate)


def compacted_volume(cut_m3: float, contraction_rate: float) -> float:
    """Volume after compaction: cut × (1 - contraction)."""
    return cut_m3 * (1 - contraction_rate)


def cut_volume_for_compacted_fill(compacted_m3: float, contraction_rate: float) -> float:
    """
    In-situ volume that must be cut to deliver a compacted fill volume.

    Returns math.inf when contraction is total (rate >= 1).
    """
    remaining = 1 - contraction_rate
    if remaining <= 0:
        return math.inf
    return compacted_m3 / remaining


def soil_volumes(
    cut_m3: float,
    soil_type: str,
    expansion_rate: float,
    contraction_rate: float
) -> SoilVolumes:
    return SoilVolumes(
        soil_type=soil_type,
        cut_m3=cut_m3,
        expansion_rate=expansion_rate,
        contraction_rate=contraction_rate,
        loose_m3=loose_volume(cut_m3, expansion_rate),
        compacted_m3=compacted_volume(cut_m3, contraction_rate),
    )


# =============================================================================
# SURFACE REMOVAL, BACKFILL, SPOIL
# =============================================================================

def removal_volume(length_m: float, width_m: float, thickness_m: float) -> float:
    """Asphalt or concrete pavement removed above the trench."""
    return length_m * width_m * thickness_m


def trench_backfill(excavation_m3: float, removal_volumes: Sequence[float] = ()) -> float:
    """Backfill = excavation minus pavement removals."""
    return excavation_m3 - sum(removal_volumes)


def spoil_volume(
    excavation_m3: float,
    pipe_outer_diameter_m: float,
    pipe_length_m: float,
    expansion_rate: float = 0.0
) -> float:
    """
    Soil left over after the pipe is laid, in loose volume.

    (excavation - pipe volume) × (1 + expansion)
    """
    pipe_volume = circle_area(pipe_outer_diameter_m) * pipe_length_m
    return (excavation_m3 - pipe_volume) * (1 + expansion_rate)


# =============================================================================
# HYDRO-EXCAVATION
# =============================================================================

@dataclass
class HydroExcavationVolume:
    subtype: str
    section_area_m2: float
    length_m: float
    depth_m: float
    hole_count: int
    efficiency_ratio: Optional[float]
    volume_m3: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def hydro_excavation_volume(
    subtype: str,
    points: Sequence[Coordinate],
    section_area_m2: float,
    depth_m: float,
    efficiency_ratio: Optional[float] = None
) -> HydroExcavationVolume:
    """
    Calculate soil removed by vacuum (hydro) excavation.

    - trench: section area × polyline length
    - hole: section area × depth
    - potholing: section area × depth × number of points

    Args:
        subtype: HydroSubtype value
        points: Excavation path or pothole locations (metres)
        section_area_m2: Nozzle footprint area
        depth_m: Hole depth
        efficiency_ratio: Optional recovery ratio in (0, 1]

    Returns:
        HydroExcavationVolume
    """
    length = 0.0
    holes = 0

    if subtype == HydroSubtype.TRENCH:
        length = polyline_length(points)
        volume = section_area_m2 * length
    elif subtype == HydroSubtype.HOLE:
        holes = 1
        volume = section_area_m2 * depth_m
    else:
        holes = len(points)
        volume = section_area_m2 * depth_m * holes

    if efficiency_ratio is not None:
        volume *= efficiency_ratio

    return HydroExcavationVolume(
        subtype=subtype,
        section_area_m2=section_area_m2,
        length_m=length,
        depth_m=depth_m,
        hole_count=holes,
        efficiency_ratio=efficiency_ratio,
        volume_m3=volume,
    )


# =============================================================================
# VAULT
# =============================================================================

@dataclass
class VaultVolumes:
    shape: str
    quantity: int
    excavation_m3: float
    structure_m3: float
    removal_m3: float
    backfill_m3: float

    @property
    def total_excavation_m3(self) -> float:
        return self.excavation_m3 * self.quantity

    @property
    def total_backfill_m3(self) -> float:
        return self.backfill_m3 * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["volume_m3"] = self.total_excavation_m3
        d["total_backfill_m3"] = self.total_backfill_m3
        return d


def vault_excavation_volume(
    shape: str,
    depth_m: float,
    length_m: float = 0.0,
    width_m: float = 0.0,
    diameter_m: float = 0.0
) -> float:
    """Pit volume: box l × w × depth or cylinder πr² × depth."""
    if shape == SectionShape.CIRCULAR:
        return circle_area(diameter_m) * depth_m
    return length_m * width_m * depth_m


def vault_backfill(
    excavation_m3: float,
    structure_m3: float = 0.0,
    removal_volumes: Sequence[float] = ()
) -> float:
    """Backfill around a vault: excavation - structure - pavement removals."""
    return excavation_m3 - structure_m3 - sum(removal_volumes)


def vault_volumes(
    shape: str,
    depth_m: float,
    length_m: float = 0.0,
    width_m: float = 0.0,
    diameter_m: float = 0.0,
    quantity: int = 1,
    structure_fraction: float = 0.10,
    structure_m3: Optional[float] = None,
    removal_volumes: Sequence[float] = ()
) -> VaultVolumes:
    """
    Per-unit excavation, structure and backfill volumes of a vault.

    The structure volume defaults to structure_fraction of the excavation.
    Totals for identical units are exposed through the total_* properties.
    """
    excavation = vault_excavation_volume(shape, depth_m, length_m, width_m, diameter_m)
    structure = excavation * structure_fraction if structure_m3 is None else structure_m3
    removal = sum(removal_volumes)

    return VaultVolumes(
        shape=shape,
        quantity=quantity,
        excavation_m3=excavation,
        structure_m3=structure,
        removal_m3=removal,
        backfill_m3=vault_backfill(excavation, structure, removal_volumes),
    )
