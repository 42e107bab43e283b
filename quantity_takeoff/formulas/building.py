"""
Building Formula Module

Masonry walls, slabs, foundations and structural concrete members.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

from ..constants import FoundationKind
from .sections import circle_area

logger = logging.getLogger(__name__)


# =============================================================================
# MASONRY
# =============================================================================

@dataclass
class WallQuantities:
    length_m: float
    height_m: float
    thickness_m: float
    masonry_area_m2: float
    openings_area_m2: float
    net_area_m2: float
    volume_m3: float
    estimated_blocks: Optional[int]
    mortar_m3: float
    weight_kg: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def opening_area(width_m: float, height_m: float, quantity: int = 1) -> float:
    """Total area of `quantity` identical openings."""
    return width_m * height_m * quantity


def block_count(
    net_area_m2: float,
    length_mm: float,
    height_mm: float,
    joint_horizontal_mm: float,
    joint_vertical_mm: float
) -> int:
    """
    Blocks needed for a wall face.

    Each block covers (length + joint) × (height + joint); the count is
    rounded up.
    """
    module = ((length_mm + joint_horizontal_mm) / 1000) * ((height_mm + joint_vertical_mm) / 1000)
    if module <= 0:
        return 0
    return math.ceil(net_area_m2 / module)


def wall_quantities(
    length_m: float,
    height_m: float,
    thickness_m: float,
    openings_area_m2: float = 0.0,
    block: Optional[Dict[str, float]] = None,
    mortar_fraction: float = 0.10,
    density_kg_m3: float = 1500
) -> WallQuantities:
    """
    Calculate masonry wall quantities.

    Args:
        length_m: Wall length along its axis
        height_m: Wall height
        thickness_m: Wall thickness
        openings_area_m2: Sum of door/window areas to subtract
        block: Block dimensions (length_mm, height_mm, joint_horizontal_mm,
            joint_vertical_mm); no block count when omitted
        mortar_fraction: Mortar volume as a fraction of wall volume
        density_kg_m3: Masonry density

    Returns:
        WallQuantities
    """
    masonry_area = length_m * height_m
    net_area = masonry_area - openings_area_m2
    volume = net_area * thickness_m

    blocks = None
    if block:
        blocks = block_count(
            net_area,
            block["length_mm"],
            block["height_mm"],
            block.get("joint_horizontal_mm", 0),
            block.get("joint_vertical_mm", 0),
        )

    return WallQuantities(
        length_m=length_m,
        height_m=height_m,
        thickness_m=thickness_m,
        masonry_area_m2=masonry_area,
        openings_area_m2=openings_area_m2,
        net_area_m2=net_area,
        volume_m3=volume,
        estimated_blocks=blocks,
        mortar_m3=volume * mortar_fraction,
        weight_kg=volume * density_kg_m3,
    )


# =============================================================================
# SLABS AND FOUNDATIONS
# =============================================================================

def slab_volume(area_m2: float, thickness_m: float) -> float:
    """Flat element volume: plan area × thickness."""
    return area_m2 * thickness_m


def box_volume(length_m: float, width_m: float, height_m: float, quantity: int = 1) -> float:
    """Pad/footing volume for `quantity` identical units."""
    return length_m * width_m * height_m * quantity


def grade_beam_volume(length_m: float, width_m: float, height_m: float) -> float:
    return length_m * width_m * height_m


def pile_volume(diameter_m: float, length_m: float, quantity: int = 1) -> float:
    """Bored pile shaft volume: πr² × length × quantity."""
    return circle_area(diameter_m) * length_m * quantity


@dataclass
class FoundationVolume:
    kind: str
    quantity: int
    volume_m3: float
    length_m: Optional[float] = None
    area_m2: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def foundation_volume(
    kind: str,
    length_m: float = 0.0,
    width_m: float = 0.0,
    height_m: float = 0.0,
    diameter_m: float = 0.0,
    area_m2: float = 0.0,
    thickness_m: float = 0.0,
    quantity: int = 1
) -> FoundationVolume:
    """
    Concrete volume of a foundation element.

    - pad/footing: length × width × height × quantity
    - grade_beam: length × width × height
    - raft: area × thickness
    - pile: πr² × length × quantity

    Args:
        kind: FoundationKind value
        length_m: Element length (pad side, beam length, pile length)
        width_m: Element width
        height_m: Element height
        diameter_m: Pile diameter
        area_m2: Raft plan area
        thickness_m: Raft thickness
        quantity: Identical units (pad/footing/pile)

    Returns:
        FoundationVolume
    """
    if kind in (FoundationKind.PAD, FoundationKind.FOOTING):
        return FoundationVolume(kind, quantity, box_volume(length_m, width_m, height_m, quantity))

    if kind == FoundationKind.GRADE_BEAM:
        return FoundationVolume(kind, 1, grade_beam_volume(length_m, width_m, height_m), length_m=length_m)

    if kind == FoundationKind.RAFT:
        return FoundationVolume(kind, 1, slab_volume(area_m2, thickness_m), area_m2=area_m2)

    return FoundationVolume(kind, quantity, pile_volume(diameter_m, length_m, quantity), length_m=length_m)


# =============================================================================
# CONCRETE AND REBAR
# =============================================================================

def member_volume(section_area_m2: float, length_m: float) -> float:
    """Beam (length) or column (height) volume: section area × extent."""
    return section_area_m2 * length_m


def rebar_weight(volume_m3: float, rate_kg_m3: float) -> float:
    """Reinforcement steel estimate: volume × rebar rate."""
    return volume_m3 * rate_kg_m3


def concrete_weight(volume_m3: float, density_kg_m3: float) -> float:
    return volume_m3 * density_kg_m3


def rebar_rate_warnings(rate_kg_m3: float, typical_min: float, typical_max: float) -> Sequence[str]:
    """Advisory notes for a rebar rate outside the typical range."""
    if typical_min <= rate_kg_m3 <= typical_max:
        return []
    message = (
        f"Rebar rate {rate_kg_m3:g} kg/m³ is outside the typical "
        f"{typical_min:g}-{typical_max:g} kg/m³ range"
    )
    logger.warning(message)
    return [message]
