"""
Measurement Builder Module

Turns a typed measurement input into a computed MeasurementRecord.

Each measurement type has one builder function. A builder validates the
structural preconditions of its input (vertex counts, closure, positive
dimensions), fills missing attributes from the presets, scales the
drawing geometry to metres and calls the formula library. Structural
problems raise TakeoffError subclasses before any formula runs; compliance
findings and numeric clamps are attached to the record as warnings.
"""

import dataclasses
import logging
import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..calibration.scale_transformer import ScaleContext, to_real_area, to_real_coordinates, to_real_length
from ..constants import (
    MIN_POLYGON_VERTICES,
    MIN_POLYLINE_VERTICES,
    FinishingType,
    FoundationKind,
    HydroSubtype,
    SectionShape,
    StructuralElement,
)
from ..errors import GeometryError, InvalidAttributeError, NumericGuardClamp, ScaleFormatError
from ..formulas import building, conduits, drilling, earthworks, surfaces
from ..formulas.sections import section_area
from ..geometry.coordinate import Coordinate
from ..geometry.kernel import (
    is_closed,
    offset_polyline,
    polygon_area,
    polygon_perimeter,
    polyline_length,
    validate_polygon,
)
from ..settings import Settings, get_settings
from .record import MeasurementRecord, deep_freeze
from .types import (
    INPUT_TYPES,
    AreaInput,
    BoreShotInput,
    ConduitInput,
    DimensionSpec,
    FinishingInput,
    FoundationInput,
    HydroExcavationInput,
    MeasurementType,
    NoteInput,
    RoofInput,
    SectionSpec,
    SelectInput,
    SlabInput,
    SoilSpec,
    StructureInput,
    TrenchInput,
    VaultInput,
    WallInput,
)

logger = logging.getLogger(__name__)

# Computed keys holding vertex positions, which may legitimately be negative
GUARD_EXEMPT_KEYS = frozenset({"edge_lines"})

CONDUIT_MATERIAL_ALIASES = {
    "fiber_optic": "fiber",
    "fibre": "fiber",
    "fibre_optic": "fiber",
    "aluminium": "aluminum",
    "polyethylene": "hdpe",
}

Builder = Callable[[Any, Settings, List[str]], Dict[str, Any]]


# =============================================================================
# STRUCTURAL VALIDATION
# =============================================================================

def _require_scale(scale: Optional[ScaleContext], what: str) -> ScaleContext:
    if scale is None:
        raise ScaleFormatError(f"{what} requires a scale (e.g. '1:100')")
    return scale


def _require_points(points: Sequence[Coordinate], minimum: int, what: str) -> None:
    if len(points) < minimum:
        raise GeometryError(
            f"{what} requires at least {minimum} vertices, got {len(points)}",
            threshold=minimum,
        )


def _require_polygon(
    points: Sequence[Coordinate],
    settings: Settings,
    what: str,
    warnings: List[str]
) -> None:
    """Reject polygons with too few vertices or an open ring."""
    _require_points(points, MIN_POLYGON_VERTICES, what)

    epsilon = settings.closure_epsilon
    if not is_closed(points, epsilon):
        last = len(points) - 1
        raise GeometryError(
            f"{what} is not closed: vertex {last} must match vertex 0 within {epsilon:g}",
            index=last,
            threshold=epsilon,
        )

    for message in validate_polygon(points, epsilon).warnings:
        warnings.append(f"{what}: {message}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_number(value: Any, name: str, index: Optional[int] = None) -> float:
    """Finite int/float attribute; anything else is an invalid attribute."""
    if not _is_number(value) or not math.isfinite(value):
        where = f" at index {index}" if index is not None else ""
        raise InvalidAttributeError(f"{name}{where} must be a finite number, got {value!r}")
    return float(value)


def _optional_number(value: Any, name: str, index: Optional[int] = None) -> Optional[float]:
    return None if value is None else _require_number(value, name, index)


def _require_positive(value: Optional[float], name: str, index: Optional[int] = None) -> float:
    where = f" at index {index}" if index is not None else ""
    if value is not None and not _is_number(value):
        raise InvalidAttributeError(f"{name}{where} must be a number, got {value!r}")
    if value is None or not math.isfinite(value) or value <= 0:
        raise GeometryError(f"{name}{where} must be > 0, got {value}", index=index, threshold=0)
    return float(value)


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise InvalidAttributeError(f"{name} must be a string, got {value!r}")
    return value


def _require_count(value: int, name: str, index: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        where = f" at index {index}" if index is not None else ""
        raise GeometryError(f"{name}{where} must be an integer >= 1, got {value!r}", index=index, threshold=1)
    return value


def _require_choice(value: str, choices: Sequence[str], name: str) -> str:
    if value not in choices:
        raise InvalidAttributeError(f"Unknown {name} '{value}' (expected one of: {', '.join(choices)})")
    return value


def _real_points(points: Sequence[Coordinate], scale: ScaleContext) -> List[Coordinate]:
    return to_real_coordinates(points, scale.scale, scale.zoom)


def _real_length(points: Sequence[Coordinate], scale: ScaleContext) -> float:
    return to_real_length(polyline_length(points), scale.scale, scale.zoom)


def _real_polygon(points: Sequence[Coordinate], scale: ScaleContext, epsilon: float) -> Tuple[float, float]:
    """(area m², perimeter m) of a drawing-space polygon closed within epsilon."""
    area = to_real_area(polygon_area(points, epsilon), scale.scale, scale.zoom)
    perimeter = to_real_length(polygon_perimeter(points, epsilon), scale.scale, scale.zoom)
    return area, perimeter


# =============================================================================
# PRESET RESOLUTION
# =============================================================================

def resolve_soil_rates(soil: SoilSpec, settings: Settings) -> Tuple[str, float, float]:
    """
    Expansion and contraction rates for a soil spec.

    Explicit rates win; otherwise expansion comes from the soil-type table
    and contraction from the compaction class ("normal" unless given).

    Returns:
        (soil_type, expansion_rate, contraction_rate)
    """
    soil_type = _require_text(soil.soil_type or settings.default_soil_type, "soil type").lower()
    _require_choice(soil_type, sorted(settings.soil_expansion), "soil type")

    expansion = soil.expansion_rate
    if expansion is None:
        expansion = settings.soil_expansion[soil_type]
    expansion = _require_number(expansion, "expansion rate")

    contraction = soil.contraction_rate
    if contraction is None:
        contraction_class = soil.contraction_class or settings.default_contraction_class
        _require_choice(contraction_class, sorted(settings.contraction_by_class), "contraction class")
        contraction = settings.contraction_by_class[contraction_class]
    contraction = _require_number(contraction, "contraction rate")

    if expansion < 0:
        raise InvalidAttributeError(f"Expansion rate must be >= 0, got {expansion}")
    if not 0 <= contraction <= 1:
        raise InvalidAttributeError(f"Contraction rate must be between 0 and 1, got {contraction}")

    return soil_type, expansion, contraction


def _resolve_dimension(
    spec: Optional[DimensionSpec],
    default: float,
    name: str,
    expected_count: int
):
    """Scalar for a constant spec, list for a variable one."""
    if spec is None:
        return default

    if not spec.is_variable:
        value = default if spec.value is None else spec.value
        return _require_positive(value, name)

    if len(spec.values) != expected_count:
        raise GeometryError(
            f"Variable {name} needs {expected_count} values, got {len(spec.values)}",
            index=min(len(spec.values), expected_count),
            threshold=expected_count,
        )
    return [_require_positive(v, name, index=i) for i, v in enumerate(spec.values)]


def _resolve_section(section: Optional[SectionSpec], default: Dict[str, Any]) -> SectionSpec:
    if section is not None:
        return section
    return SectionSpec(**default)


def _section_area(section: SectionSpec, name: str) -> float:
    area = section_area(
        section.shape,
        width_m=_optional_number(section.width_m, f"{name} section width"),
        height_m=_optional_number(section.height_m, f"{name} section height"),
        diameter_m=_optional_number(section.diameter_m, f"{name} section diameter"),
        area_m2=_optional_number(section.area_m2, f"{name} section area"),
    )
    if area <= 0:
        raise GeometryError(f"{name} section ({section.shape}) has no positive area", threshold=0)
    return area


def _resolve_rebar_rate(rate: Optional[float], settings: Settings, warnings: List[str]) -> float:
    rate = _require_number(settings.rebar_rate_kg_m3 if rate is None else rate, "rebar rate")
    if rate < 0:
        raise InvalidAttributeError(f"Rebar rate must be >= 0, got {rate}")
    warnings.extend(building.rebar_rate_warnings(
        rate, settings.rebar_rate_typical_min, settings.rebar_rate_typical_max
    ))
    return rate


def _conduit_density(material: str, settings: Settings, warnings: List[str]) -> Tuple[str, float]:
    key = _require_text(material, "conduit material").strip().lower().replace(" ", "_").replace("-", "_")
    key = CONDUIT_MATERIAL_ALIASES.get(key, key)
    if key in settings.conduit_densities:
        return key, settings.conduit_densities[key]

    message = (
        f"Unknown conduit material '{material}', using default density "
        f"{settings.default_conduit_density_kg_m3:g} kg/m³"
    )
    logger.warning(message)
    warnings.append(message)
    return key, settings.default_conduit_density_kg_m3


# =============================================================================
# BUILDERS: EARTHWORKS AND UTILITIES
# =============================================================================

def build_trench(inp: TrenchInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Trench")
    _require_points(inp.points, MIN_POLYLINE_VERTICES, "Trench")

    n = len(inp.points)
    width = _resolve_dimension(inp.width, settings.trench_width_m, "trench width", n - 1)
    depth = _resolve_dimension(inp.depth, settings.trench_depth_m, "trench depth", n)

    points = _real_points(inp.points, scale)
    trench = earthworks.trench_volume(points, width, depth)
    computed = trench.to_dict()

    widths = width if isinstance(width, list) else [width]
    depths = depth if isinstance(depth, list) else [depth]
    average_width = sum(widths) / len(widths)
    computed["average_width_m"] = average_width
    computed["average_depth_m"] = sum(depths) / len(depths)

    if not isinstance(width, list):
        edges = offset_polyline(points, width / 2)
        computed["edge_lines"] = {side: [p.to_dict() for p in line] for side, line in edges.items()}

    removals = []
    for key, removal in (("asphalt_removal_m3", inp.asphalt_removal), ("concrete_removal_m3", inp.concrete_removal)):
        if removal is None:
            continue
        thickness = _require_positive(removal.thickness_m, key.replace("_m3", " thickness"))
        removal_width = average_width if removal.width_m is None else _require_positive(removal.width_m, "removal width")
        volume = earthworks.removal_volume(trench.length_m, removal_width, thickness)
        computed[key] = volume
        removals.append(volume)

    computed["backfill_m3"] = earthworks.trench_backfill(trench.volume_m3, removals)

    expansion = 0.0
    if inp.soil is not None:
        soil_type, expansion, contraction = resolve_soil_rates(inp.soil, settings)
        soil = earthworks.soil_volumes(trench.volume_m3, soil_type, expansion, contraction)
        computed["soil"] = soil.to_dict()
        computed["volume_loose_m3"] = soil.loose_m3
        computed["volume_compacted_m3"] = soil.compacted_m3

    if inp.pipe_outer_diameter_m is not None:
        pipe = _require_positive(inp.pipe_outer_diameter_m, "pipe outer diameter")
        computed["spoil_m3"] = earthworks.spoil_volume(trench.volume_m3, pipe, trench.length_m, expansion)

    return computed


def build_bore_shot(inp: BoreShotInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Bore shot")
    _require_points(inp.points, MIN_POLYLINE_VERTICES, "Bore shot")

    min_radius = inp.min_radius_m
    if min_radius is None:
        conduit_radii = [
            _require_number(c.min_curvature_radius_m, "conduit minimum curvature radius", index=i)
            for i, c in enumerate(inp.conduits)
            if c.min_curvature_radius_m is not None
        ]
        min_radius = max(conduit_radii) if conduit_radii else settings.min_bend_radius_m
    min_radius = _require_positive(min_radius, "minimum bend radius")

    min_depth = settings.min_cover_depth_m if inp.min_depth_m is None else inp.min_depth_m
    min_depth = _require_positive(min_depth, "minimum cover depth")

    drill_mm = _require_positive(
        settings.drill_diameter_mm if inp.drill_diameter_mm is None else inp.drill_diameter_mm,
        "drill diameter",
    )
    reamer_mm = _require_positive(
        settings.backreamer_diameter_mm if inp.backreamer_diameter_mm is None else inp.backreamer_diameter_mm,
        "backreamer diameter",
    )

    entry_angle = _require_number(
        settings.entry_angle_deg if inp.entry_angle_degrees is None else inp.entry_angle_degrees, "entry angle"
    )
    exit_angle = _require_number(
        settings.exit_angle_deg if inp.exit_angle_degrees is None else inp.exit_angle_degrees, "exit angle"
    )

    points = _real_points(inp.points, scale)
    length = drilling.bore_length(points)
    curvature = drilling.check_curvature(points, min_radius, settings.straight_angle_epsilon)
    depth = drilling.check_depth(points, min_depth)
    entry_pitch, exit_pitch = drilling.pitch_angles(points)

    for violation in curvature.violations + depth.violations:
        warnings.append(violation.describe())

    if not (curvature.passed and depth.passed):
        logger.info(
            f"Bore shot out of compliance: {len(curvature.violations)} bend, "
            f"{len(depth.violations)} depth violation(s)"
        )

    return {
        "length_m": length,
        "entry_angle_degrees": entry_angle,
        "exit_angle_degrees": exit_angle,
        "measured_entry_pitch_degrees": entry_pitch,
        "measured_exit_pitch_degrees": exit_pitch,
        "drill_diameter_mm": drill_mm,
        "backreamer_diameter_mm": reamer_mm,
        "reamed_volume_m3": drilling.reamed_volume(length, reamer_mm),
        "radius_check": curvature.to_dict(),
        "depth_check": depth.to_dict(),
        "passed": curvature.passed and depth.passed,
    }


def build_hydro_excavation(inp: HydroExcavationInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Hydro-excavation")
    subtype = _require_choice(
        inp.subtype,
        (HydroSubtype.TRENCH, HydroSubtype.HOLE, HydroSubtype.POTHOLING),
        "hydro-excavation subtype",
    )
    minimum = MIN_POLYLINE_VERTICES if subtype == HydroSubtype.TRENCH else 1
    _require_points(inp.points, minimum, f"Hydro-excavation ({subtype})")

    section = _resolve_section(
        inp.section,
        {"shape": SectionShape.CIRCULAR, "diameter_m": settings.hydro_diameter_m},
    )
    area = _section_area(section, "Hydro-excavation")
    depth = _require_positive(settings.hydro_depth_m if inp.depth_m is None else inp.depth_m, "excavation depth")

    ratio = _optional_number(inp.efficiency_ratio, "efficiency ratio")
    if ratio is not None and not 0 < ratio <= 1:
        raise InvalidAttributeError(f"Efficiency ratio must be in (0, 1], got {ratio}")

    result = earthworks.hydro_excavation_volume(subtype, _real_points(inp.points, scale), area, depth, ratio)
    computed = result.to_dict()
    computed["section_shape"] = section.shape
    return computed


def build_conduit(inp: ConduitInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Conduit")
    _require_points(inp.points, MIN_POLYLINE_VERTICES, "Conduit")

    length = conduits.conduit_length(_real_points(inp.points, scale))

    runs = []
    for i, spec in enumerate(inp.conduits):
        outer = _require_positive(spec.outer_diameter_mm, "conduit outer diameter", index=i)
        count = _require_count(spec.count, "conduit count", index=i)

        if spec.nominal_diameter_mm is not None:
            inner = _require_positive(spec.nominal_diameter_mm, "conduit nominal diameter", index=i)
        else:
            wall = _optional_number(spec.wall_thickness_mm, "conduit wall thickness", index=i)
            inner = outer - 2 * (wall or 0.0)

        if inner < 0 or inner > outer:
            raise GeometryError(
                f"Conduit {i}: inner diameter {inner:g} mm must be between 0 and the outer diameter {outer:g} mm",
                index=i,
                threshold=outer,
            )

        material, density = _conduit_density(spec.material, settings, warnings)
        runs.append(conduits.conduit_run(material, outer, inner, density, length, count))

    return {
        "length_m": length,
        "conduit_length_m": sum(r.length_m for r in runs),
        "internal_volume_m3": sum(r.internal_volume_m3 for r in runs),
        "weight_kg": sum(r.weight_kg for r in runs),
        "runs": [r.to_dict() for r in runs],
    }


def build_vault(inp: VaultInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    _require_scale(inp.scale, "Vault")
    _require_points(inp.points, 1, "Vault")
    shape = _require_choice(inp.shape, (SectionShape.RECTANGULAR, SectionShape.CIRCULAR), "vault shape")
    quantity = _require_count(inp.quantity, "vault quantity")
    depth = _require_positive(settings.vault_depth_m if inp.depth_m is None else inp.depth_m, "vault depth")

    length = width = diameter = 0.0
    if shape == SectionShape.CIRCULAR:
        diameter = _require_positive(
            settings.vault_width_m if inp.diameter_m is None else inp.diameter_m, "vault diameter"
        )
    else:
        length = _require_positive(settings.vault_length_m if inp.length_m is None else inp.length_m, "vault length")
        width = _require_positive(settings.vault_width_m if inp.width_m is None else inp.width_m, "vault width")

    removals = [
        _optional_number(inp.asphalt_removal_m3, "asphalt removal volume") or 0.0,
        _optional_number(inp.concrete_removal_m3, "concrete removal volume") or 0.0,
    ]
    volumes = earthworks.vault_volumes(
        shape,
        depth,
        length_m=length,
        width_m=width,
        diameter_m=diameter,
        quantity=quantity,
        structure_fraction=settings.vault_structure_fraction,
        structure_m3=_optional_number(inp.structure_volume_m3, "structure volume"),
        removal_volumes=removals,
    )

    computed = volumes.to_dict()
    computed["dimensions"] = {
        "length_m": length,
        "width_m": width,
        "diameter_m": diameter,
        "depth_m": depth,
    }
    computed["location_count"] = len(inp.points)
    return computed


# =============================================================================
# BUILDERS: BUILDING
# =============================================================================

def build_area(inp: AreaInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Area")
    _require_polygon(inp.points, settings, "Area polygon", warnings)

    area, perimeter = _real_polygon(inp.points, scale, settings.closure_epsilon)
    computed = {"area_m2": area, "perimeter_m": perimeter, "depth_m": None, "volume_m3": None}

    if inp.depth_m is not None:
        depth = _require_positive(inp.depth_m, "area depth")
        computed["depth_m"] = depth
        computed["volume_m3"] = area * depth

    return computed


def _resolve_block(inp: WallInput, settings: Settings) -> Tuple[Optional[str], Optional[Dict[str, float]]]:
    if inp.block is not None:
        spec = inp.block
        return "custom", {
            "length_mm": _require_positive(spec.length_mm, "block length"),
            "height_mm": _require_positive(spec.height_mm, "block height"),
            "width_mm": _optional_number(spec.width_mm, "block width"),
            "joint_horizontal_mm": _require_number(spec.joint_horizontal_mm, "horizontal joint"),
            "joint_vertical_mm": _require_number(spec.joint_vertical_mm, "vertical joint"),
        }

    preset = inp.block_preset
    if preset is None and inp.material is not None:
        _require_choice(inp.material, sorted(settings.material_block_preset), "wall material")
        preset = settings.material_block_preset[inp.material]

    if preset is None:
        return None, None

    _require_choice(preset, sorted(settings.block_presets), "block preset")
    return preset, dict(settings.block_presets[preset])


def build_wall(inp: WallInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Wall")
    _require_points(inp.points, MIN_POLYLINE_VERTICES, "Wall")

    height = _require_positive(settings.wall_height_m if inp.height_m is None else inp.height_m, "wall height")
    default_thickness = settings.thickness("wall_external" if inp.external else "wall_internal")
    thickness = _require_positive(default_thickness if inp.thickness_m is None else inp.thickness_m, "wall thickness")
    density = settings.masonry_density_kg_m3 if inp.density_kg_m3 is None else inp.density_kg_m3
    density = _require_positive(density, "masonry density")

    openings_area = 0.0
    for i, opening in enumerate(inp.openings):
        width = _require_positive(
            settings.opening_width_m if opening.width_m is None else opening.width_m, "opening width", index=i
        )
        opening_height = _require_positive(
            settings.opening_height_m if opening.height_m is None else opening.height_m, "opening height", index=i
        )
        quantity = _require_count(opening.quantity, "opening quantity", index=i)
        openings_area += building.opening_area(width, opening_height, quantity)

    preset, block = _resolve_block(inp, settings)
    length = _real_length(inp.points, scale)

    wall = building.wall_quantities(
        length,
        height,
        thickness,
        openings_area_m2=openings_area,
        block=block,
        mortar_fraction=settings.mortar_fraction,
        density_kg_m3=density,
    )

    if wall.net_area_m2 < 0:
        warnings.append(
            f"Openings ({openings_area:.2f} m²) exceed the wall face ({wall.masonry_area_m2:.2f} m²)"
        )

    computed = wall.to_dict()
    computed["area_m2"] = wall.net_area_m2
    computed["block_preset"] = preset
    return computed


def build_slab(inp: SlabInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Slab")
    _require_polygon(inp.points, settings, "Slab polygon", warnings)
    thickness = _require_positive(
        settings.thickness("slab") if inp.thickness_m is None else inp.thickness_m, "slab thickness"
    )

    area, perimeter = _real_polygon(inp.points, scale, settings.closure_epsilon)
    volume = building.slab_volume(area, thickness)
    return {
        "area_m2": area,
        "perimeter_m": perimeter,
        "thickness_m": thickness,
        "volume_m3": volume,
        "weight_kg": building.concrete_weight(volume, settings.concrete_density_kg_m3),
    }


def build_foundation(inp: FoundationInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Foundation")
    kind = _require_choice(
        inp.kind,
        (FoundationKind.PAD, FoundationKind.FOOTING, FoundationKind.GRADE_BEAM, FoundationKind.RAFT, FoundationKind.PILE),
        "foundation kind",
    )
    quantity = _require_count(inp.quantity, "foundation quantity")
    default_height = settings.thickness("foundation")

    if kind in (FoundationKind.PAD, FoundationKind.FOOTING):
        result = building.foundation_volume(
            kind,
            length_m=_require_positive(inp.length_m, f"{kind} length"),
            width_m=_require_positive(inp.width_m, f"{kind} width"),
            height_m=_require_positive(default_height if inp.height_m is None else inp.height_m, f"{kind} height"),
            quantity=quantity,
        )
    elif kind == FoundationKind.GRADE_BEAM:
        if inp.points:
            _require_points(inp.points, MIN_POLYLINE_VERTICES, "Grade beam")
            length = _real_length(inp.points, scale)
        else:
            length = inp.length_m
        result = building.foundation_volume(
            kind,
            length_m=_require_positive(length, "grade beam length"),
            width_m=_require_positive(inp.width_m, "grade beam width"),
            height_m=_require_positive(default_height if inp.height_m is None else inp.height_m, "grade beam height"),
        )
    elif kind == FoundationKind.RAFT:
        _require_polygon(inp.points, settings, "Raft polygon", warnings)
        area, _ = _real_polygon(inp.points, scale, settings.closure_epsilon)
        result = building.foundation_volume(
            kind,
            area_m2=area,
            thickness_m=_require_positive(
                default_height if inp.thickness_m is None else inp.thickness_m, "raft thickness"
            ),
        )
    else:
        result = building.foundation_volume(
            kind,
            length_m=_require_positive(inp.length_m, "pile length"),
            diameter_m=_require_positive(inp.diameter_m, "pile diameter"),
            quantity=quantity,
        )

    rate = _resolve_rebar_rate(inp.rebar_rate_kg_m3, settings, warnings)
    computed = result.to_dict()
    computed["rebar_rate_kg_m3"] = rate
    computed["rebar_kg"] = building.rebar_weight(result.volume_m3, rate)
    computed["weight_kg"] = building.concrete_weight(result.volume_m3, settings.concrete_density_kg_m3)
    return computed


def build_structure(inp: StructureInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Structure")
    element = _require_choice(
        inp.element,
        (StructuralElement.BEAM, StructuralElement.COLUMN, StructuralElement.SLAB),
        "structural element",
    )
    quantity = _require_count(inp.quantity, "structure quantity")
    computed: Dict[str, Any] = {"element": element, "quantity": quantity}

    if element == StructuralElement.SLAB:
        _require_polygon(inp.points, settings, "Structural slab polygon", warnings)
        area, perimeter = _real_polygon(inp.points, scale, settings.closure_epsilon)
        thickness = _require_positive(
            settings.thickness("slab") if inp.thickness_m is None else inp.thickness_m, "slab thickness"
        )
        computed.update({"area_m2": area, "perimeter_m": perimeter, "thickness_m": thickness})
        unit_volume = building.slab_volume(area, thickness)
    else:
        section = _resolve_section(inp.section, settings.beam_section)
        sectional = _section_area(section, element.capitalize())
        computed["section_shape"] = section.shape
        computed["section_area_m2"] = sectional

        if element == StructuralElement.BEAM:
            if inp.length_m is not None:
                extent = _require_positive(inp.length_m, "beam length")
            else:
                _require_points(inp.points, MIN_POLYLINE_VERTICES, "Beam")
                extent = _require_positive(_real_length(inp.points, scale), "beam length")
            computed["length_m"] = extent
        else:
            extent = _require_positive(inp.height_m, "column height")
            computed["height_m"] = extent

        unit_volume = building.member_volume(sectional, extent)

    volume = unit_volume * quantity
    rate = _resolve_rebar_rate(inp.rebar_rate_kg_m3, settings, warnings)
    computed.update({
        "volume_m3": volume,
        "rebar_rate_kg_m3": rate,
        "rebar_kg": building.rebar_weight(volume, rate),
        "weight_kg": building.concrete_weight(volume, settings.concrete_density_kg_m3),
    })
    return computed


# =============================================================================
# BUILDERS: SURFACES
# =============================================================================

FINISHING_TYPES = (
    FinishingType.FLOOR,
    FinishingType.WALL_CLADDING,
    FinishingType.PAINT,
    FinishingType.TILE,
    FinishingType.PORCELAIN,
    FinishingType.GRANITE,
    FinishingType.OTHER,
)


def build_finishing(inp: FinishingInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Finishing")
    finishing_type = _require_choice(inp.finishing_type, FINISHING_TYPES, "finishing type")

    loss = inp.loss_percent
    if loss is None:
        loss = settings.finishing_loss_percent.get(finishing_type, settings.default_finishing_loss_percent)
    loss = _require_number(loss, "loss percent")
    if loss < 0:
        raise InvalidAttributeError(f"Loss percent must be >= 0, got {loss}")

    areas = []
    if inp.points:
        _require_polygon(inp.points, settings, "Finishing polygon", warnings)
        area, _ = _real_polygon(inp.points, scale, settings.closure_epsilon)
        areas.append(area)
    elif inp.surfaces:
        for i, surface in enumerate(inp.surfaces):
            _require_polygon(surface.points, settings, f"Finishing surface {i}", warnings)
            height = None
            if surface.height_m is not None:
                height = _require_positive(surface.height_m, "surface height", index=i)
            area, perimeter = _real_polygon(surface.points, scale, settings.closure_epsilon)
            areas.append(surfaces.surface_area(area, perimeter, height))
    else:
        raise GeometryError("Finishing requires a polygon or at least one surface", threshold=1)

    result = surfaces.FinishingQuantities(finishing_type=finishing_type, surface_areas_m2=areas, loss_percent=loss)
    return result.to_dict()


def build_roof(inp: RoofInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    scale = _require_scale(inp.scale, "Roof")
    if not inp.planes:
        raise GeometryError("Roof requires at least 1 plane", threshold=1)

    planes = []
    for i, plane in enumerate(inp.planes):
        _require_polygon(plane.points, settings, f"Roof plane {i}", warnings)
        projected, _ = _real_polygon(plane.points, scale, settings.closure_epsilon)
        planes.append({
            "projected_area_m2": projected,
            "inclination_degrees": _optional_number(plane.inclination_degrees, "inclination degrees", index=i),
            "inclination_percent": _optional_number(plane.inclination_percent, "inclination percent", index=i),
        })

    return surfaces.roof_areas(planes).to_dict()


# =============================================================================
# BUILDERS: ANNOTATIONS
# =============================================================================

def build_note(inp: NoteInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    return {
        "text": inp.text,
        "author": inp.author,
        "linked_measurement_id": inp.linked_measurement_id,
        "point_count": len(inp.points),
    }


def build_select(inp: SelectInput, settings: Settings, warnings: List[str]) -> Dict[str, Any]:
    if inp.points:
        raise GeometryError(
            f"Select measurements must not carry geometry, got {len(inp.points)} vertices",
            index=0,
            threshold=0,
        )
    return {
        "selected_ids": list(inp.selected_ids),
        "selected_count": len(inp.selected_ids),
        "filters": dict(inp.filters),
    }


BUILDERS: Dict[MeasurementType, Builder] = {
    MeasurementType.TRENCH: build_trench,
    MeasurementType.BORE_SHOT: build_bore_shot,
    MeasurementType.HYDRO_EXCAVATION: build_hydro_excavation,
    MeasurementType.CONDUIT: build_conduit,
    MeasurementType.VAULT: build_vault,
    MeasurementType.AREA: build_area,
    MeasurementType.WALL: build_wall,
    MeasurementType.SLAB: build_slab,
    MeasurementType.FOUNDATION: build_foundation,
    MeasurementType.STRUCTURE: build_structure,
    MeasurementType.FINISHING: build_finishing,
    MeasurementType.ROOF: build_roof,
    MeasurementType.NOTE: build_note,
    MeasurementType.SELECT: build_select,
}

_unhandled = set(MeasurementType) - set(BUILDERS)
if _unhandled:
    raise RuntimeError(f"No builder registered for: {', '.join(sorted(t.value for t in _unhandled))}")


# =============================================================================
# NUMERIC GUARD
# =============================================================================

def apply_numeric_guard(value: Any, path: str = "") -> Tuple[Any, List[NumericGuardClamp]]:
    """
    Clamp every non-finite or negative number in a computed block to 0.

    Args:
        value: Computed block (nested dicts/lists of numbers)
        path: Dotted path of value, used in clamp notices

    Returns:
        Tuple of (guarded copy, clamp notices)
    """
    clamps: List[NumericGuardClamp] = []

    if isinstance(value, dict):
        guarded = {}
        for key, item in value.items():
            if key in GUARD_EXEMPT_KEYS:
                guarded[key] = item
                continue
            guarded[key], found = apply_numeric_guard(item, f"{path}.{key}" if path else str(key))
            clamps.extend(found)
        return guarded, clamps

    if isinstance(value, (list, tuple)):
        guarded_items = []
        for i, item in enumerate(value):
            guarded_item, found = apply_numeric_guard(item, f"{path}[{i}]")
            guarded_items.append(guarded_item)
            clamps.extend(found)
        return guarded_items, clamps

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value) or value < 0:
            clamps.append(NumericGuardClamp(field=path, original=value))
            return (0 if isinstance(value, int) else 0.0), clamps

    return value, clamps


# =============================================================================
# ENTRY POINTS
# =============================================================================

def build_measurement(
    measurement_input: Any,
    record_id: Optional[str] = None,
    project_id: str = "",
    settings: Optional[Settings] = None,
    created_at: Optional[datetime] = None
) -> MeasurementRecord:
    """
    Build a computed record from a typed measurement input.

    Args:
        measurement_input: One of the *Input dataclasses
        record_id: Record id (a new uuid4 hex when omitted)
        project_id: Owning project
        settings: Presets (process defaults when omitted)
        created_at: Creation time to keep when rebuilding

    Returns:
        Frozen MeasurementRecord

    Raises:
        TakeoffError: If the input is structurally invalid
    """
    if not isinstance(measurement_input, tuple(INPUT_TYPES.values())):
        raise InvalidAttributeError(f"Not a measurement input: {type(measurement_input).__name__}")

    settings = settings or get_settings()
    measurement_type = measurement_input.measurement_type

    warnings: List[str] = []
    computed = BUILDERS[measurement_type](measurement_input, settings, warnings)

    computed, clamps = apply_numeric_guard(computed)
    for clamp in clamps:
        logger.warning(f"{measurement_type.value}: {clamp.describe()}")
        warnings.append(clamp.describe())

    now = datetime.now(timezone.utc)
    record = MeasurementRecord(
        record_id=record_id or uuid.uuid4().hex,
        project_id=project_id,
        measurement_type=measurement_type,
        label=measurement_input.label,
        input=measurement_input,
        scale_context=getattr(measurement_input, "scale", None),
        computed=deep_freeze(computed),
        warnings=tuple(warnings),
        created_at=created_at or now,
        updated_at=now,
    )

    logger.debug(
        f"Built {measurement_type.value} {record.record_id}: "
        f"L={record.length_m:.2f} m, A={record.area_m2:.2f} m², V={record.volume_m3:.3f} m³"
        + (f", {len(warnings)} warning(s)" if warnings else "")
    )
    return record


def rebuild_measurement(
    record: MeasurementRecord,
    settings: Optional[Settings] = None,
    **changes
) -> MeasurementRecord:
    """
    Rebuild a record from its input merged with field changes.

    The id and created_at are kept; updated_at always moves forward.

    Args:
        record: Existing record
        settings: Presets (process defaults when omitted)
        **changes: Input fields to replace (e.g. points=..., scale=...)

    Returns:
        New MeasurementRecord
    """
    merged = dataclasses.replace(record.input, **changes)
    rebuilt = build_measurement(
        merged,
        record_id=record.record_id,
        project_id=record.project_id,
        settings=settings,
        created_at=record.created_at,
    )

    if rebuilt.updated_at <= record.updated_at:
        rebuilt = dataclasses.replace(rebuilt, updated_at=record.updated_at + timedelta(microseconds=1))
    return rebuilt
