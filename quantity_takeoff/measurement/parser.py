"""
Measurement Input Parser Module

Converts JSON-shaped payloads (as received from an HTTP layer or read from
a batch file) into typed measurement inputs.

Only shape and typing are handled here. Domain rules (vertex counts,
closure, positive dimensions) are enforced by the builder.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..calibration.scale_transformer import ScaleContext
from ..constants import DEFAULT_ZOOM
from ..errors import InvalidAttributeError, ScaleFormatError
from ..geometry.coordinate import Coordinate
from .types import (
    AreaInput,
    BlockSpec,
    BoreShotInput,
    ConduitInput,
    ConduitSpec,
    DimensionSpec,
    FinishingInput,
    FoundationInput,
    HydroExcavationInput,
    MeasurementType,
    NoteInput,
    OpeningSpec,
    RemovalSpec,
    RoofInput,
    RoofPlaneSpec,
    SectionSpec,
    SelectInput,
    SlabInput,
    SoilSpec,
    StructureInput,
    SurfaceSpec,
    TrenchInput,
    VaultInput,
    WallInput,
)

logger = logging.getLogger(__name__)


def _points(payload: Dict[str, Any], key: str = "coordinates") -> List[Coordinate]:
    raw = payload.get(key)
    if raw is None:
        raw = payload.get("points", [])
    if not isinstance(raw, list):
        raise InvalidAttributeError(f"'{key}' must be a list of coordinates")
    try:
        return [Coordinate.from_any(p) for p in raw]
    except (TypeError, ValueError) as e:
        raise InvalidAttributeError(f"Invalid coordinate in '{key}': {e}")


def _pick(data: Dict[str, Any], cls, aliases: Optional[Dict[str, str]] = None):
    """Build a spec dataclass from the keys of `data` it knows about."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise InvalidAttributeError(f"{cls.__name__} must be an object, got {data!r}")

    aliases = aliases or {}
    known = set(cls.__dataclass_fields__)
    kwargs = {}
    for key, value in data.items():
        key = aliases.get(key, key)
        if key in known:
            kwargs[key] = value
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise InvalidAttributeError(f"Invalid {cls.__name__}: {e}")


def _dimension(data: Any) -> Optional[DimensionSpec]:
    """Width/depth given as a number or as {type, value, values}."""
    if data is None:
        return None
    if isinstance(data, (int, float)) and not isinstance(data, bool):
        return DimensionSpec.constant(float(data))
    if isinstance(data, dict):
        kind = data.get("type", data.get("kind", "constant"))
        return DimensionSpec(kind=kind, value=data.get("value"), values=tuple(data.get("values") or ()))
    raise InvalidAttributeError(f"Invalid dimension: {data!r}")


def _section(data: Any) -> Optional[SectionSpec]:
    return _pick(data, SectionSpec, {"type": "shape", "length_m": "height_m"})


def _conduits(items: Any) -> List[ConduitSpec]:
    return [_pick(item, ConduitSpec, {"quantity": "count"}) for item in (items or [])]


def _scale(payload: Dict[str, Any], default_scale: Optional[str], default_zoom: float) -> Optional[ScaleContext]:
    scale = payload.get("scale", default_scale)
    if scale is None:
        return None
    if isinstance(scale, dict):
        return ScaleContext.from_any(scale, default_zoom)
    zoom = payload.get("zoom", default_zoom)
    if zoom is None:
        zoom = default_zoom
    return ScaleContext(scale, zoom)


# =============================================================================
# PER-TYPE PARSERS
# =============================================================================

def _parse_trench(payload, scale):
    soil = None
    if payload.get("soil") is not None or payload.get("soil_type") is not None:
        soil_data = dict(payload.get("soil") or {})
        soil_data.setdefault("soil_type", payload.get("soil_type"))
        soil = _pick(soil_data, SoilSpec, {"contraction_type": "contraction_class"})

    return TrenchInput(
        points=_points(payload),
        scale=scale,
        width=_dimension(payload.get("width")),
        depth=_dimension(payload.get("depth")),
        soil=soil,
        asphalt_removal=_pick(payload.get("asphalt_removal"), RemovalSpec),
        concrete_removal=_pick(payload.get("concrete_removal"), RemovalSpec),
        pipe_outer_diameter_m=payload.get("pipe_outer_diameter_m"),
        label=payload.get("label", ""),
    )


def _parse_bore_shot(payload, scale):
    return BoreShotInput(
        points=_points(payload),
        scale=scale,
        min_radius_m=payload.get("min_radius_m"),
        min_depth_m=payload.get("min_depth_m", payload.get("min_depth_guaranteed_m")),
        entry_angle_degrees=payload.get("entry_angle_degrees"),
        exit_angle_degrees=payload.get("exit_angle_degrees"),
        drill_diameter_mm=payload.get("drill_diameter_mm"),
        backreamer_diameter_mm=payload.get("backreamer_diameter_mm"),
        conduits=_conduits(payload.get("conduits")),
        label=payload.get("label", ""),
    )


def _parse_hydro_excavation(payload, scale):
    return HydroExcavationInput(
        points=_points(payload),
        scale=scale,
        subtype=payload.get("subtype", "trench"),
        section=_section(payload.get("section")),
        depth_m=payload.get("depth_m"),
        efficiency_ratio=payload.get("efficiency_ratio"),
        label=payload.get("label", ""),
    )


def _parse_conduit(payload, scale):
    return ConduitInput(
        points=_points(payload),
        scale=scale,
        conduits=_conduits(payload.get("conduits")),
        label=payload.get("label", ""),
    )


def _parse_vault(payload, scale):
    dims = payload.get("dimensions") or {}
    return VaultInput(
        points=_points(payload),
        scale=scale,
        shape=payload.get("shape", "rectangular"),
        length_m=dims.get("length_m", payload.get("length_m")),
        width_m=dims.get("width_m", payload.get("width_m")),
        diameter_m=dims.get("diameter_m", payload.get("diameter_m")),
        depth_m=dims.get("depth_m", payload.get("depth_m")),
        quantity=payload.get("quantity", 1),
        structure_volume_m3=payload.get("structure_volume_m3"),
        asphalt_removal_m3=payload.get("asphalt_removal_m3", 0.0),
        concrete_removal_m3=payload.get("concrete_removal_m3", 0.0),
        label=payload.get("label", ""),
    )


def _parse_area(payload, scale):
    return AreaInput(
        points=_points(payload),
        scale=scale,
        depth_m=payload.get("depth_m"),
        label=payload.get("label", ""),
    )


def _parse_wall(payload, scale):
    return WallInput(
        points=_points(payload),
        scale=scale,
        height_m=payload.get("height_m"),
        thickness_m=payload.get("thickness_m"),
        external=payload.get("external", True),
        material=payload.get("material"),
        block_preset=payload.get("block_preset"),
        block=_pick(payload.get("block"), BlockSpec, {
            "mortar_joint_horizontal_mm": "joint_horizontal_mm",
            "mortar_joint_vertical_mm": "joint_vertical_mm",
        }),
        openings=[_pick(o, OpeningSpec) for o in payload.get("openings") or []],
        density_kg_m3=payload.get("density_kg_m3"),
        label=payload.get("label", ""),
    )


def _parse_slab(payload, scale):
    return SlabInput(
        points=_points(payload),
        scale=scale,
        thickness_m=payload.get("thickness_m"),
        label=payload.get("label", ""),
    )


def _parse_foundation(payload, scale):
    dims = payload.get("dimensions") or {}
    return FoundationInput(
        kind=payload.get("kind", payload.get("foundation_type", "")),
        scale=scale,
        points=_points(payload),
        length_m=dims.get("length_m", payload.get("length_m")),
        width_m=dims.get("width_m", payload.get("width_m")),
        height_m=dims.get("height_m", payload.get("height_m")),
        diameter_m=dims.get("diameter_m", payload.get("diameter_m")),
        thickness_m=payload.get("thickness_m"),
        quantity=payload.get("quantity", 1),
        rebar_rate_kg_m3=payload.get("rebar_rate_kg_m3"),
        label=payload.get("label", ""),
    )


def _parse_structure(payload, scale):
    return StructureInput(
        element=payload.get("element", payload.get("element_type", "")),
        scale=scale,
        points=_points(payload),
        section=_section(payload.get("section")),
        length_m=payload.get("length_m"),
        height_m=payload.get("height_m"),
        thickness_m=payload.get("thickness_m"),
        quantity=payload.get("quantity", 1),
        rebar_rate_kg_m3=payload.get("rebar_rate_kg_m3"),
        label=payload.get("label", ""),
    )


def _parse_finishing(payload, scale):
    surfaces = []
    for item in payload.get("surfaces") or []:
        surfaces.append(SurfaceSpec(
            points=_points(item, "polygon"),
            height_m=item.get("height_m"),
            name=item.get("name", ""),
        ))
    return FinishingInput(
        scale=scale,
        finishing_type=payload.get("finishing_type", "floor"),
        points=_points(payload),
        surfaces=surfaces,
        loss_percent=payload.get("loss_percent", payload.get("standard_loss_percent")),
        label=payload.get("label", ""),
    )


def _parse_roof(payload, scale):
    planes = []
    for item in payload.get("planes") or []:
        planes.append(RoofPlaneSpec(
            points=_points(item, "polygon"),
            inclination_degrees=item.get("inclination_degrees"),
            inclination_percent=item.get("inclination_percent"),
            azimuth_degrees=item.get("azimuth_degrees"),
        ))
    return RoofInput(scale=scale, planes=planes, label=payload.get("label", ""))


def _parse_note(payload, scale):
    return NoteInput(
        text=payload.get("text", ""),
        points=_points(payload),
        scale=scale,
        author=payload.get("author"),
        linked_measurement_id=payload.get("linked_measurement_id"),
        label=payload.get("label", ""),
    )


def _parse_select(payload, scale):
    return SelectInput(
        selected_ids=list(payload.get("selected_measurements", payload.get("selected_ids", []))),
        filters=payload.get("filters") or {},
        points=_points(payload),
        scale=scale,
        label=payload.get("label", ""),
    )


PARSERS: Dict[MeasurementType, Callable] = {
    MeasurementType.TRENCH: _parse_trench,
    MeasurementType.BORE_SHOT: _parse_bore_shot,
    MeasurementType.HYDRO_EXCAVATION: _parse_hydro_excavation,
    MeasurementType.CONDUIT: _parse_conduit,
    MeasurementType.VAULT: _parse_vault,
    MeasurementType.AREA: _parse_area,
    MeasurementType.WALL: _parse_wall,
    MeasurementType.SLAB: _parse_slab,
    MeasurementType.FOUNDATION: _parse_foundation,
    MeasurementType.STRUCTURE: _parse_structure,
    MeasurementType.FINISHING: _parse_finishing,
    MeasurementType.ROOF: _parse_roof,
    MeasurementType.NOTE: _parse_note,
    MeasurementType.SELECT: _parse_select,
}

# Types that can be recorded without a scale
UNSCALED_TYPES = (MeasurementType.NOTE, MeasurementType.SELECT)


def parse_measurement_input(
    payload: Dict[str, Any],
    default_scale: Optional[str] = None,
    default_zoom: float = DEFAULT_ZOOM
):
    """
    Parse a JSON-shaped measurement payload.

    Coordinates may be given under "coordinates" or "points", each as
    {x, y, z|elevation} or [x, y, z]. Scale and zoom fall back to the given
    defaults.

    Args:
        payload: Measurement payload with a "type" key
        default_scale: Scale applied when the payload has none
        default_zoom: Zoom applied when the payload has none

    Returns:
        Typed measurement input

    Raises:
        InvalidAttributeError: Unknown type or malformed attribute
        ScaleFormatError: Missing or malformed scale on a measured type
    """
    if not isinstance(payload, dict):
        raise InvalidAttributeError(f"Measurement payload must be an object, got {type(payload).__name__}")
    if "type" not in payload:
        raise InvalidAttributeError("Measurement payload has no 'type'")

    measurement_type = MeasurementType.from_string(payload["type"])
    scale = _scale(payload, default_scale, default_zoom)

    if scale is None and measurement_type not in UNSCALED_TYPES:
        raise ScaleFormatError(f"{measurement_type.value} measurement requires a scale")

    return PARSERS[measurement_type](payload, scale)
