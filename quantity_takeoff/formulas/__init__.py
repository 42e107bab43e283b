# Quantity formula library

from .sections import circle_area, section_area

from .earthworks import (
    TrenchSegment,
    TrenchVolume,
    SoilVolumes,
    HydroExcavationVolume,
    VaultVolumes,
    prism_volume,
    trench_volume,
    loose_volume,
    compacted_volume,
    cut_volume_for_compacted_fill,
    soil_volumes,
    removal_volume,
    trench_backfill,
    spoil_volume,
    hydro_excavation_volume,
    vault_excavation_volume,
    vault_backfill,
    vault_volumes,
)

from .drilling import (
    CurvatureCheck,
    DepthCheck,
    bore_length,
    bend_radius,
    check_curvature,
    check_depth,
    segment_pitch,
    pitch_angles,
    reamed_volume,
)

from .conduits import (
    ConduitRun,
    conduit_length,
    internal_volume,
    conduit_weight,
    conduit_run,
)

from .building import (
    WallQuantities,
    FoundationVolume,
    opening_area,
    block_count,
    wall_quantities,
    slab_volume,
    box_volume,
    grade_beam_volume,
    pile_volume,
    foundation_volume,
    member_volume,
    rebar_weight,
    concrete_weight,
    rebar_rate_warnings,
)

from .surfaces import (
    RoofPlane,
    RoofAreas,
    FinishingQuantities,
    slope_tangent,
    slope_factor,
    roof_real_area,
    roof_areas,
    surface_area,
    consumption,
)

from .optimization import (
    BeamSection,
    Rectangle,
    section_modulus,
    strongest_beam_from_log,
    min_perimeter_rectangle,
    max_area_rectangle,
)

__all__ = [
    # Sections
    "circle_area",
    "section_area",
    # Earthworks
    "TrenchSegment",
    "TrenchVolume",
    "SoilVolumes",
    "HydroExcavationVolume",
    "VaultVolumes",
    "prism_volume",
    "trench_volume",
    "loose_volume",
    "compacted_volume",
    "cut_volume_for_compacted_fill",
    "soil_volumes",
    "removal_volume",
    "trench_backfill",
    "spoil_volume",
    "hydro_excavation_volume",
    "vault_excavation_volume",
    "vault_backfill",
    "vault_volumes",
    # Drilling
    "CurvatureCheck",
    "DepthCheck",
    "bore_length",
    "bend_radius",
    "check_curvature",
    "check_depth",
    "segment_pitch",
    "pitch_angles",
    "reamed_volume",
    # Conduits
    "ConduitRun",
    "conduit_length",
    "internal_volume",
    "conduit_weight",
    "conduit_run",
    # Building
    "WallQuantities",
    "FoundationVolume",
    "opening_area",
    "block_count",
    "wall_quantities",
    "slab_volume",
    "box_volume",
    "grade_beam_volume",
    "pile_volume",
    "foundation_volume",
    "member_volume",
    "rebar_weight",
    "concrete_weight",
    "rebar_rate_warnings",
    # Surfaces
    "RoofPlane",
    "RoofAreas",
    "FinishingQuantities",
    "slope_tangent",
    "slope_factor",
    "roof_real_area",
    "roof_areas",
    "surface_area",
    "consumption",
    # Optimization
    "BeamSection",
    "Rectangle",
    "section_modulus",
    "strongest_beam_from_log",
    "min_perimeter_rectangle",
    "max_area_rectangle",
]
