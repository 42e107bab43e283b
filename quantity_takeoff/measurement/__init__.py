# Measurement builder module

from .types import (
    MeasurementType,
    DimensionSpec,
    SoilSpec,
    RemovalSpec,
    SectionSpec,
    ConduitSpec,
    OpeningSpec,
    BlockSpec,
    SurfaceSpec,
    RoofPlaneSpec,
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
    INPUT_TYPES,
)

from .record import MeasurementRecord

from .builder import (
    BUILDERS,
    apply_numeric_guard,
    build_measurement,
    rebuild_measurement,
    resolve_soil_rates,
)

from .parser import parse_measurement_input

from .summary import (
    TypeTotals,
    MeasurementSummary,
    summarize_records,
)

__all__ = [
    # Types
    "MeasurementType",
    "DimensionSpec",
    "SoilSpec",
    "RemovalSpec",
    "SectionSpec",
    "ConduitSpec",
    "OpeningSpec",
    "BlockSpec",
    "SurfaceSpec",
    "RoofPlaneSpec",
    "TrenchInput",
    "BoreShotInput",
    "HydroExcavationInput",
    "ConduitInput",
    "VaultInput",
    "AreaInput",
    "WallInput",
    "SlabInput",
    "FoundationInput",
    "StructureInput",
    "FinishingInput",
    "RoofInput",
    "NoteInput",
    "SelectInput",
    "INPUT_TYPES",
    # Record
    "MeasurementRecord",
    # Builder
    "BUILDERS",
    "apply_numeric_guard",
    "build_measurement",
    "rebuild_measurement",
    "resolve_soil_rates",
    # Parser
    "parse_measurement_input",
    # Summary
    "TypeTotals",
    "MeasurementSummary",
    "summarize_records",
]
