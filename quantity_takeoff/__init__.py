"""
Quantity Takeoff Engine

Converts vertex geometry digitized from construction drawings into
real-world quantities: lengths, areas, volumes, weights and compliance
checks.

Typical use:

    from quantity_takeoff import TrenchInput, build_measurement

    record = build_measurement(TrenchInput(
        points=[(0, 0), (100, 0)],
        scale="1:100",
    ))
    record.volume_m3
"""

from .calibration import ScaleContext, parse_scale, to_real_area, to_real_length
from .errors import (
    GeometryError,
    InvalidAttributeError,
    NumericGuardClamp,
    ScaleFormatError,
    TakeoffError,
    ValidationFailure,
)
from .geometry import Coordinate
from .measurement import (
    AreaInput,
    BoreShotInput,
    ConduitInput,
    FinishingInput,
    FoundationInput,
    HydroExcavationInput,
    MeasurementRecord,
    MeasurementType,
    NoteInput,
    RoofInput,
    SelectInput,
    SlabInput,
    StructureInput,
    TrenchInput,
    VaultInput,
    WallInput,
    build_measurement,
    parse_measurement_input,
    rebuild_measurement,
    summarize_records,
)
from .settings import Settings, get_settings, load_settings

__version__ = "1.0.0"

__all__ = [
    "ScaleContext",
    "parse_scale",
    "to_real_area",
    "to_real_length",
    "GeometryError",
    "InvalidAttributeError",
    "NumericGuardClamp",
    "ScaleFormatError",
    "TakeoffError",
    "ValidationFailure",
    "Coordinate",
    "AreaInput",
    "BoreShotInput",
    "ConduitInput",
    "FinishingInput",
    "FoundationInput",
    "HydroExcavationInput",
    "MeasurementRecord",
    "MeasurementType",
    "NoteInput",
    "RoofInput",
    "SelectInput",
    "SlabInput",
    "StructureInput",
    "TrenchInput",
    "VaultInput",
    "WallInput",
    "build_measurement",
    "parse_measurement_input",
    "rebuild_measurement",
    "summarize_records",
    "Settings",
    "get_settings",
    "load_settings",
]
