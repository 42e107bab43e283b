"""
Measurement Record Module

The immutable result of a measurement build.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..calibration.scale_transformer import ScaleContext
from ..calibration.unit_converter import UNIT_SYSTEMS, convert_area, convert_length, convert_volume
from .types import MeasurementType

# Computed keys reported as the headline quantities of a record
LENGTH_KEY = "length_m"
AREA_KEY = "area_m2"
VOLUME_KEY = "volume_m3"
WEIGHT_KEY = "weight_kg"


def deep_freeze(value: Any) -> Any:
    """Read-only copy: mappings become MappingProxyType, sequences tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: deep_freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(deep_freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Plain dict/list copy of a frozen structure, for serialization."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class MeasurementRecord:
    """
    A fully computed measurement.

    `computed` holds the type-specific derived quantities (metres, m², m³,
    kg) as a read-only mapping. Edits never patch a record; they rebuild it
    (see builder.rebuild_measurement).
    """
    record_id: str
    project_id: str
    measurement_type: MeasurementType
    label: str
    input: Any
    scale_context: Optional[ScaleContext]
    computed: Mapping[str, Any]
    warnings: Tuple[str, ...]
    created_at: datetime
    updated_at: datetime

    @property
    def input_geometry(self) -> Dict[str, Any]:
        return self.input.geometry()

    def quantity(self, key: str) -> float:
        """Headline quantity from the computed block, 0 when absent."""
        value = self.computed.get(key)
        return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0.0

    @property
    def length_m(self) -> float:
        return self.quantity(LENGTH_KEY)

    @property
    def area_m2(self) -> float:
        return self.quantity(AREA_KEY)

    @property
    def volume_m3(self) -> float:
        return self.quantity(VOLUME_KEY)

    @property
    def weight_kg(self) -> float:
        return self.quantity(WEIGHT_KEY)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for JSON serialization."""
        return {
            "id": self.record_id,
            "project_id": self.project_id,
            "type": self.measurement_type.value,
            "label": self.label,
            "input": thaw(asdict(self.input)),
            "input_geometry": self.input_geometry,
            "scale_context": self.scale_context.to_dict() if self.scale_context else None,
            "computed": thaw(self.computed),
            "warnings": list(self.warnings),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_csv_row(self, unit_system: str = "metric") -> List[Any]:
        """Convert record to CSV row values."""
        units = UNIT_SYSTEMS.get(unit_system, UNIT_SYSTEMS["metric"])
        return [
            self.record_id,
            self.measurement_type.value,
            self.project_id,
            self.label,
            round(convert_length(self.length_m, units["length"]), 3),
            round(convert_area(self.area_m2, units["area"]), 3),
            round(convert_volume(self.volume_m3, units["volume"]), 3),
            round(self.weight_kg, 2),
            len(self.warnings),
            self.updated_at.isoformat(),
        ]

    @staticmethod
    def csv_header(unit_system: str = "metric") -> List[str]:
        """Return CSV header row."""
        units = UNIT_SYSTEMS.get(unit_system, UNIT_SYSTEMS["metric"])
        return [
            "record_id",
            "type",
            "project_id",
            "label",
            f"length_{units['length']}",
            f"area_{units['area']}",
            f"volume_{units['volume']}",
            "weight_kg",
            "warnings",
            "updated_at",
        ]
