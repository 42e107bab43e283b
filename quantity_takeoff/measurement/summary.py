"""
Measurement Summary Module

Per-type totals over a set of records (project summary).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from .record import MeasurementRecord
from .types import MeasurementType


@dataclass
class TypeTotals:
    count: int = 0
    total_length_m: float = 0.0
    total_area_m2: float = 0.0
    total_volume_m3: float = 0.0
    total_weight_kg: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "total_length_m": round(self.total_length_m, 3),
            "total_area_m2": round(self.total_area_m2, 3),
            "total_volume_m3": round(self.total_volume_m3, 3),
            "total_weight_kg": round(self.total_weight_kg, 2),
        }


@dataclass
class MeasurementSummary:
    project_id: str
    totals: Dict[str, TypeTotals] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def record_count(self) -> int:
        return sum(t.count for t in self.totals.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "totals": {k: v.to_dict() for k, v in self.totals.items()},
            "generated_at": self.generated_at.isoformat(),
        }


def summarize_records(
    records: Iterable[MeasurementRecord],
    project_id: Optional[str] = None
) -> MeasurementSummary:
    """
    Accumulate count, length, area, volume and weight per measurement type.

    Vaults count their quantity of identical units. Notes and selections
    are not quantities and are left out.

    Args:
        records: Built records
        project_id: Project id for the summary (taken from the first record
            when omitted)

    Returns:
        MeasurementSummary
    """
    summary = MeasurementSummary(project_id=project_id or "")

    for record in records:
        if not summary.project_id:
            summary.project_id = record.project_id

        if record.measurement_type in (MeasurementType.NOTE, MeasurementType.SELECT):
            continue

        totals = summary.totals.setdefault(record.measurement_type.value, TypeTotals())
        if record.measurement_type == MeasurementType.VAULT:
            totals.count += int(record.computed.get("quantity", 1))
        else:
            totals.count += 1

        totals.total_length_m += record.length_m
        totals.total_area_m2 += record.area_m2
        totals.total_volume_m3 += record.volume_m3
        totals.total_weight_kg += record.weight_kg

    return summary
