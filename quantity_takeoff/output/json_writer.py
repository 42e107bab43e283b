"""
JSON Writer Module

Writes the full takeoff report: records, per-type summary and the
measurements that could not be built.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..calibration.unit_converter import format_area, format_length, format_volume
from ..measurement.record import MeasurementRecord
from ..measurement.summary import MeasurementSummary

logger = logging.getLogger(__name__)


def generate_json_filename(input_path: str, output_dir: str) -> str:
    """<output_dir>/<input stem>_takeoff.json"""
    return str(Path(output_dir) / f"{Path(input_path).stem}_takeoff.json")


def _formatted_totals(summary: MeasurementSummary, unit_system: str) -> Dict[str, Dict[str, str]]:
    return {
        type_name: {
            "length": format_length(totals.total_length_m, unit_system),
            "area": format_area(totals.total_area_m2, unit_system),
            "volume": format_volume(totals.total_volume_m3, unit_system),
        }
        for type_name, totals in summary.totals.items()
    }


def write_records_to_json(
    records: List[MeasurementRecord],
    output_path: str,
    summary: MeasurementSummary,
    input_file: str = "",
    unit_system: str = "metric",
    failures: Optional[List[Dict[str, Any]]] = None
) -> None:
    """
    Write records and their summary to a JSON file.

    Quantities stay metric in the records; `formatted_totals` carries the
    summary in the requested unit system.
    """
    report = {
        "input_file": input_file,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "units": unit_system,
        "summary": summary.to_dict(),
        "formatted_totals": _formatted_totals(summary, unit_system),
        "records": [r.to_dict() for r in records],
        "failures": failures or [],
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)

    logger.debug(f"Wrote {len(records)} records to {output_path}")
