"""
CSV Writer Module

Writes one row per measurement record.
"""

import csv
import logging
from pathlib import Path
from typing import List

from ..measurement.record import MeasurementRecord

logger = logging.getLogger(__name__)


def generate_csv_filename(input_path: str, output_dir: str) -> str:
    """<output_dir>/<input stem>_takeoff.csv"""
    return str(Path(output_dir) / f"{Path(input_path).stem}_takeoff.csv")


def write_records_to_csv(
    records: List[MeasurementRecord],
    output_path: str,
    unit_system: str = "metric"
) -> None:
    """
    Write records to a CSV file.

    Args:
        records: Built records
        output_path: Destination file
        unit_system: "metric" or "imperial" column units
    """
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(MeasurementRecord.csv_header(unit_system))
        for record in records:
            writer.writerow(record.to_csv_row(unit_system))

    logger.debug(f"Wrote {len(records)} rows to {output_path}")
