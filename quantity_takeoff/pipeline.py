"""
Pipeline Orchestration Module

Coordinates a batch takeoff from a JSON file of measurements to report
files.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .constants import DEFAULT_ZOOM
from .errors import TakeoffError
from .measurement.builder import build_measurement
from .measurement.parser import parse_measurement_input
from .measurement.record import MeasurementRecord
from .measurement.summary import MeasurementSummary, summarize_records
from .output.csv_writer import generate_csv_filename, write_records_to_csv
from .output.json_writer import generate_json_filename, write_records_to_json
from .settings import Settings, get_settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    input_file: str
    output_dir: str
    units: str = "metric"
    default_scale: Optional[str] = None
    default_zoom: float = DEFAULT_ZOOM
    settings_path: Optional[str] = None
    project_id: str = ""
    verbose: bool = False


@dataclass
class PipelineResult:
    """Result from full pipeline execution."""
    input_file: str
    output_dir: str
    total_measurements: int
    records: List[MeasurementRecord]
    summary: MeasurementSummary
    units: str
    warnings: List[str] = field(default_factory=list)
    failures: List[Dict[str, Any]] = field(default_factory=list)
    csv_path: Optional[str] = None
    json_path: Optional[str] = None
    processing_time: float = 0.0


def load_measurements(input_file: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Read measurement payloads from a JSON file.

    The file is either a list of payloads or an object with "measurements"
    and an optional "project_id".

    Returns:
        Tuple of (project_id, payloads)
    """
    with open(input_file, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return "", data

    if isinstance(data, dict) and isinstance(data.get("measurements"), list):
        return str(data.get("project_id", "")), data["measurements"]

    raise ValueError(f"Input must be a list of measurements or an object with 'measurements': {input_file}")


def build_records(
    payloads: List[Dict[str, Any]],
    project_id: str,
    settings: Settings,
    default_scale: Optional[str] = None,
    default_zoom: float = DEFAULT_ZOOM
) -> Tuple[List[MeasurementRecord], List[Dict[str, Any]]]:
    """
    Build every payload, collecting rejected ones instead of stopping.

    Returns:
        Tuple of (records, failures) where each failure names the payload
        index, its type and the error message
    """
    records = []
    failures = []

    for i, payload in enumerate(payloads):
        try:
            measurement_input = parse_measurement_input(payload, default_scale, default_zoom)
            record = build_measurement(
                measurement_input,
                record_id=payload.get("id"),
                project_id=project_id,
                settings=settings,
            )
        except TakeoffError as e:
            kind = payload.get("type", "?") if isinstance(payload, dict) else "?"
            logger.warning(f"Measurement {i} ({kind}) rejected: {e}")
            failures.append({"index": i, "type": kind, "error": str(e), "error_type": type(e).__name__})
            continue

        records.append(record)

    return records, failures


def run_pipeline(args) -> PipelineResult:
    """
    Run the batch takeoff.

    Args:
        args: Parsed command-line arguments

    Returns:
        PipelineResult with all outputs
    """
    start_time = time.time()

    config = PipelineConfig(
        input_file=args.input,
        output_dir=args.output,
        units=args.units,
        default_scale=getattr(args, "scale", None),
        default_zoom=getattr(args, "zoom", DEFAULT_ZOOM),
        settings_path=getattr(args, "settings", None),
        project_id=getattr(args, "project", None) or "",
        verbose=args.verbose,
    )

    # Setup logging
    log_level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    logger.info(f"Processing: {config.input_file}")

    settings = load_settings(config.settings_path) if config.settings_path else get_settings()

    file_project_id, payloads = load_measurements(config.input_file)
    project_id = config.project_id or file_project_id
    logger.info(f"Building {len(payloads)} measurements")

    records, failures = build_records(
        payloads, project_id, settings, config.default_scale, config.default_zoom
    )
    summary = summarize_records(records, project_id)

    all_warnings = []
    for record in records:
        all_warnings.extend(f"{record.measurement_type.value} {record.record_id}: {w}" for w in record.warnings)
    all_warnings.extend(f"Measurement {f['index']} ({f['type']}): {f['error']}" for f in failures)

    # Generate outputs
    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = generate_csv_filename(config.input_file, config.output_dir)
    write_records_to_csv(records, csv_path, config.units)
    logger.info(f"CSV written: {csv_path}")

    json_path = generate_json_filename(config.input_file, config.output_dir)
    write_records_to_json(
        records, json_path, summary,
        input_file=config.input_file,
        unit_system=config.units,
        failures=failures,
    )
    logger.info(f"JSON written: {json_path}")

    if not records:
        all_warnings.append("No measurements could be built")
        logger.warning("No measurements built")

    processing_time = time.time() - start_time

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Measurements built: {len(records)} of {len(payloads)}")
    for type_name, totals in summary.totals.items():
        logger.info(
            f"  {type_name}: {totals.count} | {totals.total_length_m:,.2f} m | "
            f"{totals.total_area_m2:,.2f} m² | {totals.total_volume_m3:,.3f} m³"
        )
    logger.info(f"  Processing time: {processing_time:.1f}s")

    if all_warnings and config.verbose:
        logger.info(f"\nWarnings ({len(all_warnings)}):")
        for w in all_warnings[:10]:
            logger.info(f"  - {w}")
        if len(all_warnings) > 10:
            logger.info(f"  ... and {len(all_warnings) - 10} more")

    return PipelineResult(
        input_file=config.input_file,
        output_dir=config.output_dir,
        total_measurements=len(payloads),
        records=records,
        summary=summary,
        units=config.units,
        warnings=all_warnings,
        failures=failures,
        csv_path=csv_path,
        json_path=json_path,
        processing_time=processing_time,
    )
