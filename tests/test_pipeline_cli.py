#!/usr/bin/env python
"""
Pipeline and CLI Tests

Tests for argument parsing/validation and the batch takeoff from a JSON
file of measurements to CSV and JSON reports.
"""

import csv
import json
import sys
import tempfile
from argparse import Namespace
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quantity_takeoff.cli import create_parser, parse_args, validate_args
from quantity_takeoff.output import generate_csv_filename, generate_json_filename
from quantity_takeoff.pipeline import build_records, load_measurements, run_pipeline
from quantity_takeoff.settings import Settings


MEASUREMENTS = {
    "project_id": "P-100",
    "measurements": [
        {
            "id": "t-1",
            "type": "trench",
            "coordinates": [{"x": 0, "y": 0}, {"x": 50, "y": 0}],
            "scale": "1:2",
            "width": 0.6,
            "depth": 1.2,
        },
        {
            "id": "a-1",
            "type": "area",
            "points": [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]],
            "scale": "1:1",
        },
        {
            "type": "slab",
            "points": [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]],
        },
        {
            "id": "n-1",
            "type": "note",
            "text": "Confirm asphalt thickness on site",
        },
    ],
}


def write_input(directory: str, data, name: str = "site.json") -> str:
    path = Path(directory) / name
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return str(path)


def make_args(input_file: str, output_dir: str, **overrides) -> Namespace:
    args = {
        "input": input_file,
        "output": output_dir,
        "scale": None,
        "zoom": 1.0,
        "settings": None,
        "project": None,
        "units": "metric",
        "verbose": False,
    }
    args.update(overrides)
    return Namespace(**args)


class TestCLI:
    """Tests for argument parsing and validation."""

    def test_parser_defaults(self):
        args = create_parser().parse_args(["-i", "site.json", "-o", "out"])
        assert args.input == "site.json"
        assert args.output == "out"
        assert args.units == "metric"
        assert args.zoom == 1.0
        assert args.scale is None
        assert not args.verbose
        print("  [PASS] Parser defaults")

    def test_parser_options(self):
        args = create_parser().parse_args([
            "-i", "site.json", "-o", "out",
            "--scale", "1:100", "--zoom", "2", "--units", "imperial", "--project", "P-9", "-v",
        ])
        assert args.scale == "1:100"
        assert args.zoom == 2.0
        assert args.units == "imperial"
        assert args.project == "P-9"
        assert args.verbose
        print("  [PASS] Parser options")

    def test_validate_args(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = write_input(tmpdir, MEASUREMENTS)
            out = str(Path(tmpdir) / "reports")

            ok, message = validate_args(make_args(input_file, out))
            assert ok, message
            assert Path(out).is_dir()

            cases = [
                make_args(str(Path(tmpdir) / "missing.json"), out),
                make_args(input_file, out, scale="1/100"),
                make_args(input_file, out, zoom=0.0),
                make_args(input_file, out, settings=str(Path(tmpdir) / "none.yaml")),
            ]
            for args in cases:
                ok, message = validate_args(args)
                assert not ok
                assert message

            text_file = Path(tmpdir) / "site.txt"
            text_file.write_text("[]")
            ok, message = validate_args(make_args(str(text_file), out))
            assert not ok
            assert "JSON" in message
        print("  [PASS] Argument validation")

    def test_parse_args_validates(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = write_input(tmpdir, MEASUREMENTS)
            args = parse_args(["-i", input_file, "-o", tmpdir, "--scale", "1:50"])
            assert args.scale == "1:50"
            try:
                parse_args(["-i", input_file, "-o", tmpdir, "--zoom", "-1"])
                assert False, "Expected SystemExit"
            except SystemExit as e:
                assert e.code == 2
        print("  [PASS] parse_args exits on invalid arguments")


class TestPipeline:
    """Tests for the batch takeoff."""

    def test_load_measurements(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            project_id, payloads = load_measurements(write_input(tmpdir, MEASUREMENTS))
            assert project_id == "P-100"
            assert len(payloads) == 4

            project_id, payloads = load_measurements(write_input(tmpdir, MEASUREMENTS["measurements"], "list.json"))
            assert project_id == ""
            assert len(payloads) == 4

            try:
                load_measurements(write_input(tmpdir, {"records": []}, "bad.json"))
                assert False, "Expected ValueError"
            except ValueError:
                pass
        print("  [PASS] Load measurements")

    def test_build_records_collects_failures(self):
        records, failures = build_records(MEASUREMENTS["measurements"], "P-100", Settings())
        assert [r.record_id for r in records] == ["t-1", "a-1", "n-1"]
        assert len(failures) == 1
        assert failures[0]["index"] == 2
        assert failures[0]["type"] == "slab"
        assert failures[0]["error_type"] == "ScaleFormatError"
        print("  [PASS] Failures collected per measurement")

    def test_text_attributes_are_collected(self):
        square = [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]
        payloads = [
            {"id": "s-1", "type": "slab", "points": square, "scale": "1:1", "thickness_m": "thick"},
            {"id": "f-1", "type": "finishing", "points": square, "scale": "1:1", "standard_loss_percent": "x"},
            {"id": "a-1", "type": "area", "points": square, "scale": "1:1"},
        ]
        records, failures = build_records(payloads, "P-100", Settings())
        assert [r.record_id for r in records] == ["a-1"]
        assert [f["index"] for f in failures] == [0, 1]
        assert {f["error_type"] for f in failures} == {"InvalidAttributeError"}
        print("  [PASS] Non-numeric attributes collected as invalid")

    def test_default_scale_applies(self):
        records, failures = build_records(MEASUREMENTS["measurements"], "P-100", Settings(), default_scale="1:1")
        assert failures == []
        assert len(records) == 4
        print("  [PASS] Default scale fills missing scales")

    def test_run_pipeline(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = write_input(tmpdir, MEASUREMENTS)
            out = str(Path(tmpdir) / "reports")
            result = run_pipeline(make_args(input_file, out))

            assert result.total_measurements == 4
            assert len(result.records) == 3
            assert len(result.failures) == 1
            assert result.summary.project_id == "P-100"
            assert set(result.summary.totals) == {"trench", "area"}
            assert result.csv_path == generate_csv_filename(input_file, out)
            assert result.json_path == generate_json_filename(input_file, out)

            with open(result.csv_path, newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
            assert rows[0][:5] == ["record_id", "type", "project_id", "label", "length_m"]
            assert len(rows) == 4
            assert rows[1][0] == "t-1"
            assert float(rows[1][6]) == 72.0

            with open(result.json_path, encoding="utf-8") as f:
                report = json.load(f)
            assert report["units"] == "metric"
            assert len(report["records"]) == 3
            assert report["failures"][0]["index"] == 2
            assert report["summary"]["totals"]["trench"]["total_volume_m3"] == 72.0
            assert report["formatted_totals"]["area"]["area"] == "100.0 m²"
        print("  [PASS] Batch takeoff writes CSV and JSON")

    def test_run_pipeline_imperial_with_overrides(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = write_input(tmpdir, MEASUREMENTS)
            result = run_pipeline(make_args(input_file, tmpdir, units="imperial", scale="1:1", project="P-200"))

            assert result.failures == []
            assert all(r.project_id == "P-200" for r in result.records)

            with open(result.csv_path, newline="", encoding="utf-8") as f:
                header = next(csv.reader(f))
            assert "length_ft" in header
            assert "area_sqft" in header

            with open(result.json_path, encoding="utf-8") as f:
                report = json.load(f)
            assert report["formatted_totals"]["slab"]["area"] == "1076.4 SF"
        print("  [PASS] Imperial report with CLI overrides")


def run_all_tests():
    """Run all pipeline and CLI tests."""
    print("=" * 60)
    print("Pipeline and CLI Tests")
    print("=" * 60)
    print()

    all_passed = True
    groups = [
        ("CLI", TestCLI),
        ("Pipeline", TestPipeline),
    ]

    for title, cls in groups:
        print(f"{title} Tests:")
        print("-" * 40)
        tests = cls()
        for name in sorted(n for n in dir(tests) if n.startswith("test_")):
            try:
                getattr(tests, name)()
            except AssertionError as e:
                print(f"  [FAIL] {name}: {e}")
                all_passed = False
            except Exception as e:
                print(f"  [ERROR] {name}: {e}")
                all_passed = False
        print()

    print("=" * 60)
    if all_passed:
        print("ALL PIPELINE TESTS PASSED")
        return 0
    else:
        print("SOME TESTS FAILED")
        return 1


if __name__ == "__main__":
    sys.exit(run_all_tests())
