#!/usr/bin/env python
"""
Geometry Kernel Tests

Tests for coordinate normalization and the 2D/3D geometry primitives:
lengths, Shoelace area, closure, polygon validation, slopes, offsets,
elevation profiles, offset areas and marker counts.
"""

import math
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quantity_takeoff.geometry import (
    Coordinate,
    to_coordinates,
    distance_2d,
    distance_3d,
    segment_lengths,
    polyline_length,
    polyline_length_3d,
    is_closed,
    close_ring,
    polygon_area,
    polygon_perimeter,
    validate_polygon,
    slope_between,
    segment_directions,
    offset_polyline,
    bounding_box,
    elevation_profile,
    offset_area,
    count_markers,
)
from quantity_takeoff.errors import GeometryError


SQUARE = to_coordinates([(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)])


class TestCoordinate:
    """Tests for the Coordinate data structure."""

    def test_from_dict(self):
        c = Coordinate.from_any({"x": 1, "y": 2, "z": 0.5})
        assert c == Coordinate(1.0, 2.0, 0.5)
        assert Coordinate.from_any({"x": 1, "y": 2, "elevation": 3}).z == 3.0
        assert Coordinate.from_any({"x": 1, "y": 2}).z is None
        print("  [PASS] Coordinate from dict")

    def test_from_sequence(self):
        assert Coordinate.from_any([1, 2]) == Coordinate(1.0, 2.0)
        assert Coordinate.from_any((1, 2, 3)).z == 3.0
        c = Coordinate(4, 5)
        assert Coordinate.from_any(c) is c
        print("  [PASS] Coordinate from sequence")

    def test_from_invalid(self):
        for bad in ({"x": 1}, [1], [1, 2, 3, 4], "1,2", None):
            try:
                Coordinate.from_any(bad)
                assert False, f"Expected ValueError for {bad!r}"
            except ValueError:
                pass
        print("  [PASS] Invalid coordinates rejected")

    def test_depth_and_dict(self):
        assert Coordinate(1, 2).depth == 0.0
        assert Coordinate(1, 2, 1.5).depth == 1.5
        assert not Coordinate(1, 2).has_z
        assert Coordinate(1, 2).to_dict() == {"x": 1, "y": 2}
        assert Coordinate(1, 2, 3).to_dict() == {"x": 1, "y": 2, "z": 3}
        assert Coordinate(1, 2, 3).as_tuple() == (1, 2)
        print("  [PASS] Coordinate depth and serialization")


class TestLengths:
    """Tests for distances and polyline lengths."""

    def test_distances(self):
        a, b = Coordinate(0, 0, 0), Coordinate(3, 4, 12)
        assert distance_2d(a, b) == 5.0
        assert distance_3d(a, b) == 13.0
        # missing z reads as 0
        assert distance_3d(Coordinate(0, 0), Coordinate(0, 0, 2)) == 2.0
        print("  [PASS] 2D and 3D distances")

    def test_polyline_length(self):
        points = to_coordinates([(0, 0), (3, 4), (3, 10)])
        assert segment_lengths(points) == [5.0, 6.0]
        assert polyline_length(points) == 11.0
        print("  [PASS] Polyline length")

    def test_polyline_length_3d(self):
        points = to_coordinates([(0, 0, 0), (3, 4, 12), (3, 4, 14)])
        assert polyline_length_3d(points) == 15.0
        assert polyline_length(points) == 5.0
        print("  [PASS] 3D polyline length")

    def test_short_polylines(self):
        assert polyline_length([]) == 0.0
        assert polyline_length([Coordinate(1, 1)]) == 0.0
        assert polyline_length_3d([Coordinate(1, 1, 1)]) == 0.0
        print("  [PASS] Fewer than 2 points gives 0")


class TestPolygon:
    """Tests for polygon area, perimeter and closure."""

    def test_closure(self):
        assert is_closed(SQUARE)
        assert not is_closed(SQUARE[:-1])
        assert is_closed(to_coordinates([(0, 0), (1, 0), (1, 1), (0.0000001, 0)]), 1e-6)
        assert not is_closed([])
        assert len(close_ring(SQUARE[:-1])) == 5
        assert len(close_ring(SQUARE)) == 5
        print("  [PASS] Ring closure")

    def test_shoelace_area(self):
        assert polygon_area(SQUARE) == 100.0
        assert polygon_area(list(reversed(SQUARE))) == 100.0
        triangle = to_coordinates([(0, 0), (4, 0), (0, 3), (0, 0)])
        assert polygon_area(triangle) == 6.0
        print("  [PASS] Shoelace area")

    def test_area_implicit_closure(self):
        """Test an open ring gives the same area as the closed one."""
        assert polygon_area(SQUARE[:-1]) == polygon_area(SQUARE)
        print("  [PASS] Open ring implicitly closed")

    def test_area_degenerate(self):
        assert polygon_area(SQUARE[:2]) == 0.0
        collinear = to_coordinates([(0, 0), (5, 0), (10, 0), (0, 0)])
        assert polygon_area(collinear) == 0.0
        print("  [PASS] Degenerate polygon area is 0")

    def test_perimeter(self):
        assert polygon_perimeter(SQUARE) == 40.0
        assert polygon_perimeter(SQUARE[:-1]) == 40.0
        assert polygon_perimeter(SQUARE[:2]) == 0.0
        print("  [PASS] Polygon perimeter")

    def test_validate_polygon(self):
        ok = validate_polygon(SQUARE)
        assert ok.valid
        assert ok.errors == []
        assert ok.warnings == []

        open_ring = validate_polygon(SQUARE[:-1])
        assert not open_ring.valid
        assert "not closed" in open_ring.errors[0]

        too_few = validate_polygon(SQUARE[:2])
        assert not too_few.valid
        print("  [PASS] Polygon validation")

    def test_self_intersection_warns(self):
        """Test a bow-tie ring is valid but carries a warning."""
        bowtie = to_coordinates([(0, 0), (10, 10), (10, 0), (0, 10), (0, 0)])
        result = validate_polygon(bowtie)
        assert result.valid
        assert len(result.warnings) == 1
        assert "not simple" in result.warnings[0]
        print("  [PASS] Self-intersection warning")


class TestSlopesAndOffsets:
    """Tests for slope, direction, offset and bounding box helpers."""

    def test_slope_between(self):
        slope = slope_between(Coordinate(0, 0, 0), Coordinate(10, 0, 1))
        assert slope.run == 10.0
        assert slope.rise == 1.0
        assert math.isclose(slope.percent, 10.0)
        assert math.isclose(slope.angle_deg, math.degrees(math.atan(0.1)))
        print("  [PASS] Slope between points")

    def test_vertical_slope(self):
        slope = slope_between(Coordinate(0, 0, 0), Coordinate(0, 0, 2))
        assert slope.angle_deg == 90.0
        assert math.isinf(slope.percent)
        flat = slope_between(Coordinate(0, 0), Coordinate(0, 0))
        assert flat.percent == 0.0
        print("  [PASS] Vertical and zero-length slopes")

    def test_segment_directions(self):
        points = to_coordinates([(0, 0), (0, 0), (0, 5), (5, 5)])
        directions = segment_directions(points)
        assert [d["segment_index"] for d in directions] == [1, 2]
        assert directions[0]["dy"] == 1.0
        assert directions[1]["dx"] == 1.0
        print("  [PASS] Segment directions skip degenerate segments")

    def test_offset_polyline(self):
        points = to_coordinates([(0, 0), (10, 0)])
        edges = offset_polyline(points, 1.0)
        assert set(edges) == {"left", "right"}
        assert [p.as_tuple() for p in edges["left"]] == [(0.0, 1.0), (10.0, 1.0)]
        assert [p.as_tuple() for p in edges["right"]] == [(0.0, -1.0), (10.0, -1.0)]
        print("  [PASS] Offset polyline")

    def test_offset_one_side(self):
        points = to_coordinates([(0, 0), (0, 10), (10, 10)])
        edges = offset_polyline(points, 2.0, side="left")
        assert list(edges) == ["left"]
        assert len(edges["left"]) == 3
        # left of a northbound segment is west
        assert edges["left"][0].as_tuple() == (-2.0, 0.0)
        try:
            offset_polyline(points, 1.0, side="up")
            assert False, "Expected ValueError"
        except ValueError:
            pass
        print("  [PASS] One-sided offset")

    def test_bounding_box(self):
        assert bounding_box(SQUARE) == (0, 0, 10, 10)
        print("  [PASS] Bounding box")


class TestProfileAreaCount:
    """Tests for elevation profiles, offset areas and marker counts."""

    def test_profile_sorts_stations(self):
        profile = elevation_profile(
            Coordinate(0, 0), Coordinate(30, 40),
            [(50, 98.0), (0, 100.0), (25, 99.5)],
        )
        assert profile.total_length == 50.0
        assert [d for d, _ in profile.stations] == [0.0, 25.0, 50.0]
        assert profile.to_dict()["stations"][1] == {"distance": 25.0, "elevation": 99.5}
        print("  [PASS] Profile stations sorted by distance")

    def test_profile_station_beyond_end(self):
        try:
            elevation_profile(Coordinate(0, 0), Coordinate(10, 0), [(5, 1.0), (10.5, 2.0)])
            assert False, "Expected GeometryError"
        except GeometryError as e:
            assert e.index == 1
            assert e.threshold == 10.0
        print("  [PASS] Station beyond alignment rejected")

    def test_profile_empty(self):
        profile = elevation_profile(Coordinate(0, 0), Coordinate(3, 4), [])
        assert profile.total_length == 5.0
        assert profile.stations == []
        print("  [PASS] Empty profile")

    def test_offset_area_open_line(self):
        line = to_coordinates([(0, 0), (4, 0), (10, 0)])
        assert math.isclose(offset_area(line, 2.0), 40.0)
        print("  [PASS] Open line offset area")

    def test_offset_area_closed_ring(self):
        assert math.isclose(offset_area(SQUARE, 1.0), 144.0)
        assert math.isclose(offset_area(SQUARE, 0.0), 100.0)
        print("  [PASS] Closed ring offset area with mitred corners")

    def test_offset_area_invalid(self):
        assert offset_area(to_coordinates([(0, 0)]), 1.0) == 0.0
        try:
            offset_area(SQUARE, -1.0)
            assert False, "Expected GeometryError"
        except GeometryError:
            pass
        print("  [PASS] Offset area edge cases")

    def test_count_markers(self):
        result = count_markers([
            {"x": 1, "y": 1, "category": "pole"},
            {"x": 2, "y": 1, "category": "pole"},
            {"x": 3, "y": 1, "category": "manhole"},
            {"x": 4, "y": 1},
            {"x": 5, "y": 1, "category": ""},
        ])
        assert result.total == 5
        assert result.by_category == {"pole": 2, "manhole": 1, "uncategorized": 2}
        assert count_markers([]).to_dict() == {"total": 0, "by_category": {}}
        print("  [PASS] Marker count by category")



def run_all_tests():
    """Run all geometry kernel tests."""
    print("=" * 60)
    print("Geometry Kernel Tests")
    print("=" * 60)
    print()

    all_passed = True
    groups = [
        ("Coordinate", TestCoordinate),
        ("Length", TestLengths),
        ("Polygon", TestPolygon),
        ("Slope and Offset", TestSlopesAndOffsets),
        ("Profile, Offset Area and Count", TestProfileAreaCount),
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
        print("ALL GEOMETRY KERNEL TESTS PASSED")
        return 0
    else:
        print("SOME TESTS FAILED")
        return 1


if __name__ == "__main__":
    sys.exit(run_all_tests())
