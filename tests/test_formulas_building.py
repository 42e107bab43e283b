#!/usr/bin/env python
"""
Building and Surface Formula Tests

Tests for:
- Masonry wall quantities and block counts
- Slab, foundation and structural member volumes
- Rebar estimates and rate warnings
- Roof slope correction and finishing consumption
- Closed-form optimization helpers
"""

import math
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quantity_takeoff.constants import BLOCK_PRESETS
from quantity_takeoff.formulas import (
    opening_area,
    block_count,
    wall_quantities,
    slab_volume,
    box_volume,
    pile_volume,
    foundation_volume,
    member_volume,
    rebar_weight,
    concrete_weight,
    rebar_rate_warnings,
    slope_tangent,
    slope_factor,
    roof_real_area,
    roof_areas,
    surface_area,
    consumption,
    FinishingQuantities,
    section_modulus,
    strongest_beam_from_log,
    min_perimeter_rectangle,
    max_area_rectangle,
)


class TestMasonry:
    """Tests for wall quantities."""

    def test_wall_with_block(self):
        wall = wall_quantities(
            10.0, 2.7, 0.2,
            openings_area_m2=opening_area(1.0, 2.0),
            block=BLOCK_PRESETS["ceramic_9x19x19"],
        )
        assert math.isclose(wall.masonry_area_m2, 27.0)
        assert math.isclose(wall.net_area_m2, 25.0)
        assert math.isclose(wall.volume_m3, 5.0)
        assert math.isclose(wall.mortar_m3, 0.5)
        assert math.isclose(wall.weight_kg, 7500.0)
        assert wall.estimated_blocks == 625
        print("  [PASS] Wall with ceramic block")

    def test_wall_without_block(self):
        wall = wall_quantities(5.0, 3.0, 0.15)
        assert wall.estimated_blocks is None
        assert wall.openings_area_m2 == 0.0
        assert wall.to_dict()["net_area_m2"] == 15.0
        print("  [PASS] Wall without block count")

    def test_block_count_rounds_up(self):
        # 0.2 x 0.2 module: 1.01 m² needs 26 blocks
        assert block_count(1.01, 190, 190, 10, 10) == 26
        assert block_count(1.0, 0, 0, 0, 0) == 0
        print("  [PASS] Block count rounds up")

    def test_opening_area(self):
        assert opening_area(0.7, 2.1, 3) == 0.7 * 2.1 * 3
        print("  [PASS] Opening area")


class TestConcrete:
    """Tests for slab, foundation and member volumes."""

    def test_slab_and_box(self):
        assert math.isclose(slab_volume(100.0, 0.12), 12.0)
        assert box_volume(1.0, 1.0, 0.5, 4) == 2.0
        print("  [PASS] Slab and box volume")

    def test_foundation_kinds(self):
        pad = foundation_volume("pad", length_m=1.0, width_m=1.0, height_m=0.5, quantity=4)
        assert pad.volume_m3 == 2.0
        assert pad.quantity == 4

        beam = foundation_volume("grade_beam", length_m=20.0, width_m=0.3, height_m=0.5)
        assert math.isclose(beam.volume_m3, 3.0)
        assert "length_m" in beam.to_dict()
        assert "area_m2" not in beam.to_dict()

        raft = foundation_volume("raft", area_m2=50.0, thickness_m=0.2)
        assert math.isclose(raft.volume_m3, 10.0)
        assert raft.to_dict()["area_m2"] == 50.0

        pile = foundation_volume("pile", diameter_m=0.5, length_m=10.0, quantity=2)
        assert math.isclose(pile.volume_m3, pile_volume(0.5, 10.0, 2))
        assert math.isclose(pile.volume_m3, math.pi * 0.25 ** 2 * 20)
        print("  [PASS] Foundation kinds")

    def test_member_and_rebar(self):
        assert math.isclose(member_volume(0.08, 5.0), 0.4)
        assert rebar_weight(10.0, 100.0) == 1000.0
        assert concrete_weight(2.0, 2500.0) == 5000.0
        print("  [PASS] Member volume and rebar")

    def test_rebar_rate_warnings(self):
        assert rebar_rate_warnings(100, 80, 120) == []
        assert rebar_rate_warnings(80, 80, 120) == []
        high = rebar_rate_warnings(150, 80, 120)
        assert len(high) == 1
        assert "150" in high[0]
        assert len(rebar_rate_warnings(50, 80, 120)) == 1
        print("  [PASS] Rebar rate warnings")


class TestRoof:
    """Tests for roof slope correction."""

    def test_slope_tangent(self):
        assert math.isclose(slope_tangent(45), 1.0)
        assert slope_tangent(inclination_percent=30) == 0.3
        assert slope_tangent() == 0.0
        print("  [PASS] Slope tangent")

    def test_percent_takes_precedence(self):
        assert slope_tangent(inclination_degrees=10, inclination_percent=100) == 1.0
        print("  [PASS] Percent inclination takes precedence")

    def test_real_area(self):
        assert math.isclose(roof_real_area(100.0, 45), 100 * math.sqrt(2))
        assert math.isclose(roof_real_area(100.0, inclination_percent=100), 141.4213562)
        assert roof_real_area(100.0) == 100.0
        assert math.isclose(slope_factor(0.75), 1.25)
        print("  [PASS] Real roof area")

    def test_vertical_plane_ignored(self):
        assert roof_real_area(100.0, 90) == 100.0
        print("  [PASS] Vertical inclination treated as flat")

    def test_roof_areas(self):
        result = roof_areas([
            {"projected_area_m2": 50.0, "inclination_degrees": 45},
            {"projected_area_m2": 50.0, "inclination_percent": 0},
        ])
        assert len(result.planes) == 2
        assert result.projected_area_m2 == 100.0
        assert math.isclose(result.real_area_m2, 50 * math.sqrt(2) + 50)
        d = result.to_dict()
        assert d["area_m2"] == d["real_area_m2"]
        assert d["planes"][1]["slope_factor"] == 1.0
        print("  [PASS] Roof plane accumulation")


class TestFinishing:
    """Tests for finishing areas and consumption."""

    def test_surface_area(self):
        assert surface_area(20.0, 18.0) == 20.0
        assert surface_area(20.0, 18.0, 2.5) == 45.0
        print("  [PASS] Horizontal and vertical surfaces")

    def test_consumption(self):
        assert math.isclose(consumption(100.0, 5), 105.0)
        finishing = FinishingQuantities("tile", [20.0, 45.0], 10)
        assert finishing.net_area_m2 == 65.0
        assert math.isclose(finishing.consumption_m2, 71.5)
        assert finishing.to_dict()["area_m2"] == 65.0
        print("  [PASS] Finishing consumption")


class TestOptimization:
    """Tests for closed-form material planning helpers."""

    def test_strongest_beam(self):
        beam = strongest_beam_from_log(0.3)
        assert math.isclose(beam.width_m ** 2 + beam.height_m ** 2, 0.09)
        assert math.isclose(beam.height_m / beam.width_m, math.sqrt(2))
        assert math.isclose(beam.section_modulus_m3, section_modulus(beam.width_m, beam.height_m))
        # any other inscribed rectangle is weaker
        other_w = 0.2
        other_h = math.sqrt(0.09 - other_w ** 2)
        assert section_modulus(other_w, other_h) < beam.section_modulus_m3
        assert strongest_beam_from_log(0).section_modulus_m3 == 0.0
        print("  [PASS] Strongest beam from log")

    def test_min_perimeter(self):
        square = min_perimeter_rectangle(100.0)
        assert square.width_m == square.length_m == 10.0
        assert square.perimeter_m == 40.0

        walled = min_perimeter_rectangle(100.0, sides=3)
        assert math.isclose(walled.length_m, 2 * walled.width_m)
        assert math.isclose(walled.width_m * walled.length_m, 100.0)
        assert math.isclose(walled.perimeter_m, 4 * math.sqrt(50))
        print("  [PASS] Minimum perimeter rectangle")

    def test_max_area(self):
        square = max_area_rectangle(40.0)
        assert square.area_m2 == 100.0

        walled = max_area_rectangle(40.0, sides=3)
        assert walled.width_m == 10.0
        assert walled.length_m == 20.0
        assert walled.area_m2 == 200.0
        assert max_area_rectangle(-1).area_m2 == 0.0
        print("  [PASS] Maximum area rectangle")


def run_all_tests():
    """Run all building and surface formula tests."""
    print("=" * 60)
    print("Building and Surface Formula Tests")
    print("=" * 60)
    print()

    all_passed = True
    groups = [
        ("Masonry", TestMasonry),
        ("Concrete", TestConcrete),
        ("Roof", TestRoof),
        ("Finishing", TestFinishing),
        ("Optimization", TestOptimization),
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
        print("ALL BUILDING FORMULA TESTS PASSED")
        return 0
    else:
        print("SOME TESTS FAILED")
        return 1


if __name__ == "__main__":
    sys.exit(run_all_tests())
