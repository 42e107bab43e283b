#!/usr/bin/env python
"""
Quantity Takeoff - Installation Verification Script

Checks that the engine's dependencies import, that the presets load, and
that a reference measurement builds with the expected volume.
"""

import sys
from pathlib import Path

# Make the package importable from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent))


def check_package(name: str, import_name: str = None, version_attr: str = "__version__") -> tuple[bool, str]:
    """Check if a package is installed and return version."""
    import_name = import_name or name
    try:
        module = __import__(import_name)
        version = getattr(module, version_attr, "unknown")
        return True, str(version)
    except ImportError as e:
        return False, str(e)


def check_settings() -> tuple[bool, str]:
    """Check if settings.yaml loads into Settings."""
    try:
        from quantity_takeoff.settings import DEFAULT_SETTINGS_PATH, load_settings
        if not DEFAULT_SETTINGS_PATH.exists():
            return False, "settings.yaml not found"
        settings = load_settings(DEFAULT_SETTINGS_PATH)
        return True, f"closure_epsilon={settings.closure_epsilon:g}, soil types: {', '.join(settings.soil_expansion)}"
    except (ImportError, ValueError) as e:
        return False, str(e)


def check_reference_build() -> tuple[bool, str]:
    """Build a 10 m x 1 m x 1 m trench and check its volume."""
    try:
        from quantity_takeoff import TrenchInput, build_measurement
        from quantity_takeoff.measurement.types import DimensionSpec

        record = build_measurement(TrenchInput(
            points=[(0, 0), (10, 0)],
            scale="1:1",
            width=DimensionSpec.constant(1.0),
            depth=DimensionSpec.constant(1.0),
        ))
        ok = abs(record.volume_m3 - 10.0) < 1e-9
        return ok, f"volume {record.volume_m3:.3f} m³"
    except ImportError as e:
        return False, str(e)


def main():
    print("=" * 60)
    print("Quantity Takeoff - Installation Verification")
    print("=" * 60)
    print()

    results = []

    print("Core Dependencies:")
    print("-" * 40)

    packages = [
        ("numpy", "numpy", "__version__"),
        ("shapely", "shapely", "__version__"),
        ("pyyaml", "yaml", "__version__"),
    ]

    for name, import_name, version_attr in packages:
        ok, info = check_package(name, import_name, version_attr)
        status = "PASS" if ok else "FAIL"
        print(f"  {name:25} [{status}] {info}")
        results.append((name, ok))

    print()
    print("Configuration:")
    print("-" * 40)

    ok, info = check_settings()
    status = "PASS" if ok else "FAIL"
    print(f"  {'settings.yaml':25} [{status}] {info}")
    results.append(("settings", ok))

    ok, info = check_reference_build()
    status = "PASS" if ok else "FAIL"
    print(f"  {'reference trench':25} [{status}] {info}")
    results.append(("reference build", ok))

    print()
    print("=" * 60)

    passed = sum(1 for _, ok in results if ok)
    total = len(results)

    if passed == total:
        print(f"ALL CHECKS PASSED ({passed}/{total})")
        return 0
    else:
        failed = [name for name, ok in results if not ok]
        print(f"SOME CHECKS FAILED ({passed}/{total})")
        print(f"Failed: {', '.join(failed)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
