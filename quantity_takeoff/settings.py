"""
Settings Module

Loads preset overrides from config/settings.yaml on top of the built-in
constants. The result is a frozen Settings object shared read-only by all
builds.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Optional, Union

import yaml

from . import constants as C

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "QUANTITY_TAKEOFF_SETTINGS"

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "settings.yaml"


@dataclass(frozen=True)
class Settings:
    """Every tunable preset used by the measurement builders."""
    # Geometry
    closure_epsilon: float = C.CLOSURE_EPSILON
    straight_angle_epsilon: float = C.STRAIGHT_ANGLE_EPSILON

    # Soil
    soil_expansion: Dict[str, float] = field(default_factory=lambda: dict(C.SOIL_EXPANSION_FACTORS))
    contraction_by_class: Dict[str, float] = field(default_factory=lambda: dict(C.CONTRACTION_BY_CLASS))
    default_contraction_class: str = C.DEFAULT_CONTRACTION_CLASS
    default_soil_type: str = C.DEFAULT_SOIL_TYPE

    # Trench
    trench_width_m: float = C.DEFAULT_TRENCH_WIDTH_M
    trench_depth_m: float = C.DEFAULT_TRENCH_DEPTH_M

    # Drilling
    min_bend_radius_m: float = C.DEFAULT_MIN_BEND_RADIUS_M
    min_cover_depth_m: float = C.DEFAULT_MIN_COVER_DEPTH_M
    entry_angle_deg: float = C.DEFAULT_ENTRY_ANGLE_DEG
    exit_angle_deg: float = C.DEFAULT_EXIT_ANGLE_DEG
    drill_diameter_mm: float = C.DEFAULT_DRILL_DIAMETER_MM
    backreamer_diameter_mm: float = C.DEFAULT_BACKREAMER_DIAMETER_MM

    # Hydro-excavation
    hydro_diameter_m: float = C.DEFAULT_HYDRO_DIAMETER_M
    hydro_depth_m: float = C.DEFAULT_HYDRO_DEPTH_M

    # Vault
    vault_length_m: float = C.DEFAULT_VAULT_LENGTH_M
    vault_width_m: float = C.DEFAULT_VAULT_WIDTH_M
    vault_depth_m: float = C.DEFAULT_VAULT_DEPTH_M
    vault_structure_fraction: float = C.VAULT_STRUCTURE_FRACTION

    # Masonry
    block_presets: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: {k: dict(v) for k, v in C.BLOCK_PRESETS.items()}
    )
    material_block_preset: Dict[str, str] = field(default_factory=lambda: dict(C.MATERIAL_BLOCK_PRESET))
    wall_height_m: float = C.DEFAULT_WALL_HEIGHT_M
    mortar_fraction: float = C.MORTAR_FRACTION
    masonry_density_kg_m3: float = C.DEFAULT_MASONRY_DENSITY_KG_M3
    opening_width_m: float = C.DEFAULT_OPENING_WIDTH_M
    opening_height_m: float = C.DEFAULT_OPENING_HEIGHT_M

    # Thicknesses, concrete, rebar
    thicknesses: Dict[str, float] = field(default_factory=lambda: dict(C.STANDARD_THICKNESSES))
    concrete_density_kg_m3: float = C.DEFAULT_CONCRETE_DENSITY_KG_M3
    rebar_rate_kg_m3: float = C.DEFAULT_REBAR_RATE_KG_M3
    rebar_rate_typical_min: float = C.REBAR_RATE_TYPICAL_MIN
    rebar_rate_typical_max: float = C.REBAR_RATE_TYPICAL_MAX
    beam_section: Dict[str, Any] = field(default_factory=lambda: dict(C.DEFAULT_BEAM_SECTION))

    # Finishing
    finishing_loss_percent: Dict[str, float] = field(default_factory=lambda: dict(C.FINISHING_LOSS_PERCENT))
    default_finishing_loss_percent: float = C.DEFAULT_FINISHING_LOSS_PERCENT

    # Conduits
    conduit_densities: Dict[str, float] = field(default_factory=lambda: dict(C.CONDUIT_DENSITIES))
    default_conduit_density_kg_m3: float = C.DEFAULT_CONDUIT_DENSITY_KG_M3

    def __post_init__(self):
        # Shared by every build, so table fields are exposed read-only
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Mapping):
                object.__setattr__(self, f.name, _freeze(value))

    def thickness(self, key: str) -> float:
        return self.thicknesses[key]


def _freeze(value: Any) -> Any:
    """Recursively wrap mappings in read-only proxies."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    return value


def _flatten_sections(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten the sectioned YAML layout into Settings field names.

    settings.yaml groups keys by topic ("geometry:", "soil:", ...). Keys may
    also be given at the top level.
    """
    known = {f.name for f in fields(Settings)}
    flat = {}

    for key, value in raw.items():
        if key in known:
            flat[key] = value
        elif isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if sub_key in known:
                    flat[sub_key] = sub_value
                else:
                    logger.warning(f"Unknown setting '{key}.{sub_key}' ignored")
        else:
            logger.warning(f"Unknown setting '{key}' ignored")

    return flat


def _merge(default: Any, override: Any) -> Any:
    """Merge override over default; mappings merge key by key."""
    if isinstance(default, Mapping) and isinstance(override, Mapping):
        merged = dict(default)
        for key, value in override.items():
            merged[key] = _merge(default.get(key), value) if key in default else value
        return merged
    return override


def settings_from_dict(raw: Optional[Dict[str, Any]]) -> Settings:
    """Build Settings from a (possibly sectioned) mapping of overrides."""
    base = Settings()
    if not raw:
        return base

    overrides = {}
    for name, value in _flatten_sections(raw).items():
        overrides[name] = _merge(getattr(base, name), value)

    return Settings(**{**{f.name: getattr(base, f.name) for f in fields(Settings)}, **overrides})


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file.

    Resolution order: explicit path, $QUANTITY_TAKEOFF_SETTINGS, then
    config/settings.yaml next to the package. A missing file yields the
    built-in defaults.

    Args:
        path: Optional YAML path

    Returns:
        Frozen Settings
    """
    if path is None:
        env_path = os.environ.get(SETTINGS_ENV_VAR)
        path = Path(env_path) if env_path else DEFAULT_SETTINGS_PATH

    path = Path(path)
    if not path.exists():
        logger.debug(f"Settings file not found at {path}, using defaults")
        return Settings()

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file must contain a mapping: {path}")

    logger.debug(f"Loaded settings from {path}: sections {', '.join(raw.keys())}")
    return settings_from_dict(raw)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Default settings, loaded once per process."""
    return load_settings()
