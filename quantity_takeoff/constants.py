"""
Quantity Takeoff - Master Constants Reference

Canonical physical defaults used when a measurement omits an optional
attribute. All values are metric (metres, m², m³, kg).

These are the built-in defaults. Any of them can be overridden through
config/settings.yaml (see settings.py). The soil factors and the 10%
mortar/structure fractions carry no cited engineering reference and should
be confirmed by a domain expert before being relied on for pricing.
"""

# =============================================================================
# GEOMETRY TOLERANCES
# =============================================================================

# First/last vertex distance (drawing units) under which a ring counts as closed
CLOSURE_EPSILON = 1e-6

# Deflection angle (radians) below which a bend is treated as straight
STRAIGHT_ANGLE_EPSILON = 1e-6

# Minimum polygon vertices (closing vertex included)
MIN_POLYGON_VERTICES = 3

# Minimum polyline vertices for linear measurements
MIN_POLYLINE_VERTICES = 2

# =============================================================================
# SCALE CONSTANTS
# =============================================================================

# "N:M" drawing scale notation
SCALE_PATTERN = r"^(\d+):(\d+)$"

# Default viewport zoom (no magnification)
DEFAULT_ZOOM = 1.0

# Common metric drawing scales, used to snap two-point calibrations
STANDARD_SCALE_DENOMINATORS = [
    1, 2, 5, 10, 20, 25, 50, 75, 100, 125, 200, 250, 500, 1000, 2000, 2500, 5000,
]

# Relative tolerance for snapping a calibrated scale to a standard one
SCALE_SNAP_TOLERANCE = 0.02

# =============================================================================
# UNIT CONVERSION CONSTANTS
# =============================================================================

FEET_PER_METER = 3.28084
INCHES_PER_FOOT = 12
MM_PER_METER = 1000
CM_PER_METER = 100

# =============================================================================
# SOIL SWELL / SHRINK FACTORS
# =============================================================================

# Expansion (swell) rate: loose = cut * (1 + rate)
SOIL_EXPANSION_FACTORS = {
    "clay": 0.25,
    "sand": 0.12,
    "rock": 0.50,
    "mixed": 0.25,
}

# Contraction (shrink) rate by compaction class: compacted = cut * (1 - rate).
# The compaction class, not the soil type, sets the default rate.
CONTRACTION_BY_CLASS = {
    "normal": 0.10,
    "high": 0.15,
}

DEFAULT_CONTRACTION_CLASS = "normal"

# Soil assumed when a trench declares soil parameters without a type
DEFAULT_SOIL_TYPE = "mixed"

# =============================================================================
# TRENCH DEFAULTS
# =============================================================================

DEFAULT_TRENCH_WIDTH_M = 0.6
DEFAULT_TRENCH_DEPTH_M = 0.9

# =============================================================================
# DIRECTIONAL DRILLING (HDD) DEFAULTS
# =============================================================================

# 150 ft
DEFAULT_MIN_BEND_RADIUS_M = 45.72

# 8 ft
DEFAULT_MIN_COVER_DEPTH_M = 2.44

DEFAULT_ENTRY_ANGLE_DEG = 15.0
DEFAULT_EXIT_ANGLE_DEG = 15.0

# 6 in pilot, 7.2 in backreamer
DEFAULT_DRILL_DIAMETER_MM = 152.4
DEFAULT_BACKREAMER_DIAMETER_MM = 182.88

# =============================================================================
# HYDRO-EXCAVATION DEFAULTS
# =============================================================================

# 2 ft circular nozzle footprint
DEFAULT_HYDRO_DIAMETER_M = 0.61

# 3 ft
DEFAULT_HYDRO_DEPTH_M = 0.91

# =============================================================================
# VAULT DEFAULTS
# =============================================================================

# 4 ft x 4 ft x 6 ft
DEFAULT_VAULT_LENGTH_M = 1.22
DEFAULT_VAULT_WIDTH_M = 1.22
DEFAULT_VAULT_DEPTH_M = 1.83

# Vault structure volume as a fraction of its excavation
VAULT_STRUCTURE_FRACTION = 0.10

# =============================================================================
# MASONRY CONSTANTS
# =============================================================================

# Block dimension presets (mm)
BLOCK_PRESETS = {
    "ceramic_9x19x19": {
        "length_mm": 190,
        "height_mm": 190,
        "width_mm": 90,
        "joint_horizontal_mm": 10,
        "joint_vertical_mm": 10,
    },
    "ceramic_14x19x19": {
        "length_mm": 190,
        "height_mm": 190,
        "width_mm": 140,
        "joint_horizontal_mm": 10,
        "joint_vertical_mm": 10,
    },
    "concrete_14x19x39": {
        "length_mm": 390,
        "height_mm": 190,
        "width_mm": 140,
        "joint_horizontal_mm": 10,
        "joint_vertical_mm": 10,
    },
    # Hollow clay brick usually laid with a thicker joint
    "hollow_brick_9x19x19": {
        "length_mm": 190,
        "height_mm": 190,
        "width_mm": 90,
        "joint_horizontal_mm": 15,
        "joint_vertical_mm": 15,
    },
}

# Block preset implied by a wall material when none is given
MATERIAL_BLOCK_PRESET = {
    "ceramic_block": "ceramic_9x19x19",
    "concrete_block": "concrete_14x19x39",
    "hollow_brick": "hollow_brick_9x19x19",
}

DEFAULT_WALL_HEIGHT_M = 2.70

# Mortar volume as a fraction of wall volume (practical range 8-12%)
MORTAR_FRACTION = 0.10

DEFAULT_MASONRY_DENSITY_KG_M3 = 1500

# Default opening (door) when only a count is given
DEFAULT_OPENING_WIDTH_M = 0.70
DEFAULT_OPENING_HEIGHT_M = 2.10

# =============================================================================
# STANDARD THICKNESSES (m)
# =============================================================================

STANDARD_THICKNESSES = {
    "wall_external": 0.20,
    "wall_internal": 0.15,
    "slab": 0.12,
    "foundation": 0.20,
}

# =============================================================================
# CONCRETE AND REBAR
# =============================================================================

DEFAULT_CONCRETE_DENSITY_KG_M3 = 2500

# Rebar rate (kg of steel per m³ of concrete)
DEFAULT_REBAR_RATE_KG_M3 = 100
REBAR_RATE_TYPICAL_MIN = 80
REBAR_RATE_TYPICAL_MAX = 120

# Default beam section (m) when none is given
DEFAULT_BEAM_SECTION = {"shape": "rectangular", "width_m": 0.20, "height_m": 0.40}

# =============================================================================
# FINISHING LOSSES (%)
# =============================================================================

FINISHING_LOSS_PERCENT = {
    "floor": 5,
    "wall_cladding": 10,
    "paint": 5,
    "tile": 10,
    "porcelain": 10,
    "granite": 10,
}

DEFAULT_FINISHING_LOSS_PERCENT = 5

# =============================================================================
# MATERIAL DENSITIES (kg/m³)
# =============================================================================

CONDUIT_DENSITIES = {
    "pvc": 1440,
    "hdpe": 950,
    "steel": 7850,
    "aluminum": 2700,
    "fiber": 1600,
    "copper": 8960,
}

DEFAULT_CONDUIT_DENSITY_KG_M3 = 1600


# =============================================================================
# STRING CONSTANTS
# =============================================================================

class SoilType:
    CLAY = "clay"
    SAND = "sand"
    ROCK = "rock"
    MIXED = "mixed"


class SectionShape:
    CIRCULAR = "circular"
    RECTANGULAR = "rectangular"
    CUSTOM = "custom"


class HydroSubtype:
    TRENCH = "trench"
    HOLE = "hole"
    POTHOLING = "potholing"


class FoundationKind:
    PAD = "pad"
    FOOTING = "footing"
    GRADE_BEAM = "grade_beam"
    RAFT = "raft"
    PILE = "pile"


class StructuralElement:
    BEAM = "beam"
    COLUMN = "column"
    SLAB = "slab"


class FinishingType:
    FLOOR = "floor"
    WALL_CLADDING = "wall_cladding"
    PAINT = "paint"
    TILE = "tile"
    PORCELAIN = "porcelain"
    GRANITE = "granite"
    OTHER = "other"
