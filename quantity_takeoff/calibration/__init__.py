# Scale transformation and unit conversion module

from .scale_transformer import (
    ScaleContext,
    parse_scale,
    validate_zoom,
    to_real_length,
    to_real_area,
    to_real_coordinates,
    scale_from_calibration,
)

from .unit_converter import (
    UNIT_SYSTEMS,
    convert_length,
    convert_area,
    convert_volume,
    format_imperial_length,
    format_length,
    format_area,
    format_volume,
)

__all__ = [
    # Scale Transformer
    "ScaleContext",
    "parse_scale",
    "validate_zoom",
    "to_real_length",
    "to_real_area",
    "to_real_coordinates",
    "scale_from_calibration",
    # Unit Converter
    "UNIT_SYSTEMS",
    "convert_length",
    "convert_area",
    "convert_volume",
    "format_imperial_length",
    "format_length",
    "format_area",
    "format_volume",
]
