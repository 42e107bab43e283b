# Geometry kernel module

from .coordinate import (
    Coordinate,
    to_coordinates,
)

from .kernel import (
    PolygonValidation,
    Slope,
    ElevationProfile,
    MarkerCount,
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

__all__ = [
    # Coordinate
    "Coordinate",
    "to_coordinates",
    # Kernel
    "PolygonValidation",
    "Slope",
    "ElevationProfile",
    "MarkerCount",
    "distance_2d",
    "distance_3d",
    "segment_lengths",
    "polyline_length",
    "polyline_length_3d",
    "is_closed",
    "close_ring",
    "polygon_area",
    "polygon_perimeter",
    "validate_polygon",
    "slope_between",
    "segment_directions",
    "offset_polyline",
    "bounding_box",
    "elevation_profile",
    "offset_area",
    "count_markers",
]
