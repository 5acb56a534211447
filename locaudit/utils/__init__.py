"""Utilities for the location audit.

NOTE: Keep this package lightweight.
Avoid importing heavy/optional dependencies (matplotlib, pandas, ...) at import time.
"""

from locaudit.utils.coerce import (
    coerce_flag,
    coerce_float,
    coerce_label,
    coerce_optional_float,
    normalize_point_id,
)
from locaudit.utils.geodesy import (
    EARTH_RADIUS_M,
    METERS_PER_DEGREE,
    VerticalDatum,
    geoid_separation_m,
    horizontal_distance_m,
    vertical_delta_m,
    vertical_error_m,
)
from locaudit.utils.logging import get_logger

__all__ = [
    "EARTH_RADIUS_M",
    "METERS_PER_DEGREE",
    "VerticalDatum",
    "coerce_flag",
    "coerce_float",
    "coerce_label",
    "coerce_optional_float",
    "geoid_separation_m",
    "get_logger",
    "horizontal_distance_m",
    "normalize_point_id",
    "vertical_delta_m",
    "vertical_error_m",
]
