"""GNSS error terms."""

from gnss_factors.gnss.builder import build_doppler_errors
from gnss_factors.gnss.common import (
    CLIGHT,
    OMGE,
    earth_rotation_range_rate,
    line_of_sight,
    range_rate,
)
from gnss_factors.gnss.doppler_error import DopplerError

__all__ = [
    "CLIGHT",
    "DopplerError",
    "OMGE",
    "build_doppler_errors",
    "earth_rotation_range_rate",
    "line_of_sight",
    "range_rate",
]
