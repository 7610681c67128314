"""Frames and rotations."""

from gnss_factors.geo.coordinate import (
    EnuFrame,
    GeoType,
    LocalCoordinate,
    ecef_to_lla,
    enu_rotation,
    lla_to_ecef,
)
from gnss_factors.geo.rotation import (
    delta_quat,
    quat_conjugate,
    quat_multiply,
    quat_oplus,
    quat_to_rotation_matrix,
    skew_symmetric,
)

__all__ = [
    "EnuFrame",
    "GeoType",
    "LocalCoordinate",
    "delta_quat",
    "ecef_to_lla",
    "enu_rotation",
    "lla_to_ecef",
    "quat_conjugate",
    "quat_multiply",
    "quat_oplus",
    "quat_to_rotation_matrix",
    "skew_symmetric",
]
