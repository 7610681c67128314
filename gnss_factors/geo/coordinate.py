"""Conversions between the Earth-fixed frame and a local tangent (ENU) frame."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from gnss_factors.errors import MissingCoordinateReference
from gnss_factors.utils.logging import get_logger

logger = get_logger(__name__)

WGS84_A_M = 6_378_137.0
WGS84_F = 1.0 / 298.257223563
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)


class GeoType(Enum):
    """Coordinate frames understood by the transform."""

    ECEF = "ecef"
    ENU = "enu"
    LLA = "lla"  # Latitude and longitude in radians, height in meters.


def lla_to_ecef(lla: np.ndarray) -> np.ndarray:
    """Convert geodetic (lat rad, lon rad, height m) to ECEF meters."""

    lat, lon, height = np.asarray(lla, dtype=float)
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * sin_lat**2)
    return np.array(
        [
            (n + height) * cos_lat * np.cos(lon),
            (n + height) * cos_lat * np.sin(lon),
            (n * (1.0 - WGS84_E2) + height) * sin_lat,
        ],
        dtype=float,
    )


def ecef_to_lla(ecef: np.ndarray, tol_m: float = 1e-4, max_iter: int = 10) -> np.ndarray:
    """Convert ECEF meters to geodetic (lat rad, lon rad, height m)."""

    x, y, z = np.asarray(ecef, dtype=float)
    r2 = x * x + y * y
    if r2 == 0.0 and z == 0.0:
        return np.array([0.0, 0.0, -WGS84_A_M], dtype=float)
    # Fixed-point on the ellipsoid offset of z.
    dz = WGS84_E2 * z
    for _ in range(max_iter):
        zk = z + dz
        sin_lat = zk / np.sqrt(r2 + zk * zk)
        n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * sin_lat**2)
        dz_next = n * WGS84_E2 * sin_lat
        if abs(dz_next - dz) < tol_m:
            dz = dz_next
            break
        dz = dz_next
    zk = z + dz
    lat = np.arctan2(zk, np.sqrt(r2)) if r2 > 0.0 else (np.pi / 2.0 if z > 0.0 else -np.pi / 2.0)
    lon = np.arctan2(y, x) if r2 > 0.0 else 0.0
    sin_lat = np.sin(lat)
    n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * sin_lat**2)
    return np.array([lat, lon, np.sqrt(r2 + zk * zk) - n], dtype=float)


def enu_rotation(lat_rad: float, lon_rad: float) -> np.ndarray:
    """Rotation from ECEF to ENU axes at the given geodetic location."""

    sin_lat, cos_lat = np.sin(lat_rad), np.cos(lat_rad)
    sin_lon, cos_lon = np.sin(lon_rad), np.cos(lon_rad)
    return np.array(
        [
            [-sin_lon, cos_lon, 0.0],
            [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
            [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
        ],
        dtype=float,
    )


@dataclass(frozen=True, eq=False)
class EnuFrame:
    """Read-only handle of an ENU frame whose origin is established.

    Instances are immutable, so one handle may be shared by any number of
    residual evaluations running concurrently.
    """

    origin_ecef: np.ndarray
    origin_lla: np.ndarray
    R_ENU_ECEF: np.ndarray

    @classmethod
    def from_ecef(cls, origin_ecef: np.ndarray) -> "EnuFrame":
        origin_ecef = np.array(origin_ecef, dtype=float)
        origin_lla = ecef_to_lla(origin_ecef)
        rotation = enu_rotation(origin_lla[0], origin_lla[1])
        for array in (origin_ecef, origin_lla, rotation):
            array.setflags(write=False)
        return cls(origin_ecef=origin_ecef, origin_lla=origin_lla, R_ENU_ECEF=rotation)

    def is_origin_set(self) -> bool:
        return True

    def originated(self) -> "EnuFrame":
        return self

    def convert(self, point: np.ndarray, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        """Convert a point between any two of ECEF, ENU and LLA."""

        point = np.asarray(point, dtype=float)
        if from_type == to_type:
            return point.copy()
        if from_type == GeoType.ECEF:
            ecef = point
        elif from_type == GeoType.ENU:
            ecef = self.origin_ecef + self.R_ENU_ECEF.T @ point
        else:
            ecef = lla_to_ecef(point)
        if to_type == GeoType.ECEF:
            return ecef
        if to_type == GeoType.ENU:
            return self.R_ENU_ECEF @ (ecef - self.origin_ecef)
        return ecef_to_lla(ecef)

    def rotation_matrix(self, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        """Rotation matrix taking vectors from ``from_type`` axes to ``to_type`` axes."""

        if GeoType.LLA in (from_type, to_type):
            raise ValueError("Vectors cannot be rotated to or from LLA coordinates.")
        if from_type == to_type:
            return np.eye(3)
        if from_type == GeoType.ECEF:
            return self.R_ENU_ECEF.copy()
        return self.R_ENU_ECEF.T.copy()

    def rotate(self, vector: np.ndarray, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        """Rotate a free vector (e.g. a velocity) between ECEF and ENU axes."""

        return self.rotation_matrix(from_type, to_type) @ np.asarray(vector, dtype=float)


class LocalCoordinate:
    """Owner of the local frame origin shared by the residuals of one solve.

    The origin is set once during setup; afterwards evaluations only read the
    immutable :class:`EnuFrame` returned by :meth:`originated`.
    """

    def __init__(self, origin: np.ndarray | None = None, geo_type: GeoType = GeoType.ECEF) -> None:
        self._frame: EnuFrame | None = None
        if origin is not None:
            self.set_origin(origin, geo_type)

    def set_origin(self, origin: np.ndarray, geo_type: GeoType = GeoType.ECEF) -> EnuFrame:
        if self._frame is not None:
            raise RuntimeError("Local coordinate origin is already set; build a new EnuFrame to re-base.")
        if geo_type == GeoType.ENU:
            raise ValueError("The local origin must be given in ECEF or LLA coordinates.")
        origin_ecef = lla_to_ecef(origin) if geo_type == GeoType.LLA else np.asarray(origin, dtype=float)
        self._frame = EnuFrame.from_ecef(origin_ecef)
        lat, lon, height = self._frame.origin_lla
        logger.info(
            "Local ENU origin set at lat %.8f deg, lon %.8f deg, h %.3f m",
            np.rad2deg(lat),
            np.rad2deg(lon),
            height,
        )
        return self._frame

    def is_origin_set(self) -> bool:
        return self._frame is not None

    def originated(self) -> EnuFrame:
        """Return the frame handle, or raise if the origin has not been set."""

        if self._frame is None:
            raise MissingCoordinateReference("Local coordinate origin is not set.")
        return self._frame

    def convert(self, point: np.ndarray, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        return self.originated().convert(point, from_type, to_type)

    def rotate(self, vector: np.ndarray, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        return self.originated().rotate(vector, from_type, to_type)

    def rotation_matrix(self, from_type: GeoType, to_type: GeoType) -> np.ndarray:
        return self.originated().rotation_matrix(from_type, to_type)
