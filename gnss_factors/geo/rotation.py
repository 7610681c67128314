"""Rotation algebra on Hamilton quaternions stored as (x, y, z, w)."""

from __future__ import annotations

import numpy as np


def skew_symmetric(vector: np.ndarray) -> np.ndarray:
    """Return the cross-product matrix ``[v]x`` so that ``[v]x @ u == v x u``."""

    x, y, z = np.asarray(vector, dtype=float)
    return np.array(
        [
            [0.0, -z, y],
            [z, 0.0, -x],
            [-y, x, 0.0],
        ],
        dtype=float,
    )


def quat_to_rotation_matrix(quat_xyzw: np.ndarray) -> np.ndarray:
    """Rotation matrix of a unit quaternion."""

    x, y, z, w = np.asarray(quat_xyzw, dtype=float)
    return np.array(
        [
            [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - z * w), 2.0 * (x * z + y * w)],
            [2.0 * (x * y + z * w), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - x * w)],
            [2.0 * (x * z - y * w), 2.0 * (y * z + x * w), 1.0 - 2.0 * (x * x + y * y)],
        ],
        dtype=float,
    )


def quat_conjugate(quat_xyzw: np.ndarray) -> np.ndarray:
    x, y, z, w = np.asarray(quat_xyzw, dtype=float)
    return np.array([-x, -y, -z, w], dtype=float)


def quat_oplus(quat_xyzw: np.ndarray) -> np.ndarray:
    """Right-multiplication matrix: ``quat_oplus(q) @ p == p * q``."""

    x, y, z, w = np.asarray(quat_xyzw, dtype=float)
    return np.array(
        [
            [w, z, -y, x],
            [-z, w, x, y],
            [y, -x, w, z],
            [-x, -y, -z, w],
        ],
        dtype=float,
    )


def quat_multiply(lhs_xyzw: np.ndarray, rhs_xyzw: np.ndarray) -> np.ndarray:
    """Hamilton product ``lhs * rhs``."""

    return quat_oplus(rhs_xyzw) @ np.asarray(lhs_xyzw, dtype=float)


def delta_quat(delta_theta: np.ndarray) -> np.ndarray:
    """Unit quaternion of the rotation vector ``delta_theta`` (rad)."""

    delta_theta = np.asarray(delta_theta, dtype=float)
    angle = float(np.linalg.norm(delta_theta))
    half = 0.5 * angle
    if angle < 1e-12:
        # sin(a/2)/a -> 1/2 as a -> 0
        vec = 0.5 * delta_theta
        return np.append(vec, 1.0) / np.sqrt(1.0 + vec @ vec)
    return np.append(np.sin(half) / angle * delta_theta, np.cos(half))
