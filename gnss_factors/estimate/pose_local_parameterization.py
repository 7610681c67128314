"""Manifold helper for poses stored as translation plus quaternion.

Ambient layout is ``[tx, ty, tz, qx, qy, qz, qw]`` (7 values); the tangent
space is ``[dtx, dty, dtz, dthx, dthy, dthz]`` (6 values). Orientation
increments are applied on the left, in the world frame:

    t' = t + dt
    q' = dq(dtheta) * q
"""

from __future__ import annotations

import numpy as np

from gnss_factors.geo.rotation import delta_quat, quat_conjugate, quat_multiply, quat_oplus

GLOBAL_SIZE = 7
LOCAL_SIZE = 6


class PoseLocalParameterization:
    """Plus operator and Jacobians between ambient and minimal pose coordinates."""

    global_size = GLOBAL_SIZE
    local_size = LOCAL_SIZE

    @staticmethod
    def plus(x: np.ndarray, delta: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        delta = np.asarray(delta, dtype=float)
        out = np.empty(GLOBAL_SIZE, dtype=float)
        out[:3] = x[:3] + delta[:3]
        q = quat_multiply(delta_quat(delta[3:]), x[3:])
        out[3:] = q / np.linalg.norm(q)
        return out

    @staticmethod
    def plus_jacobian(x: np.ndarray) -> np.ndarray:
        """Jacobian of ``plus(x, delta)`` w.r.t. ``delta`` at zero, shape (7, 6)."""

        x = np.asarray(x, dtype=float)
        jac = np.zeros((GLOBAL_SIZE, LOCAL_SIZE), dtype=float)
        jac[:3, :3] = np.eye(3)
        half_identity = np.zeros((4, 3), dtype=float)
        half_identity[:3, :3] = 0.5 * np.eye(3)
        jac[3:, 3:] = quat_oplus(x[3:]) @ half_identity
        return jac

    @staticmethod
    def lift_jacobian(x: np.ndarray) -> np.ndarray:
        """Pseudo-inverse of :meth:`plus_jacobian`, shape (6, 7).

        Satisfies ``lift_jacobian(x) @ plus_jacobian(x) == I`` for a unit
        quaternion, so a minimal Jacobian ``J_min`` lifts to the ambient
        ``J_min @ lift_jacobian(x)``.
        """

        x = np.asarray(x, dtype=float)
        lift = np.zeros((LOCAL_SIZE, GLOBAL_SIZE), dtype=float)
        lift[:3, :3] = np.eye(3)
        double_identity = np.zeros((3, 4), dtype=float)
        double_identity[:3, :3] = 2.0 * np.eye(3)
        lift[3:, 3:] = double_identity @ quat_oplus(quat_conjugate(x[3:]))
        return lift
