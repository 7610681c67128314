"""GNSS constants and geometry shared by the error terms."""

from __future__ import annotations

import numpy as np

CLIGHT = 299_792_458.0  # Speed of light, m/s.
OMGE = 7.2921151467e-5  # Earth rotation rate (WGS-84), rad/s.


def line_of_sight(sat_position: np.ndarray, receiver_position: np.ndarray) -> tuple[np.ndarray, float]:
    """Return the receiver-to-satellite unit vector and the range."""

    delta = np.asarray(sat_position, dtype=float) - np.asarray(receiver_position, dtype=float)
    rho = float(np.linalg.norm(delta))
    if rho <= 0.0:
        raise ValueError("Receiver coincides with the satellite; line of sight is undefined.")
    return delta / rho, rho


def earth_rotation_range_rate(
    sat_position: np.ndarray,
    sat_velocity: np.ndarray,
    receiver_position: np.ndarray,
    receiver_velocity: np.ndarray,
) -> float:
    """Range-rate correction for Earth rotation during signal propagation (m/s)."""

    return float(
        OMGE
        / CLIGHT
        * (
            sat_velocity[1] * receiver_position[0]
            + sat_position[1] * receiver_velocity[0]
            - sat_velocity[0] * receiver_position[1]
            - sat_position[0] * receiver_velocity[1]
        )
    )


def range_rate(
    sat_position: np.ndarray,
    sat_velocity: np.ndarray,
    receiver_position: np.ndarray,
    receiver_velocity: np.ndarray,
) -> float:
    """Predicted range rate including the Earth rotation correction (m/s)."""

    los, _ = line_of_sight(sat_position, receiver_position)
    relative_velocity = np.asarray(sat_velocity, dtype=float) - np.asarray(receiver_velocity, dtype=float)
    return float(relative_velocity @ los) + earth_rotation_range_rate(
        sat_position, sat_velocity, receiver_position, receiver_velocity
    )
