"""Measurement weighting: covariance, information and its square root."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy import linalg

from gnss_factors.config import GnssErrorParameter
from gnss_factors.errors import DegenerateWeighting


@dataclass(frozen=True, eq=False)
class Weighting:
    """Weighting matrices derived once from a noise configuration.

    ``square_root_information`` is the upper Cholesky factor ``U`` of the
    information matrix, so ``U.T @ U == information``. Pre-multiplying a raw
    residual and its Jacobians by ``U`` turns the problem into an
    unit-weighted least-squares problem.
    """

    covariance: np.ndarray
    information: np.ndarray
    square_root_information: np.ndarray
    square_root_information_inverse: np.ndarray

    @property
    def dim(self) -> int:
        return int(self.covariance.shape[0])


def doppler_covariance(error_parameter: GnssErrorParameter, system: str) -> np.ndarray:
    """Return the (1, 1) Doppler covariance ``(factor * ratio[system])**2``."""

    factor = float(error_parameter.doppler_error_factor)
    if system not in error_parameter.system_error_ratio:
        raise DegenerateWeighting(f"No error ratio configured for satellite system '{system}'.")
    ratio = float(error_parameter.system_error_ratio[system])
    if not np.isfinite(factor) or factor <= 0.0:
        raise DegenerateWeighting(f"Doppler error factor must be positive, got {factor}.")
    if not np.isfinite(ratio) or ratio <= 0.0:
        raise DegenerateWeighting(f"Error ratio of system '{system}' must be positive, got {ratio}.")
    return np.array([[(factor * ratio) ** 2]], dtype=float)


def compute_weighting(covariance: np.ndarray) -> Weighting:
    """Derive information and square-root information from a covariance matrix."""

    covariance = np.atleast_2d(np.array(covariance, dtype=float))
    if covariance.ndim != 2 or covariance.shape[0] != covariance.shape[1]:
        raise DegenerateWeighting(f"Covariance must be square, got shape {covariance.shape}.")
    if not np.all(np.isfinite(covariance)):
        raise DegenerateWeighting("Covariance contains non-finite values.")
    if not np.allclose(covariance, covariance.T, rtol=1e-12, atol=0.0):
        raise DegenerateWeighting("Covariance must be symmetric.")
    try:
        # Factor the covariance first so that indefinite input is rejected
        # before it is inverted.
        linalg.cholesky(covariance, lower=True)
        information = np.linalg.inv(covariance)
        information = 0.5 * (information + information.T)
        square_root_information = linalg.cholesky(information, lower=False)
        square_root_information_inverse = linalg.solve_triangular(
            square_root_information, np.eye(covariance.shape[0]), lower=False
        )
    except np.linalg.LinAlgError as exc:
        raise DegenerateWeighting(f"Covariance is not positive definite: {exc}") from exc
    for array in (covariance, information, square_root_information, square_root_information_inverse):
        array.setflags(write=False)
    return Weighting(
        covariance=covariance,
        information=information,
        square_root_information=square_root_information,
        square_root_information_inverse=square_root_information_inverse,
    )
