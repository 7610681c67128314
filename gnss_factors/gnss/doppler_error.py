"""Doppler residual block for GNSS and GNSS/INS least-squares estimation.

Two parameter layouts are supported:

* ``(3, 3, 1)``: receiver ECEF position, receiver ECEF velocity and clock
  frequency.
* ``(7, 9, 3, 1)``: platform pose ``[t_WS, q_WS]`` and speed-and-bias
  ``[v_WS, ...]`` in the local ENU frame, receiver lever arm ``t_SR_S`` in
  platform body axes, and clock frequency.

The residual is ``U * (doppler_observed - doppler_estimate)``, with ``U`` the
square-root information. Position sensitivity of the Earth rotation term and
of the line of sight is not linearized; position Jacobians are zero.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from gnss_factors.config import GnssErrorParameter
from gnss_factors.errors import MissingCoordinateReference
from gnss_factors.estimate.parameter_blocks import (
    DirectBlocks,
    PlatformBlocks,
    ambient_block_sizes,
    decode_parameters,
    minimal_block_sizes,
    resolve_parameter_group,
)
from gnss_factors.estimate.pose_local_parameterization import PoseLocalParameterization
from gnss_factors.estimate.weighting import Weighting, compute_weighting, doppler_covariance
from gnss_factors.geo.coordinate import EnuFrame, GeoType, LocalCoordinate
from gnss_factors.geo.rotation import quat_to_rotation_matrix, skew_symmetric
from gnss_factors.gnss.common import line_of_sight, range_rate
from gnss_factors.models import (
    ErrorInterface,
    Evaluation,
    GnssMeasurement,
    GnssMeasurementIndex,
    Observation,
    ParameterGroup,
    Satellite,
)
from gnss_factors.utils.logging import get_logger

logger = get_logger(__name__)

RESIDUAL_DIM = 1


def _requested_blocks(request: bool | Sequence[bool] | None, num_blocks: int) -> list[bool]:
    if request is None or isinstance(request, (bool, np.bool_)):
        return [bool(request)] * num_blocks
    flags = [bool(flag) for flag in request]
    if len(flags) != num_blocks:
        raise ValueError(f"Expected {num_blocks} Jacobian request flags, got {len(flags)}.")
    return flags


class DopplerError(ErrorInterface):
    """Weighted Doppler residual of one satellite with analytic Jacobians."""

    def __init__(
        self,
        measurement: GnssMeasurement,
        index: GnssMeasurementIndex,
        error_parameter: GnssErrorParameter,
        parameter_block_sizes: Sequence[int],
        angular_velocity: np.ndarray | None = None,
        coordinate: LocalCoordinate | EnuFrame | None = None,
    ) -> None:
        self._group = resolve_parameter_group(parameter_block_sizes)
        self._timestamp = float(measurement.timestamp)
        self._satellite: Satellite = measurement.get_sat(index)
        self._observation: Observation = measurement.get_obs(index)
        if self._observation.doppler is None:
            raise ValueError(f"Observation {index} carries no Doppler measurement.")
        self._sat_position = np.array(self._satellite.sat_position, dtype=float)
        self._sat_velocity = np.array(self._satellite.sat_velocity, dtype=float)
        if angular_velocity is None:
            self._angular_velocity = np.zeros(3, dtype=float)
        else:
            self._angular_velocity = np.array(angular_velocity, dtype=float).reshape(3)
        self._omega_skew = skew_symmetric(self._angular_velocity)
        for array in (self._sat_position, self._sat_velocity, self._angular_velocity, self._omega_skew):
            array.setflags(write=False)
        self._coordinate = coordinate
        self._error_parameter: GnssErrorParameter
        self._weighting: Weighting
        self.set_information(error_parameter)
        logger.debug(
            "DopplerError for %s at t=%.3f, parameter group %d, sigma %.4f m/s",
            self._satellite.prn,
            self._timestamp,
            int(self._group),
            float(np.sqrt(self._weighting.covariance[0, 0])),
        )

    def set_information(self, error_parameter: GnssErrorParameter) -> None:
        """Recompute the weighting from a (new) noise configuration."""

        covariance = doppler_covariance(error_parameter, self._satellite.system)
        self._weighting = compute_weighting(covariance)
        self._error_parameter = error_parameter

    def set_coordinate(self, coordinate: LocalCoordinate | EnuFrame | None) -> None:
        self._coordinate = coordinate

    @property
    def residual_dim(self) -> int:
        return RESIDUAL_DIM

    @property
    def parameter_group(self) -> ParameterGroup:
        return self._group

    @property
    def parameter_block_sizes(self) -> tuple[int, ...]:
        return ambient_block_sizes(self._group)

    @property
    def minimal_block_sizes(self) -> tuple[int, ...]:
        return minimal_block_sizes(self._group)

    @property
    def satellite(self) -> Satellite:
        return self._satellite

    @property
    def observation(self) -> Observation:
        return self._observation

    @property
    def timestamp(self) -> float:
        return self._timestamp

    @property
    def angular_velocity(self) -> np.ndarray:
        return self._angular_velocity

    @property
    def error_parameter(self) -> GnssErrorParameter:
        return self._error_parameter

    @property
    def weighting(self) -> Weighting:
        return self._weighting

    @property
    def covariance(self) -> np.ndarray:
        return self._weighting.covariance

    @property
    def information(self) -> np.ndarray:
        return self._weighting.information

    @property
    def square_root_information(self) -> np.ndarray:
        return self._weighting.square_root_information

    def type_info(self) -> str:
        return "DopplerError"

    def _enu_frame(self) -> EnuFrame:
        if self._coordinate is None:
            raise MissingCoordinateReference("Coordinate not set for local-frame Doppler evaluation.")
        return self._coordinate.originated()

    def evaluate_with_minimal_jacobians(
        self,
        parameters: Sequence[np.ndarray],
        jacobians: bool | Sequence[bool] = False,
        jacobians_minimal: bool | Sequence[bool] = False,
    ) -> Evaluation:
        """Evaluate the weighted residual and the requested Jacobians.

        Args:
            parameters: Current value of every parameter block, in the order of
                :attr:`parameter_block_sizes`.
            jacobians: ``True`` for all ambient Jacobians, or one flag per block.
            jacobians_minimal: ``True`` for all minimal Jacobians, or one flag
                per block.

        Returns:
            The weighted residual of shape ``(1,)`` and, per block, a ``(1, n)``
            Jacobian or ``None`` where it was not requested.

        Raises:
            MissingCoordinateReference: local-frame layout evaluated without a
                coordinate whose origin is set.
        """

        num_blocks = len(self.parameter_block_sizes)
        want_ambient = _requested_blocks(jacobians, num_blocks)
        want_minimal = _requested_blocks(jacobians_minimal, num_blocks)
        blocks = decode_parameters(self._group, parameters)
        sqrt_info = self._weighting.square_root_information

        frame: EnuFrame | None = None
        rotation = lever_arm_w = None
        if isinstance(blocks, PlatformBlocks):
            frame = self._enu_frame()
            rotation = quat_to_rotation_matrix(blocks.orientation)
            lever_arm_w = rotation @ blocks.lever_arm
            t_WR_W = blocks.position + lever_arm_w
            v_WR_W = blocks.velocity + self._omega_skew @ lever_arm_w
            t_WR_ecef = frame.convert(t_WR_W, GeoType.ENU, GeoType.ECEF)
            v_WR_ecef = frame.rotate(v_WR_W, GeoType.ENU, GeoType.ECEF)
        else:
            t_WR_ecef = blocks.position_ecef
            v_WR_ecef = blocks.velocity_ecef

        _, rho = line_of_sight(self._sat_position, t_WR_ecef)
        predicted = range_rate(self._sat_position, self._sat_velocity, t_WR_ecef, v_WR_ecef)
        doppler_estimate = predicted + blocks.clock_frequency - self._satellite.sat_frequency
        error = np.array([float(self._observation.doppler) - doppler_estimate], dtype=float)
        residual = sqrt_info @ error

        ambient: list[np.ndarray | None] = [None] * num_blocks
        minimal: list[np.ndarray | None] = [None] * num_blocks
        if not any(want_ambient) and not any(want_minimal):
            return Evaluation(residual=residual, jacobians=ambient, jacobians_minimal=minimal)

        J_v_ecef = -((t_WR_ecef - self._sat_position) / rho).reshape(1, 3)
        J_freq = -np.eye(1)
        if isinstance(blocks, DirectBlocks):
            rows = [np.zeros((1, 3)), J_v_ecef, J_freq]
        else:
            R_ecef_enu = frame.rotation_matrix(GeoType.ENU, GeoType.ECEF)
            J_v_W = J_v_ecef @ R_ecef_enu
            J_q_WS = J_v_W @ self._omega_skew @ -skew_symmetric(lever_arm_w)
            J_T_WS = np.hstack([np.zeros((1, 3)), J_q_WS])
            J_speed_and_bias = np.hstack([J_v_W, np.zeros((1, 6))])
            J_t_SR_S = J_v_W @ self._omega_skew @ rotation
            rows = [J_T_WS, J_speed_and_bias, J_t_SR_S, J_freq]

        for idx, row in enumerate(rows):
            if not (want_ambient[idx] or want_minimal[idx]):
                continue
            weighted = sqrt_info @ row
            if want_minimal[idx]:
                minimal[idx] = weighted.copy()
            if want_ambient[idx]:
                if self._group == ParameterGroup.PLATFORM and idx == 0:
                    ambient[idx] = weighted @ PoseLocalParameterization.lift_jacobian(blocks.pose)
                else:
                    ambient[idx] = weighted
        return Evaluation(residual=residual, jacobians=ambient, jacobians_minimal=minimal)
