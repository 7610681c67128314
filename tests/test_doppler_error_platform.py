import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from gnss_factors.errors import MissingCoordinateReference
from gnss_factors.estimate.pose_local_parameterization import PoseLocalParameterization
from gnss_factors.geo.coordinate import GeoType, LocalCoordinate, lla_to_ecef
from gnss_factors.gnss.common import earth_rotation_range_rate
from gnss_factors.gnss.doppler_error import DopplerError
from gnss_factors.models import ParameterGroup

PLATFORM_SIZES = (7, 9, 3, 1)
ORIGIN_LLA = np.array([np.deg2rad(31.0256), np.deg2rad(121.4393), 20.0])
ANGULAR_VELOCITY = np.array([0.3, -0.2, 0.1])
LEVER_ARM = np.array([0.35, -0.12, 0.9])


def _scenario(make_epoch, error_parameter, angular_velocity=ANGULAR_VELOCITY):
    origin_ecef = lla_to_ecef(ORIGIN_LLA)
    sat_position = origin_ecef * (2.656e7 / np.linalg.norm(origin_ecef)) + np.array([1.0e6, -2.0e6, 5.0e5])
    sat_velocity = np.array([1200.0, -2500.0, 800.0])
    measurement, index = make_epoch(sat_position, sat_velocity, doppler=-310.0, sat_frequency=0.8)
    coordinate = LocalCoordinate(ORIGIN_LLA, GeoType.LLA)
    error = DopplerError(
        measurement,
        index,
        error_parameter,
        PLATFORM_SIZES,
        angular_velocity=angular_velocity,
        coordinate=coordinate,
    )
    rotation = Rotation.from_euler("zyx", [35.0, 4.0, -2.5], degrees=True)
    pose = np.concatenate([[12.0, -7.5, 1.8], rotation.as_quat()])
    speed_and_bias = np.concatenate([[4.0, 1.5, -0.2], np.full(6, 0.01)])
    params = [pose, speed_and_bias, LEVER_ARM.copy(), np.array([3.2])]
    return error, coordinate, params, measurement, index


def _finite_difference(error, params, block: int, dim: int, step: float, plus=None) -> np.ndarray:
    numeric = np.zeros((1, dim))
    for idx in range(dim):
        delta = np.zeros(dim)
        delta[idx] = step
        forward = [value.copy() for value in params]
        backward = [value.copy() for value in params]
        if plus is None:
            forward[block] = forward[block] + np.pad(delta, (0, forward[block].size - dim))
            backward[block] = backward[block] - np.pad(delta, (0, backward[block].size - dim))
        else:
            forward[block] = plus(forward[block], delta)
            backward[block] = plus(backward[block], -delta)
        numeric[0, idx] = (error.evaluate(forward).residual[0] - error.evaluate(backward).residual[0]) / (2 * step)
    return numeric


def test_construction_resolves_platform_group(make_epoch, error_parameter) -> None:
    error, *_ = _scenario(make_epoch, error_parameter)

    assert error.parameter_group is ParameterGroup.PLATFORM
    assert error.parameter_block_sizes == (7, 9, 3, 1)
    assert error.minimal_block_sizes == (6, 9, 3, 1)


def test_missing_coordinate_is_fatal(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    error.set_coordinate(None)
    with pytest.raises(MissingCoordinateReference):
        error.evaluate(params)

    error.set_coordinate(LocalCoordinate())
    with pytest.raises(MissingCoordinateReference):
        error.evaluate(params, jacobians=True)


def test_residual_matches_lever_arm_model(make_epoch, error_parameter) -> None:
    error, coordinate, params, *_ = _scenario(make_epoch, error_parameter)
    pose, speed_and_bias, lever_arm, clock = params

    rot = Rotation.from_quat(pose[3:]).as_matrix()
    frame = coordinate.originated()
    receiver_position = frame.origin_ecef + frame.R_ENU_ECEF.T @ (pose[:3] + rot @ lever_arm)
    receiver_velocity = frame.R_ENU_ECEF.T @ (speed_and_bias[:3] + np.cross(ANGULAR_VELOCITY, rot @ lever_arm))
    sat = error.satellite
    los = (sat.sat_position - receiver_position) / np.linalg.norm(sat.sat_position - receiver_position)
    predicted = (
        (sat.sat_velocity - receiver_velocity) @ los
        + earth_rotation_range_rate(sat.sat_position, sat.sat_velocity, receiver_position, receiver_velocity)
        + clock[0]
        - sat.sat_frequency
    )

    result = error.evaluate(params)
    assert result.residual[0] == pytest.approx(2.0 * (-310.0 - predicted), rel=1e-9)


def test_identity_platform_matches_direct_layout(make_epoch, error_parameter) -> None:
    error, coordinate, params, measurement, index = _scenario(make_epoch, error_parameter, angular_velocity=None)
    params[0][3:] = [0.0, 0.0, 0.0, 1.0]
    params[2] = np.zeros(3)
    frame = coordinate.originated()
    direct = DopplerError(measurement, index, error.error_parameter, (3, 3, 1))
    direct_params = [
        frame.convert(params[0][:3], GeoType.ENU, GeoType.ECEF),
        frame.rotate(params[1][:3], GeoType.ENU, GeoType.ECEF),
        params[3],
    ]

    platform_result = error.evaluate(params, jacobians=True)
    direct_result = direct.evaluate(direct_params, jacobians=True)

    assert platform_result.residual[0] == pytest.approx(direct_result.residual[0], rel=1e-12)
    assert np.allclose(
        platform_result.jacobians[1][:, :3],
        direct_result.jacobians[1] @ frame.rotation_matrix(GeoType.ENU, GeoType.ECEF),
        atol=1e-12,
    )
    assert np.allclose(platform_result.jacobians[0], 0.0)
    assert np.allclose(platform_result.jacobians[2], 0.0)


def test_minimal_pose_jacobian_is_consistent_with_ambient(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    result = error.evaluate_with_minimal_jacobians(params, jacobians=True, jacobians_minimal=True)

    ambient = result.jacobians[0]
    minimal = result.jacobians_minimal[0]
    assert ambient.shape == (1, 7)
    assert minimal.shape == (1, 6)
    assert np.array_equal(minimal[:, :3], np.zeros((1, 3)))
    assert np.allclose(ambient @ PoseLocalParameterization.plus_jacobian(params[0]), minimal, atol=1e-12)
    assert np.allclose(minimal @ PoseLocalParameterization.lift_jacobian(params[0]), ambient, atol=1e-12)
    for ambient_block, minimal_block in zip(result.jacobians[1:], result.jacobians_minimal[1:]):
        assert np.array_equal(ambient_block, minimal_block)


def test_platform_jacobian_shapes_and_clock(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    result = error.evaluate(params, jacobians=True)

    assert [jac.shape for jac in result.jacobians] == [(1, 7), (1, 9), (1, 3), (1, 1)]
    assert np.array_equal(result.jacobians[1][:, 3:], np.zeros((1, 6)))
    assert np.array_equal(result.jacobians[3], -error.square_root_information)
    assert result.jacobians_minimal == [None, None, None, None]


def test_velocity_jacobian_matches_finite_difference(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    analytic = error.evaluate(params, jacobians=True).jacobians[1][:, :3]
    numeric = _finite_difference(error, params, block=1, dim=3, step=1e-3)

    assert np.allclose(numeric, analytic, atol=1e-4)


def test_lever_arm_jacobian_matches_velocity_coupling(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    analytic = error.evaluate(params, jacobians=True).jacobians[2]
    numeric = _finite_difference(error, params, block=2, dim=3, step=1e-4)

    # The numeric derivative also sees the lever arm's effect on the line of
    # sight, which the analytic model leaves out.
    assert np.linalg.norm(analytic) > 0.1
    assert np.allclose(numeric, analytic, atol=2e-3)


def test_orientation_jacobian_matches_finite_difference(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter)

    analytic = error.evaluate_with_minimal_jacobians(params, jacobians_minimal=True).jacobians_minimal[0]
    numeric = _finite_difference(
        error, params, block=0, dim=6, step=1e-6, plus=PoseLocalParameterization.plus
    )

    assert np.linalg.norm(analytic[:, 3:]) > 0.1
    assert np.allclose(numeric[:, 3:], analytic[:, 3:], atol=2e-3)


def test_zero_angular_velocity_decouples_attitude_and_lever_arm(make_epoch, error_parameter) -> None:
    error, _, params, *_ = _scenario(make_epoch, error_parameter, angular_velocity=np.zeros(3))

    result = error.evaluate_with_minimal_jacobians(params, jacobians=True, jacobians_minimal=True)

    assert np.allclose(result.jacobians[0], 0.0)
    assert np.allclose(result.jacobians_minimal[0], 0.0)
    assert np.allclose(result.jacobians[2], 0.0)
    assert np.linalg.norm(result.jacobians[1]) > 0.0


def test_frame_handle_can_replace_coordinate(make_epoch, error_parameter) -> None:
    error, coordinate, params, *_ = _scenario(make_epoch, error_parameter)
    expected = error.evaluate(params).residual

    error.set_coordinate(coordinate.originated())

    assert np.array_equal(error.evaluate(params).residual, expected)

