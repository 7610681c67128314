import numpy as np

from gnss_factors.estimate.pose_local_parameterization import PoseLocalParameterization
from gnss_factors.geo.rotation import quat_to_rotation_matrix, skew_symmetric


def _random_pose(rng: np.random.Generator) -> np.ndarray:
    q = rng.normal(size=4)
    return np.concatenate([rng.normal(scale=10.0, size=3), q / np.linalg.norm(q)])


def test_lift_is_left_inverse_of_plus_jacobian() -> None:
    rng = np.random.default_rng(3)
    for _ in range(20):
        pose = _random_pose(rng)
        lift = PoseLocalParameterization.lift_jacobian(pose)
        plus = PoseLocalParameterization.plus_jacobian(pose)
        assert lift.shape == (6, 7)
        assert plus.shape == (7, 6)
        assert np.allclose(lift @ plus, np.eye(6), atol=1e-12)


def test_plus_jacobian_matches_finite_difference() -> None:
    rng = np.random.default_rng(8)
    pose = _random_pose(rng)
    analytic = PoseLocalParameterization.plus_jacobian(pose)
    step = 1e-7
    numeric = np.zeros((7, 6))
    for idx in range(6):
        delta = np.zeros(6)
        delta[idx] = step
        forward = PoseLocalParameterization.plus(pose, delta)
        backward = PoseLocalParameterization.plus(pose, -delta)
        numeric[:, idx] = (forward - backward) / (2.0 * step)
    assert np.allclose(numeric, analytic, atol=1e-7)


def test_plus_rotates_in_world_frame() -> None:
    pose = np.array([0.0, 0.0, 0.0, 0.0, 0.0, np.sin(0.25), np.cos(0.25)])
    delta = np.array([1.0, -1.0, 0.5, 0.0, 0.0, 1e-6])
    updated = PoseLocalParameterization.plus(pose, delta)

    assert np.allclose(updated[:3], delta[:3])
    assert np.isclose(np.linalg.norm(updated[3:]), 1.0)
    rot = quat_to_rotation_matrix(pose[3:])
    expected = (np.eye(3) + skew_symmetric(delta[3:])) @ rot
    assert np.allclose(quat_to_rotation_matrix(updated[3:]), expected, atol=1e-10)
