"""Estimation helpers: weighting, parameter layouts and manifolds."""

from gnss_factors.estimate.parameter_blocks import (
    DirectBlocks,
    PlatformBlocks,
    decode_parameters,
    minimal_block_sizes,
    resolve_parameter_group,
)
from gnss_factors.estimate.pose_local_parameterization import PoseLocalParameterization
from gnss_factors.estimate.weighting import Weighting, compute_weighting, doppler_covariance

__all__ = [
    "DirectBlocks",
    "PlatformBlocks",
    "PoseLocalParameterization",
    "Weighting",
    "compute_weighting",
    "decode_parameters",
    "doppler_covariance",
    "minimal_block_sizes",
    "resolve_parameter_group",
]
