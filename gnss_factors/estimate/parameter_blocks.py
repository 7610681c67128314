"""Parameter block layouts accepted by the GNSS error terms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from gnss_factors.errors import InvalidParameterSignature
from gnss_factors.models import ParameterGroup

_GROUP_BY_SIZES: dict[tuple[int, ...], ParameterGroup] = {
    (3, 3, 1): ParameterGroup.DIRECT,
    (7, 9, 3, 1): ParameterGroup.PLATFORM,
}

_MINIMAL_SIZES: dict[ParameterGroup, tuple[int, ...]] = {
    ParameterGroup.DIRECT: (3, 3, 1),
    ParameterGroup.PLATFORM: (6, 9, 3, 1),
}


def resolve_parameter_group(sizes: Sequence[int]) -> ParameterGroup:
    """Map the declared block sizes to a supported layout."""

    key = tuple(int(size) for size in sizes)
    group = _GROUP_BY_SIZES.get(key)
    if group is None:
        raise InvalidParameterSignature(key)
    return group


def ambient_block_sizes(group: ParameterGroup) -> tuple[int, ...]:
    for sizes, candidate in _GROUP_BY_SIZES.items():
        if candidate == group:
            return sizes
    raise ValueError(f"Unknown parameter group: {group!r}")


def minimal_block_sizes(group: ParameterGroup) -> tuple[int, ...]:
    return _MINIMAL_SIZES[group]


def _block(parameters: Sequence[np.ndarray], idx: int, size: int) -> np.ndarray:
    block = np.asarray(parameters[idx], dtype=float).reshape(-1)
    if block.shape[0] != size:
        raise ValueError(f"Parameter block {idx} has {block.shape[0]} values, expected {size}.")
    return block


@dataclass(frozen=True, eq=False)
class DirectBlocks:
    """Receiver states estimated directly in ECEF."""

    position_ecef: np.ndarray
    velocity_ecef: np.ndarray
    clock_frequency: float

    @classmethod
    def from_parameters(cls, parameters: Sequence[np.ndarray]) -> "DirectBlocks":
        if len(parameters) != 3:
            raise ValueError(f"Expected 3 parameter blocks, got {len(parameters)}.")
        return cls(
            position_ecef=_block(parameters, 0, 3),
            velocity_ecef=_block(parameters, 1, 3),
            clock_frequency=float(_block(parameters, 2, 1)[0]),
        )


@dataclass(frozen=True, eq=False)
class PlatformBlocks:
    """Platform states in the local ENU frame plus the receiver lever arm."""

    pose: np.ndarray  # [t_WS(3), q_WS(x, y, z, w)]
    speed_and_bias: np.ndarray  # [v_WS(3), bias(6)]
    lever_arm: np.ndarray  # t_SR_S, platform body axes
    clock_frequency: float

    @property
    def position(self) -> np.ndarray:
        return self.pose[:3]

    @property
    def orientation(self) -> np.ndarray:
        return self.pose[3:]

    @property
    def velocity(self) -> np.ndarray:
        return self.speed_and_bias[:3]

    @classmethod
    def from_parameters(cls, parameters: Sequence[np.ndarray]) -> "PlatformBlocks":
        if len(parameters) != 4:
            raise ValueError(f"Expected 4 parameter blocks, got {len(parameters)}.")
        return cls(
            pose=_block(parameters, 0, 7),
            speed_and_bias=_block(parameters, 1, 9),
            lever_arm=_block(parameters, 2, 3),
            clock_frequency=float(_block(parameters, 3, 1)[0]),
        )


DecodedBlocks = Union[DirectBlocks, PlatformBlocks]


def decode_parameters(group: ParameterGroup, parameters: Sequence[np.ndarray]) -> DecodedBlocks:
    """Decode the raw solver blocks into the typed view of ``group``."""

    if group == ParameterGroup.DIRECT:
        return DirectBlocks.from_parameters(parameters)
    return PlatformBlocks.from_parameters(parameters)
