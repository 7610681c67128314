"""Core data models and interfaces for GNSS error terms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Mapping, Sequence

import numpy as np


@dataclass(frozen=True, eq=False)
class Satellite:
    """Broadcast satellite state at the measurement epoch."""

    prn: str
    sat_position: np.ndarray  # ECEF, m
    sat_velocity: np.ndarray  # ECEF, m/s
    sat_frequency: float = 0.0  # Satellite clock frequency offset, m/s.

    @property
    def system(self) -> str:
        return self.prn[0].upper()


@dataclass(frozen=True)
class Observation:
    """Single-signal observation of one satellite."""

    doppler: float | None  # Range-rate form, m/s.
    code_type: str = ""
    snr: float | None = None


@dataclass(frozen=True)
class GnssMeasurementIndex:
    """Key of one observation inside a measurement epoch."""

    prn: str
    code_type: str = ""


@dataclass(frozen=True, eq=False)
class GnssMeasurement:
    """All satellite states and observations collected at one epoch."""

    timestamp: float
    satellites: Mapping[str, Satellite] = field(default_factory=dict)
    observations: Mapping[GnssMeasurementIndex, Observation] = field(default_factory=dict)

    def get_sat(self, index: GnssMeasurementIndex) -> Satellite:
        return self.satellites[index.prn]

    def get_obs(self, index: GnssMeasurementIndex) -> Observation:
        return self.observations[index]

    def indices(self) -> list[GnssMeasurementIndex]:
        return sorted(self.observations, key=lambda index: (index.prn, index.code_type))


class ParameterGroup(IntEnum):
    """Supported parameter block layouts."""

    DIRECT = 1  # ECEF position, ECEF velocity, clock frequency.
    PLATFORM = 2  # ENU pose, speed and bias, lever arm, clock frequency.


@dataclass(frozen=True, eq=False)
class Evaluation:
    """Weighted residual and the Jacobians requested by the caller."""

    residual: np.ndarray
    jacobians: list[np.ndarray | None]
    jacobians_minimal: list[np.ndarray | None]


class ErrorInterface(ABC):
    """Interface of residual blocks consumed by a nonlinear least-squares solver."""

    @property
    @abstractmethod
    def residual_dim(self) -> int:
        """Return the dimension of the residual vector."""

    @property
    @abstractmethod
    def parameter_block_sizes(self) -> tuple[int, ...]:
        """Return the ambient size of each parameter block."""

    @property
    @abstractmethod
    def minimal_block_sizes(self) -> tuple[int, ...]:
        """Return the tangent-space size of each parameter block."""

    @abstractmethod
    def evaluate_with_minimal_jacobians(
        self,
        parameters: Sequence[np.ndarray],
        jacobians: bool | Sequence[bool] = False,
        jacobians_minimal: bool | Sequence[bool] = False,
    ) -> Evaluation:
        """Evaluate the residual and the requested ambient and minimal Jacobians."""

    def evaluate(
        self,
        parameters: Sequence[np.ndarray],
        jacobians: bool | Sequence[bool] = False,
    ) -> Evaluation:
        """Evaluate the residual and the requested ambient Jacobians."""

        return self.evaluate_with_minimal_jacobians(parameters, jacobians, False)

    @abstractmethod
    def type_info(self) -> str:
        """Return a short name of the error term."""
