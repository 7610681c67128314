"""Shared pytest fixtures.

Measurement epochs are built by hand so every test controls the exact
satellite geometry it checks against.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from gnss_factors.config import GnssErrorParameter
from gnss_factors.models import GnssMeasurement, GnssMeasurementIndex, Observation, Satellite


@pytest.fixture
def error_parameter() -> GnssErrorParameter:
    return GnssErrorParameter(doppler_error_factor=0.5, system_error_ratio={"G": 1.0, "R": 2.0, "E": 1.2})


@pytest.fixture
def make_epoch() -> Callable[..., tuple[GnssMeasurement, GnssMeasurementIndex]]:
    def _make_epoch(
        sat_position: np.ndarray,
        sat_velocity: np.ndarray,
        doppler: float | None,
        sat_frequency: float = 0.0,
        prn: str = "G05",
        timestamp: float = 1_700_000_000.0,
    ) -> tuple[GnssMeasurement, GnssMeasurementIndex]:
        index = GnssMeasurementIndex(prn=prn, code_type="L1C")
        satellite = Satellite(
            prn=prn,
            sat_position=np.asarray(sat_position, dtype=float),
            sat_velocity=np.asarray(sat_velocity, dtype=float),
            sat_frequency=sat_frequency,
        )
        measurement = GnssMeasurement(
            timestamp=timestamp,
            satellites={prn: satellite},
            observations={index: Observation(doppler=doppler, code_type="L1C")},
        )
        return measurement, index

    return _make_epoch
