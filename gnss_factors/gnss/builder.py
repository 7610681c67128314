"""Helpers that turn a measurement epoch into residual blocks."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from gnss_factors.config import GnssErrorParameter
from gnss_factors.geo.coordinate import EnuFrame, LocalCoordinate
from gnss_factors.gnss.doppler_error import DopplerError
from gnss_factors.models import GnssMeasurement
from gnss_factors.utils.logging import get_logger

logger = get_logger(__name__)


def build_doppler_errors(
    measurement: GnssMeasurement,
    error_parameter: GnssErrorParameter,
    parameter_block_sizes: Sequence[int],
    angular_velocity: np.ndarray | None = None,
    coordinate: LocalCoordinate | EnuFrame | None = None,
) -> list[DopplerError]:
    """Create one Doppler residual per observation that carries a Doppler value."""

    errors: list[DopplerError] = []
    skipped: list[str] = []
    for index in measurement.indices():
        if measurement.get_obs(index).doppler is None or index.prn not in measurement.satellites:
            skipped.append(index.prn)
            continue
        errors.append(
            DopplerError(
                measurement,
                index,
                error_parameter,
                parameter_block_sizes,
                angular_velocity=angular_velocity,
                coordinate=coordinate,
            )
        )
    if skipped:
        logger.debug("Skipped %d observations without Doppler or ephemeris: %s", len(skipped), skipped)
    return errors
