"""GNSS measurement error terms for least-squares sensor fusion."""

from gnss_factors.config import GnssErrorParameter
from gnss_factors.errors import (
    DegenerateWeighting,
    GnssFactorError,
    InvalidParameterSignature,
    MissingCoordinateReference,
)
from gnss_factors.gnss.doppler_error import DopplerError
from gnss_factors.models import (
    Evaluation,
    GnssMeasurement,
    GnssMeasurementIndex,
    Observation,
    ParameterGroup,
    Satellite,
)

__all__ = [
    "DegenerateWeighting",
    "DopplerError",
    "Evaluation",
    "GnssErrorParameter",
    "GnssFactorError",
    "GnssMeasurement",
    "GnssMeasurementIndex",
    "InvalidParameterSignature",
    "MissingCoordinateReference",
    "Observation",
    "ParameterGroup",
    "Satellite",
    "estimate",
    "geo",
    "gnss",
    "utils",
]
