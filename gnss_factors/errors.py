"""Error kinds raised by residual construction and evaluation.

All of them signal a configuration or programming defect rather than a
transient fault, so none is retried inside the library.
"""

from __future__ import annotations


class GnssFactorError(Exception):
    """Base class for residual errors."""


class InvalidParameterSignature(GnssFactorError, ValueError):
    """Parameter block count or sizes match no supported layout."""

    def __init__(self, sizes: tuple[int, ...]) -> None:
        super().__init__(f"Unsupported parameter block sizes {sizes}; expected (3, 3, 1) or (7, 9, 3, 1).")
        self.sizes = sizes


class DegenerateWeighting(GnssFactorError, ValueError):
    """Noise configuration does not yield a positive-definite covariance."""


class MissingCoordinateReference(GnssFactorError, RuntimeError):
    """Local-frame evaluation requested before the coordinate origin was set."""
