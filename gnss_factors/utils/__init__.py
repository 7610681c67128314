"""Utilities shared across the GNSS factor library."""

from gnss_factors.utils.logging import get_logger

__all__ = ["get_logger"]
