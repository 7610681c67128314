"""Noise configuration for GNSS error terms."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping


def _default_system_error_ratio() -> dict[str, float]:
    return {"G": 1.0, "R": 1.5, "E": 1.0, "C": 1.0, "J": 1.0}


@dataclass(frozen=True)
class GnssErrorParameter:
    """Measurement noise factors shared by the GNSS error terms.

    ``doppler_error_factor`` is the Doppler standard deviation in m/s for a
    system whose ratio is 1.0; ``system_error_ratio`` scales it per satellite
    system, keyed by the system letter of the PRN.
    """

    doppler_error_factor: float = 0.5
    system_error_ratio: Mapping[str, float] = field(default_factory=_default_system_error_ratio)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "GnssErrorParameter":
        """Build a parameter set from a plain mapping, e.g. a parsed config file."""

        known = {item.name for item in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown GnssErrorParameter keys: {sorted(unknown)}")
        kwargs: dict[str, Any] = {}
        if "doppler_error_factor" in values:
            kwargs["doppler_error_factor"] = float(values["doppler_error_factor"])
        if "system_error_ratio" in values:
            ratios = values["system_error_ratio"]
            if not isinstance(ratios, Mapping):
                raise ValueError("system_error_ratio must be a mapping of system letter to ratio")
            kwargs["system_error_ratio"] = {str(key): float(value) for key, value in ratios.items()}
        return cls(**kwargs)
