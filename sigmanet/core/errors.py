"""Exception taxonomy for SigmaNet."""

from __future__ import annotations


class DimensionError(ValueError):
    """Raised when matrix shapes do not support the requested operation."""


class TopologyError(ValueError):
    """Raised when a network is configured with an invalid layer layout."""


class ModelLoadError(OSError):
    """Raised when a persisted model is missing, truncated or inconsistent."""


__all__ = ["DimensionError", "TopologyError", "ModelLoadError"]
