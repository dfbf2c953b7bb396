"""Exception types for GovStream.

These are raised only by explicit loading APIs. The logging path itself
never raises to the caller.
"""

from __future__ import annotations


class GovStreamError(Exception):
    """Base class for all GovStream errors."""

    pass


class ProfileLoadError(GovStreamError):
    """Error loading a governance profile document."""

    pass


class ConfigError(GovStreamError):
    """Error loading or validating pipeline configuration."""

    pass


__all__ = [
    "GovStreamError",
    "ProfileLoadError",
    "ConfigError",
]
