"""Errors raised while reading Replicata settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a ``REPLICATA_*`` or database setting has an unusable value."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required setting such as ``DATABASE_URI`` is unset or blank."""
