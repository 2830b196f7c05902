"""Exceptions raised by the scheduler package."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when scheduler configuration is malformed."""


class DataImportError(ValueError):
    """Raised when task, employee or workstation input data is malformed."""
