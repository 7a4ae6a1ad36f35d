"""Exceptions raised by chart_tools."""

from __future__ import annotations


class ChartToolsError(Exception):
    """Base class for every error raised by this package."""


class InvalidInputError(ChartToolsError, ValueError):
    """A longitude, speed, cusp list or option could not be used as given."""


class EphemerisError(ChartToolsError, RuntimeError):
    """The ephemeris provider failed to produce a position or house cusps."""
