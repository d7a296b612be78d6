"""Exception types raised by the takeoff and BOQ pipeline."""

from __future__ import annotations


class BoqKitError(Exception):
    """Base class for all boqkit errors."""


class GeometryError(BoqKitError):
    """A grid or level reference could not be resolved."""


class CalculationError(BoqKitError, ValueError):
    """Invalid dimensions, waste ratios or bar configuration."""


class TrussError(BoqKitError, ValueError):
    """Truss parameters cannot produce a valid truss."""


class InvalidRequestError(BoqKitError):
    """Malformed request payload rejected before any computation."""
