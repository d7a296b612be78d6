"""Roof covering takeoff and default roofing pay items."""

from boqkit.roofing.calculator import (
    RoofingResult,
    calculate_roofing,
    roof_cover_takeoff,
    roof_plane_geometry,
    slope_factor,
)
from boqkit.roofing.mappings import DEFAULT_ROOFING_ITEMS, roofing_item

__all__ = [
    "DEFAULT_ROOFING_ITEMS",
    "RoofingResult",
    "calculate_roofing",
    "roof_cover_takeoff",
    "roof_plane_geometry",
    "roofing_item",
    "slope_factor",
]
