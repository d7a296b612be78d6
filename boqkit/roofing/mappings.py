"""Default DPWH pay items and constants for roof framing and covering."""

from __future__ import annotations

# component key -> (pay item, catalog description, unit)
DEFAULT_ROOFING_ITEMS: dict[str, tuple[str, str, str]] = {
    "truss_steel": ("1047 (8) a", "Structural Steel Trusses", "Kilogram"),
    "purlin_steel": ("1047 (8) b", "Structural Steel Purlins", "Kilogram"),
    "bracing_steel": ("1047 (4) b", "Metal Structure Accessories Turnbuckle", "Each"),
    "sag_rods": ("1047 (5) b", "Metal Structure Accessories Sagrods", "Kilogram"),
    "bolts_and_rods": ("1047 (5) a", "Metal Structure Accessories Bolts and Rods", "Kilogram"),
    "steel_plates": ("1047 (5) d", "Metal Structure Accessories Steel Plates", "Kilogram"),
    "roofing_sheets": ("1013 (1)", "Corrugated Metal Roofing Gauge 26 (0.551 mm)", "Square Meter"),
    "ridge_cap": (
        "1013 (2) a",
        "Fabricated Metal Roofing Accessory Gauge 26 (0.551 mm) Ridge/Hip Rolls",
        "Linear Meter",
    ),
}

BOLT_WEIGHT_KG = 0.05
BOLTS_PER_PURLIN_CONNECTION = 2


def roofing_item(component: str, overrides: dict[str, str] | None = None) -> str:
    """Pay item for a framing component, honouring project overrides."""
    if overrides and overrides.get(component):
        return overrides[component]
    return DEFAULT_ROOFING_ITEMS[component][0]
