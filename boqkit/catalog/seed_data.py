"""Embedded DPWH pay-item catalog: no external JSON required.

A working subset of the DPWH Standard Specifications (Volume II/III)
covering the trades the takeoff produces.  Load a complete catalog with
``Catalog.from_json`` when one is available.
"""

from __future__ import annotations

from typing import Any

SOURCE = "DPWH Standard Specifications for Public Works Structures, 2013 ed."

# (item number, description, unit, trade, category)
_ROWS: list[tuple[str, str, str, str, str]] = [
    # Earthworks
    ("100 (1)", "Clearing and Grubbing", "Square Meter", "Earthwork", "Earthworks"),
    ("101 (1)", "Removal of Structures and Obstruction", "Lump Sum", "Earthwork", "Earthworks"),
    ("103 (1)", "Structure Excavation", "Cubic Meter", "Earthwork", "Earthworks"),
    ("104 (1)", "Embankment from Structure Excavation", "Cubic Meter", "Earthwork", "Earthworks"),
    ("108 (1)", "Bedding and Backfill", "Cubic Meter", "Earthwork", "Earthworks"),
    ("800 (1)", "Clearing and Grubbing", "Square Meter", "Earthwork", "Earthworks"),
    ("803 (1) a", "Structure Excavation, Common Soil", "Cubic Meter", "Earthwork", "Earthworks"),
    ("804 (1) a", "Embankment from Structure Excavation", "Cubic Meter", "Earthwork", "Earthworks"),
    ("1000 (1) a", "Soil Poisoning (Termite Control)", "Square Meter", "Earthwork", "Termite Control"),
    # Concrete
    ("900 (1) a", "Structural Concrete, Class A, 28 days", "Cubic Meter", "Concrete", "Concrete Works"),
    ("900 (1) b", "Structural Concrete, Class B, 28 days", "Cubic Meter", "Concrete", "Concrete Works"),
    ("900 (1) c", "Structural Concrete, Class C, 28 days", "Cubic Meter", "Concrete", "Concrete Works"),
    ("900 (1) d", "Structural Concrete, Class P, 28 days", "Cubic Meter", "Concrete", "Concrete Works"),
    ("900 (2)", "Lean Concrete", "Cubic Meter", "Concrete", "Concrete Works"),
    # Reinforcing steel
    ("902 (1) a1", "Reinforcing Steel (Deformed), Grade 40", "Kilogram", "Rebar", "Reinforcing Steel"),
    ("902 (1) a2", "Reinforcing Steel (Deformed), Grade 60", "Kilogram", "Rebar", "Reinforcing Steel"),
    ("902 (1) a3", "Reinforcing Steel (Deformed), Grade 80", "Kilogram", "Rebar", "Reinforcing Steel"),
    ("902 (2) a1", "Reinforcing Steel (Epoxy Coated), Grade 40", "Kilogram", "Rebar", "Reinforcing Steel"),
    ("902 (2) a2", "Reinforcing Steel (Epoxy Coated), Grade 60", "Kilogram", "Rebar", "Reinforcing Steel"),
    ("902 (2) a3", "Reinforcing Steel (Epoxy Coated), Grade 80", "Kilogram", "Rebar", "Reinforcing Steel"),
    # Formwork
    ("903 (1)", "Formworks and Falseworks", "Square Meter", "Formwork", "Formworks"),
    ("903 (2)", "Formworks and Falseworks, Exposed Surfaces", "Square Meter", "Formwork", "Formworks"),
    # Doors, windows and hardware
    ("1003 (1) a", "Carpentry and Joinery Works, Rough Carpentry", "Board Foot", "Carpentry", "Carpentry"),
    ("1003 (2)", "Carpentry and Joinery Works, Finish Carpentry", "Square Meter", "Carpentry", "Carpentry"),
    ("1006 (1)", "Steel Doors and Frames", "Square Meter", "Doors & Windows", "Doors and Frames"),
    ("1008 (1) a", "Aluminum Glass Windows, Sliding Type", "Square Meter", "Doors & Windows", "Windows"),
    ("1008 (2) b", "Aluminum Glass Doors, Swing Type", "Square Meter", "Doors & Windows", "Doors and Frames"),
    ("1010 (2) a", "Doors, Flush", "Square Meter", "Doors & Windows", "Doors and Frames"),
    ("1010 (2) b", "Doors, Panel", "Square Meter", "Doors & Windows", "Doors and Frames"),
    ("1011 (1)", "Finishing Hardware, Lockset", "Set", "Hardware", "Hardware"),
    ("1011 (2)", "Finishing Hardware, Door Hinges", "Pair", "Hardware", "Hardware"),
    ("1012 (1)", "Glass and Glazing, Clear Float 6mm", "Square Meter", "Glass & Glazing", "Glazing"),
    # Roofing
    ("1013 (1)", "Corrugated Metal Roofing Gauge 26 (0.551 mm)", "Square Meter", "Roofing", "Roofing"),
    ("1013 (2) a", "Fabricated Metal Roofing Accessory Gauge 26 (0.551 mm) Ridge/Hip Rolls",
     "Linear Meter", "Roofing", "Roofing"),
    ("1014 (1) b", "Prepainted Metal Sheets, Long Span, 0.50 mm", "Square Meter", "Roofing", "Roofing"),
    ("1015 (1)", "Roof Insulation, Aluminum Foil Faced", "Square Meter", "Roofing", "Roofing"),
    # Finishes
    ("1016 (1)", "Waterproofing, Cementitious", "Square Meter", "Waterproofing", "Waterproofing"),
    ("1016 (2)", "Waterproofing, Membrane", "Square Meter", "Waterproofing", "Waterproofing"),
    ("1018 (1)", "Glazed Tiles and Trims", "Square Meter", "Finishes", "Tile Works"),
    ("1018 (2)", "Unglazed Tiles, Floor", "Square Meter", "Finishes", "Tile Works"),
    ("1021 (1)", "Cement Floor Finish", "Square Meter", "Finishes", "Floor Finishes"),
    ("1027 (1)", "Cement Plaster Finish", "Square Meter", "Finishes", "Plastering"),
    ("1032 (1) a", "Painting Works, Masonry/Concrete", "Square Meter", "Finishes", "Painting"),
    ("1032 (1) b", "Painting Works, Wood", "Square Meter", "Finishes", "Painting"),
    ("1032 (1) c", "Painting Works, Metal", "Square Meter", "Finishes", "Painting"),
    ("1033 (1)", "Ceiling, Fiber Cement Board on Metal Furring", "Square Meter", "Finishes", "Ceiling"),
    ("1033 (2)", "Ceiling, Gypsum Board on Metal Furring", "Square Meter", "Finishes", "Ceiling"),
    ("1046 (2) a", "Masonry Works, CHB 100mm", "Square Meter", "Finishes", "Masonry"),
    ("1046 (2) b", "Masonry Works, CHB 150mm", "Square Meter", "Finishes", "Masonry"),
    # Structural steel
    ("1047 (4) b", "Metal Structure Accessories Turnbuckle", "Each", "Structural Steel", "Metal Structures"),
    ("1047 (5) a", "Metal Structure Accessories Bolts and Rods", "Kilogram", "Structural Steel", "Metal Structures"),
    ("1047 (5) b", "Metal Structure Accessories Sagrods", "Kilogram", "Structural Steel", "Metal Structures"),
    ("1047 (5) d", "Metal Structure Accessories Steel Plates", "Kilogram", "Structural Steel", "Metal Structures"),
    ("1047 (8) a", "Structural Steel Trusses", "Kilogram", "Structural Steel", "Metal Structures"),
    ("1047 (8) b", "Structural Steel Purlins", "Kilogram", "Structural Steel", "Metal Structures"),
    # Plumbing
    ("1001 (1)", "Storm Drainage and Downspout", "Lump Sum", "Plumbing", "Drainage"),
    ("1001 (8)", "Sanitary Sewer Line", "Lump Sum", "Plumbing", "Drainage"),
    ("1002 (1)", "Cold Water Line", "Lump Sum", "Plumbing", "Plumbing"),
    ("1002 (23)", "Water Closet, Floor Mounted", "Set", "Plumbing", "Plumbing Fixtures"),
    ("1002 (24)", "Lavatory, Wall Hung", "Set", "Plumbing", "Plumbing Fixtures"),
    # Cladding
    ("1049 (1)", "Metal Wall Cladding", "Square Meter", "Cladding", "Cladding"),
]

SEED_CATALOG: list[dict[str, Any]] = [
    {
        "item_number": number,
        "description": description,
        "unit": unit,
        "trade": trade,
        "category": category,
    }
    for number, description, unit, trade, category in _ROWS
]
