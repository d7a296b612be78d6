"""TakeoffLine and BOQLine: the records flowing out of the pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Trade(str, Enum):
    """Work categories a takeoff or BOQ line belongs to."""

    CONCRETE = "Concrete"
    REBAR = "Rebar"
    FORMWORK = "Formwork"
    FINISHES = "Finishes"
    ROOFING = "Roofing"
    STRUCTURAL_STEEL = "Structural Steel"
    EARTHWORK = "Earthwork"
    PLUMBING = "Plumbing"
    CARPENTRY = "Carpentry"
    HARDWARE = "Hardware"
    DOORS_WINDOWS = "Doors & Windows"
    GLAZING = "Glass & Glazing"
    WATERPROOFING = "Waterproofing"
    CLADDING = "Cladding"
    OTHER = "Other"


RebarRole = Literal["main", "secondary", "stirrups", "ties"]

# Classification keys that identify *what* a line is; the BOQ re-expresses
# these as histograms instead of copying them onto the grouped line.
DISCRIMINATOR_PREFIXES = (
    "type:",
    "subtype:",
    "rebar:",
    "space:",
    "category:",
    "roofPlane:",
    "dpwh:",
)


class LineClassification(BaseModel):
    """Structured classification of a takeoff line.

    Display tags are derived from this record; nothing downstream parses
    tag strings back into fields.
    """

    model_config = ConfigDict(frozen=True)

    element_type: str | None = None
    subtype: str | None = None
    template_id: str | None = None
    template: str | None = None
    level: str | None = None
    rebar_role: RebarRole | None = None
    space_name: str | None = None
    category: str | None = None
    roof_plane: str | None = None
    extra: list[str] = Field(default_factory=list)

    def to_tags(self, pay_item: str | None = None) -> list[str]:
        tags: list[str] = []
        if self.element_type:
            tags.append(f"type:{self.element_type}")
        if self.subtype:
            tags.append(f"subtype:{self.subtype}")
        if self.template:
            tags.append(f"template:{self.template}")
        if self.level:
            tags.append(f"level:{self.level}")
        if self.rebar_role:
            tags.append(f"rebar:{self.rebar_role}")
        if self.space_name:
            tags.append(f"space:{self.space_name}")
        if self.category:
            tags.append(f"category:{self.category}")
        if self.roof_plane:
            tags.append(f"roofPlane:{self.roof_plane}")
        if pay_item:
            tags.append(f"dpwh:{pay_item}")
        tags.extend(t for t in self.extra if t not in tags)
        return tags


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TakeoffLine(BaseModel):
    """One computed quantity for one element and material."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_element_id: str
    trade: Trade
    resource_key: str
    quantity: float
    unit: str
    formula_text: str = ""
    inputs_snapshot: dict[str, Any] = Field(default_factory=dict)
    assumptions: list[str] = Field(default_factory=list)
    classification: LineClassification = Field(default_factory=LineClassification)
    pay_item: str | None = None
    calculated_at: str = Field(default_factory=_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tags(self) -> list[str]:
        return self.classification.to_tags(self.pay_item)


class BOQLine(BaseModel):
    """Quantities of one (trade, pay item) group with full provenance."""

    id: str
    dpwh_item_number_raw: str
    description: str
    unit: str
    quantity: float
    trade: Trade
    source_takeoff_line_ids: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
