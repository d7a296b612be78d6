"""Truss and roof-framing input parameters (lengths in millimetres)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from boqkit.config import (
    DEFAULT_BRACING_INTERVAL_MM,
    DEFAULT_PURLIN_SPACING_MM,
    DEFAULT_TRUSS_SPACING_MM,
)


class MemberMaterial(BaseModel):
    """Steel section used for a family of truss members."""

    section: str = ""
    weight_kg_per_m: float = 0.0


class TrussParameters(BaseModel):
    """Geometry and material inputs for a single truss."""

    type: Literal["howe", "fink", "kingpost"] = "howe"
    span_mm: float
    middle_rise_mm: float
    overhang_mm: float = 0.0
    spacing_mm: float = DEFAULT_TRUSS_SPACING_MM
    vertical_web_count: int = 2
    plate_thickness: str = "6mm"
    top_chord_material: MemberMaterial = Field(default_factory=MemberMaterial)
    bottom_chord_material: MemberMaterial = Field(default_factory=MemberMaterial)
    web_material: MemberMaterial = Field(default_factory=MemberMaterial)


class RoofingMaterial(BaseModel):
    type: str = "corrugated"
    max_purlin_spacing_mm: float = 1200.0


class BracingSpec(BaseModel):
    type: Literal["X-Brace", "Diagonal", "K-Brace"] = "X-Brace"
    interval_mm: float = DEFAULT_BRACING_INTERVAL_MM
    material: MemberMaterial = Field(default_factory=MemberMaterial)


class FramingInput(BaseModel):
    """Purlin, bracing and edge-member choices for the roof framing plan."""

    roofing_material: RoofingMaterial = Field(default_factory=RoofingMaterial)
    purlin_spacing_mm: float = DEFAULT_PURLIN_SPACING_MM
    purlin_spec: MemberMaterial = Field(default_factory=MemberMaterial)
    bracing: BracingSpec = Field(default_factory=BracingSpec)
    include_ridge_cap: bool = True
    include_eave_girt: bool = True


class TrussDesign(BaseModel):
    """A project's stored truss design.

    ``dpwh_item_mappings`` overrides the default roofing pay items by
    component key (``truss_steel``, ``purlin_steel``, ...).
    """

    truss_params: TrussParameters
    building_length_mm: float
    framing_params: FramingInput | None = None
    dpwh_item_mappings: dict[str, str] = Field(default_factory=dict)
