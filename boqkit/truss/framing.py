"""Roof framing plan: purlins, eave girts, ridge cap, bracing and bolts."""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field

from boqkit.errors import TrussError
from boqkit.models.truss import FramingInput, TrussParameters
from boqkit.roofing.mappings import BOLT_WEIGHT_KG, BOLTS_PER_PURLIN_CONNECTION

logger = logging.getLogger(__name__)

# Diagonal pieces per braced bay per roof slope
_BRACING_PIECES = {"X-Brace": 2, "Diagonal": 1, "K-Brace": 2}


class PurlinPlan(BaseModel):
    section: str = ""
    spacing_mm: float = 0.0
    rows: int = 0
    total_length_m: float = 0.0
    total_weight_kg: float = 0.0


class EdgeMember(BaseModel):
    length_m: float = 0.0
    weight_kg: float = 0.0


class BracingPlan(BaseModel):
    type: str = ""
    bays: int = 0
    pieces: int = 0
    total_length_m: float = 0.0
    total_weight_kg: float = 0.0


class BoltPlan(BaseModel):
    count: int = 0
    weight_kg: float = 0.0


class FramingResult(BaseModel):
    purlins: PurlinPlan
    eave_girt: EdgeMember = Field(default_factory=EdgeMember)
    ridge_cap: EdgeMember = Field(default_factory=EdgeMember)
    bracing: BracingPlan
    bolts: BoltPlan
    warnings: list[str] = Field(default_factory=list)


def slope_length_mm(params: TrussParameters) -> float:
    """Rafter length of one roof slope, heel to apex plus overhang."""
    half = params.span_mm / 2
    pitch = math.atan(params.middle_rise_mm / half)
    return math.hypot(half, params.middle_rise_mm) + params.overhang_mm / math.cos(pitch)


def calculate_roof_framing(
    params: TrussParameters,
    building_length_mm: float,
    truss_count: int,
    framing: FramingInput,
) -> FramingResult:
    """Lay out purlins and bracing over a run of *truss_count* trusses."""
    if building_length_mm <= 0:
        raise TrussError("Building length must be positive")
    if framing.purlin_spacing_mm <= 0:
        raise TrussError("Purlin spacing must be positive")
    if framing.bracing.interval_mm <= 0:
        raise TrussError("Bracing interval must be positive")

    warnings: list[str] = []
    spacing = framing.purlin_spacing_mm
    max_spacing = framing.roofing_material.max_purlin_spacing_mm
    if max_spacing > 0 and spacing > max_spacing:
        warnings.append(
            f"Purlin spacing {spacing:g}mm exceeds the {framing.roofing_material.type} "
            f"maximum of {max_spacing:g}mm; using {max_spacing:g}mm"
        )
        spacing = max_spacing

    slope = slope_length_mm(params)
    length_m = building_length_mm / 1000
    rows = 2 * (math.ceil(round(slope / spacing, 6)) + 1)
    purlin_len = rows * length_m
    purlin_wpm = framing.purlin_spec.weight_kg_per_m
    purlins = PurlinPlan(
        section=framing.purlin_spec.section,
        spacing_mm=spacing,
        rows=rows,
        total_length_m=purlin_len,
        total_weight_kg=purlin_len * purlin_wpm,
    )

    eave = EdgeMember()
    if framing.include_eave_girt:
        eave = EdgeMember(length_m=2 * length_m, weight_kg=2 * length_m * purlin_wpm)
    ridge = EdgeMember(length_m=length_m) if framing.include_ridge_cap else EdgeMember()

    bays = max(1, math.ceil(round(building_length_mm / framing.bracing.interval_mm, 6)))
    bay_length = building_length_mm / bays
    per_bay = _BRACING_PIECES[framing.bracing.type]
    diagonal = math.hypot(bay_length, slope)
    if framing.bracing.type == "K-Brace":
        diagonal = math.hypot(bay_length / 2, slope)
    pieces = bays * per_bay * 2
    bracing_len = pieces * diagonal / 1000
    bracing = BracingPlan(
        type=framing.bracing.type,
        bays=bays,
        pieces=pieces,
        total_length_m=bracing_len,
        total_weight_kg=bracing_len * framing.bracing.material.weight_kg_per_m,
    )

    bolt_count = rows * truss_count * BOLTS_PER_PURLIN_CONNECTION
    bolts = BoltPlan(count=bolt_count, weight_kg=bolt_count * BOLT_WEIGHT_KG)

    logger.debug("Framing: %d purlin rows, %d bracing pieces, %d bolts", rows, pieces, bolt_count)
    return FramingResult(
        purlins=purlins,
        eave_girt=eave,
        ridge_cap=ridge,
        bracing=bracing,
        bolts=bolts,
        warnings=warnings,
    )
