"""TrussSynthesizer: member geometry, connector plates and weights.

All lengths are millimetres; weights are kilograms.  The truss is laid
out with the left heel at the origin, the apex at ``(span/2, rise)`` and
the right heel at ``(span, 0)``.

Usage::

    from boqkit.truss import generate_truss

    result = generate_truss(params)
    result.count("top_chord")
"""

from __future__ import annotations

import logging
import math
from typing import Literal

from pydantic import BaseModel, Field

from boqkit import config
from boqkit.errors import TrussError
from boqkit.models.truss import MemberMaterial, TrussParameters

logger = logging.getLogger(__name__)

MemberSubtype = Literal["top_chord", "bottom_chord", "web_vertical", "web_diagonal"]
JointLocation = Literal["heel", "apex", "panel"]

# Square gusset sizes (mm), smallest first
_PLATE_SIZES: list[float] = [100.0, 150.0, 200.0, 250.0, 300.0]

# thickness class -> (thickness mm, index of the panel-joint size in _PLATE_SIZES)
PLATE_CLASSES: dict[str, tuple[float, int]] = {
    "4.5mm": (4.5, 0),
    "6mm": (6.0, 1),
    "9mm": (9.0, 1),
    "12mm": (12.0, 2),
}


class TrussMember(BaseModel):
    name: str
    subtype: MemberSubtype
    length_mm: float
    quantity: int = 1
    section: str = ""
    weight_kg: float = 0.0


class ConnectorPlate(BaseModel):
    joint: str
    location: JointLocation
    width_mm: float
    height_mm: float
    thickness_mm: float
    quantity: int = 1
    weight_kg: float = 0.0


class TrussGeometry(BaseModel):
    span_mm: float
    rise_mm: float
    overhang_mm: float
    half_span_mm: float
    pitch_rad: float
    pitch_deg: float
    top_chord_length_mm: float  # one side, heel to apex, plus overhang
    bottom_chord_length_mm: float
    joint_count: int


class TrussWeights(BaseModel):
    top_chord_kg: float = 0.0
    bottom_chord_kg: float = 0.0
    web_kg: float = 0.0
    members_kg: float = 0.0
    plates_kg: float = 0.0
    total_kg: float = 0.0
    total_member_length_m: float = 0.0


class TrussValidation(BaseModel):
    valid: bool = True
    warnings: list[str] = Field(default_factory=list)


class TrussResult(BaseModel):
    """A synthesized single truss."""

    type: str
    members: list[TrussMember]
    plates: list[ConnectorPlate]
    geometry: TrussGeometry
    weights: TrussWeights
    validation: TrussValidation

    def count(self, subtype: MemberSubtype) -> int:
        """Number of members of *subtype*."""
        return sum(m.quantity for m in self.members if m.subtype == subtype)


class TrussTotals(BaseModel):
    truss_count: int
    total_weight_kg: float
    members_weight_kg: float
    plates_weight_kg: float
    total_member_length_m: float
    total_steel_volume_m3: float
    total_plates: int


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_truss(params: TrussParameters) -> TrussResult:
    """Synthesize the members and plates of one truss."""
    _check_fatal(params)
    warnings = _plausibility_warnings(params)

    span = params.span_mm
    rise = params.middle_rise_mm
    half = span / 2
    pitch = math.atan(rise / half)
    eave_extra = params.overhang_mm / math.cos(pitch) if params.overhang_mm > 0 else 0.0

    builder = _MemberBuilder(params)
    if params.type == "kingpost":
        joints = _kingpost(builder, half, rise, eave_extra)
    elif params.type == "fink":
        joints = _fink(builder, span, half, rise, eave_extra)
    elif params.type == "howe":
        joints = _howe(builder, half, rise, eave_extra, params.vertical_web_count)
    else:
        raise TrussError(f"Unknown truss type: {params.type}")

    plates = _size_plates(joints, params.plate_thickness)

    top = sum(m.weight_kg for m in builder.members if m.subtype == "top_chord")
    bottom = sum(m.weight_kg for m in builder.members if m.subtype == "bottom_chord")
    web = sum(m.weight_kg for m in builder.members if m.subtype.startswith("web"))
    plates_kg = sum(p.weight_kg for p in plates)
    weights = TrussWeights(
        top_chord_kg=top,
        bottom_chord_kg=bottom,
        web_kg=web,
        members_kg=top + bottom + web,
        plates_kg=plates_kg,
        total_kg=top + bottom + web + plates_kg,
        total_member_length_m=sum(m.length_mm * m.quantity for m in builder.members) / 1000,
    )

    geometry = TrussGeometry(
        span_mm=span,
        rise_mm=rise,
        overhang_mm=params.overhang_mm,
        half_span_mm=half,
        pitch_rad=pitch,
        pitch_deg=math.degrees(pitch),
        top_chord_length_mm=math.hypot(half, rise) + eave_extra,
        bottom_chord_length_mm=span,
        joint_count=len(joints),
    )

    logger.debug(
        "Generated %s truss: span=%s rise=%s members=%d plates=%d",
        params.type, span, rise, len(builder.members), len(plates),
    )
    return TrussResult(
        type=params.type,
        members=builder.members,
        plates=plates,
        geometry=geometry,
        weights=weights,
        validation=TrussValidation(valid=not warnings, warnings=warnings),
    )


def truss_quantity(building_length_mm: float, spacing_mm: float) -> int:
    """Trusses along a building: ``ceil(length / spacing) + 1``, at least one."""
    if spacing_mm <= 0:
        raise TrussError("Truss spacing must be positive")
    return max(1, math.ceil(building_length_mm / spacing_mm) + 1)


def total_truss_quantities(result: TrussResult, truss_count: int) -> TrussTotals:
    """Scale one truss's weight, length, volume and plate count by *truss_count*."""
    total_kg = result.weights.total_kg * truss_count
    return TrussTotals(
        truss_count=truss_count,
        total_weight_kg=total_kg,
        members_weight_kg=result.weights.members_kg * truss_count,
        plates_weight_kg=result.weights.plates_kg * truss_count,
        total_member_length_m=result.weights.total_member_length_m * truss_count,
        total_steel_volume_m3=total_kg / config.STEEL_DENSITY,
        total_plates=sum(p.quantity for p in result.plates) * truss_count,
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _check_fatal(params: TrussParameters) -> None:
    if params.span_mm <= 0:
        raise TrussError("Span must be positive")
    if params.middle_rise_mm <= 0:
        raise TrussError("Rise must be positive")
    if params.spacing_mm <= 0:
        raise TrussError("Truss spacing must be positive")
    if params.overhang_mm < 0:
        raise TrussError("Overhang cannot be negative")
    if params.vertical_web_count < 0:
        raise TrussError("Vertical web count cannot be negative")
    for label, material in (
        ("Top chord", params.top_chord_material),
        ("Bottom chord", params.bottom_chord_material),
        ("Web material", params.web_material),
    ):
        if material.weight_kg_per_m <= 0:
            raise TrussError(f"{label} weight per meter must be positive")
    if params.plate_thickness not in PLATE_CLASSES:
        raise TrussError(
            f"Unknown plate thickness '{params.plate_thickness}' "
            f"(expected one of {', '.join(PLATE_CLASSES)})"
        )


def _plausibility_warnings(params: TrussParameters) -> list[str]:
    warnings: list[str] = []
    span, rise = params.span_mm, params.middle_rise_mm
    if span < 3000 or span > 30000:
        warnings.append(f"Span {span / 1000:g}m is outside the practical range of 3m to 30m")
    ratio = rise / span
    if ratio < 1 / 12:
        warnings.append(f"Rise-to-span ratio {ratio:.3f} is flatter than 1/12")
    elif ratio > 1 / 2:
        warnings.append(f"Rise-to-span ratio {ratio:.3f} is steeper than 1/2")
    if params.spacing_mm > 3000:
        warnings.append(f"Truss spacing {params.spacing_mm:g}mm exceeds 3000mm")
    if params.overhang_mm > span / 4:
        warnings.append(f"Overhang {params.overhang_mm:g}mm exceeds a quarter of the span")
    if params.type == "howe" and params.vertical_web_count == 0:
        warnings.append("Howe truss has no vertical webs per half; only the centre vertical is generated")
    return warnings


class _MemberBuilder:
    def __init__(self, params: TrussParameters) -> None:
        self._materials: dict[str, MemberMaterial] = {
            "top_chord": params.top_chord_material,
            "bottom_chord": params.bottom_chord_material,
            "web_vertical": params.web_material,
            "web_diagonal": params.web_material,
        }
        self.members: list[TrussMember] = []

    def add(self, name: str, subtype: MemberSubtype, length_mm: float) -> None:
        material = self._materials[subtype]
        self.members.append(
            TrussMember(
                name=name,
                subtype=subtype,
                length_mm=length_mm,
                section=material.section,
                weight_kg=length_mm / 1000 * material.weight_kg_per_m,
            )
        )


def _kingpost(b: _MemberBuilder, half: float, rise: float, eave_extra: float) -> list[tuple[str, JointLocation]]:
    chord = math.hypot(half, rise) + eave_extra
    b.add("TC-L", "top_chord", chord)
    b.add("TC-R", "top_chord", chord)
    b.add("BC-L", "bottom_chord", half)
    b.add("BC-R", "bottom_chord", half)
    b.add("KP", "web_vertical", rise)
    return [("H-L", "heel"), ("H-R", "heel"), ("APEX", "apex"), ("BC-M", "panel")]


def _fink(b: _MemberBuilder, span: float, half: float, rise: float,
          eave_extra: float) -> list[tuple[str, JointLocation]]:
    # Top panel points at the quarter spans, bottom panel points at the thirds.
    quarter = (span / 4, rise / 2)
    third = span / 3
    segment = math.hypot(span / 4, rise / 2)
    b.add("TC-1L", "top_chord", segment + eave_extra)
    b.add("TC-2L", "top_chord", segment)
    b.add("TC-2R", "top_chord", segment)
    b.add("TC-1R", "top_chord", segment + eave_extra)
    b.add("BC-L", "bottom_chord", third)
    b.add("BC-M", "bottom_chord", third)
    b.add("BC-R", "bottom_chord", third)
    short_web = math.hypot(third - quarter[0], quarter[1])
    long_web = math.hypot(half - third, rise)
    b.add("W-1L", "web_diagonal", short_web)
    b.add("W-2L", "web_diagonal", long_web)
    b.add("W-2R", "web_diagonal", long_web)
    b.add("W-1R", "web_diagonal", short_web)
    return [
        ("H-L", "heel"), ("H-R", "heel"), ("APEX", "apex"),
        ("TP-L", "panel"), ("TP-R", "panel"),
        ("BP-L", "panel"), ("BP-R", "panel"),
    ]


def _howe(b: _MemberBuilder, half: float, rise: float, eave_extra: float,
          per_half: int) -> list[tuple[str, JointLocation]]:
    panels = per_half + 1
    panel = half / panels
    top_segment = math.hypot(panel, rise / panels)
    joints: list[tuple[str, JointLocation]] = [("H-L", "heel"), ("H-R", "heel"), ("APEX", "apex"), ("BC-M", "panel")]

    for side in ("L", "R"):
        for i in range(1, panels + 1):
            extra = eave_extra if i == 1 else 0.0
            b.add(f"TC-{i}{side}", "top_chord", top_segment + extra)
            b.add(f"BC-{i}{side}", "bottom_chord", panel)
        for i in range(1, per_half + 1):
            height = rise * i / panels
            b.add(f"V-{i}{side}", "web_vertical", height)
            # Diagonal from bottom panel point i up to the next top panel point.
            b.add(f"D-{i}{side}", "web_diagonal", math.hypot(panel, rise * (i + 1) / panels))
            joints.append((f"BP-{i}{side}", "panel"))
            joints.append((f"TP-{i}{side}", "panel"))

    b.add("V-C", "web_vertical", rise)
    return joints


def _size_plates(joints: list[tuple[str, JointLocation]], thickness_class: str) -> list[ConnectorPlate]:
    thickness, base = PLATE_CLASSES[thickness_class]
    plates: list[ConnectorPlate] = []
    for name, location in joints:
        idx = base if location == "panel" else min(base + 1, len(_PLATE_SIZES) - 1)
        size = _PLATE_SIZES[idx]
        volume_m3 = size * size * thickness * 1e-9
        plates.append(
            ConnectorPlate(
                joint=name,
                location=location,
                width_mm=size,
                height_mm=size,
                thickness_mm=thickness,
                weight_kg=volume_m3 * config.STEEL_DENSITY,
            )
        )
    return plates
