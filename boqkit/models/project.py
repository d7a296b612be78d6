"""ProjectSnapshot: the caller-supplied project state consumed per request.

All entities are value objects.  Element templates are an explicit tagged
variant on ``kind``; column sections and foundation footings carry their
own ``shape`` / ``form`` discriminators so no calculator ever has to guess
a shape from which dimension fields happen to be filled in.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from boqkit.models.truss import TrussDesign

# ---------------------------------------------------------------------------
# Grid, levels and settings
# ---------------------------------------------------------------------------


class GridLine(BaseModel):
    """A labelled grid line at a signed offset (metres) from the origin."""

    label: str
    offset: float


class Level(BaseModel):
    """A named storey level at an elevation (metres) above datum."""

    label: str
    elevation: float


class WasteSettings(BaseModel):
    concrete: float = 0.05
    rebar: float = 0.03


class RoundingSettings(BaseModel):
    concrete: int = 3
    rebar: int = 2
    formwork: int = 2


class ProjectSettings(BaseModel):
    waste: WasteSettings = Field(default_factory=WasteSettings)
    rounding: RoundingSettings = Field(default_factory=RoundingSettings)


# ---------------------------------------------------------------------------
# Element templates
# ---------------------------------------------------------------------------


class MainBars(BaseModel):
    """Longitudinal bars: a count for beams/columns, a spacing for slabs."""

    diameter: int
    count: int | None = None
    spacing: float | None = None


class SpacedBars(BaseModel):
    """Stirrups, ties or secondary bars laid out at a fixed spacing."""

    diameter: int
    spacing: float


class RebarConfig(BaseModel):
    main_bars: MainBars | None = None
    secondary_bars: SpacedBars | None = None
    stirrups: SpacedBars | None = None
    dpwh_rebar_item: str | None = None
    epoxy_coated: bool = False


class _TemplateBase(BaseModel):
    id: str
    name: str
    dpwh_item_number: str | None = None
    rebar_config: RebarConfig | None = None


class BeamTemplate(_TemplateBase):
    kind: Literal["beam"] = "beam"
    width: float
    height: float


class SlabTemplate(_TemplateBase):
    kind: Literal["slab"] = "slab"
    thickness: float


class RectangularSection(BaseModel):
    shape: Literal["rectangular"] = "rectangular"
    width: float
    height: float


class CircularSection(BaseModel):
    shape: Literal["circular"] = "circular"
    diameter: float


ColumnSection = Annotated[
    Union[RectangularSection, CircularSection], Field(discriminator="shape")
]


class ColumnTemplate(_TemplateBase):
    kind: Literal["column"] = "column"
    section: ColumnSection


class MatFooting(BaseModel):
    form: Literal["mat"] = "mat"
    thickness: float


class IsolatedFooting(BaseModel):
    form: Literal["isolated"] = "isolated"
    length: float
    width: float
    depth: float


FoundationFooting = Annotated[
    Union[MatFooting, IsolatedFooting], Field(discriminator="form")
]


class FoundationTemplate(_TemplateBase):
    kind: Literal["foundation"] = "foundation"
    footing: FoundationFooting


ElementTemplate = Annotated[
    Union[BeamTemplate, SlabTemplate, ColumnTemplate, FoundationTemplate],
    Field(discriminator="kind"),
]

_template_adapter: TypeAdapter[Any] = TypeAdapter(ElementTemplate)

_LEGACY_REBAR_KEYS = {
    "mainBars": "main_bars",
    "secondaryBars": "secondary_bars",
    "dpwhRebarItem": "dpwh_rebar_item",
    "epoxyCoated": "epoxy_coated",
}


def parse_template(data: dict[str, Any] | BaseModel) -> Any:
    """Build an ElementTemplate from either payload shape.

    Accepts the tagged form (``{"kind": "column", "section": {...}}``) or
    the legacy flat form (``{"type": "column", "properties": {...}}``).
    Legacy column and foundation shapes are inferred here and only here:
    a ``diameter`` property makes a circular column, a ``length`` property
    makes an isolated footing, anything else a mat.
    """
    if isinstance(data, BaseModel):
        return data
    if "kind" in data:
        return _template_adapter.validate_python(data)

    kind = data.get("type")
    props: dict[str, Any] = data.get("properties") or {}
    rebar = data.get("rebar_config", data.get("rebarConfig"))
    if isinstance(rebar, dict):
        rebar = {_LEGACY_REBAR_KEYS.get(k, k): v for k, v in rebar.items()}

    base: dict[str, Any] = {
        "id": data.get("id", ""),
        "name": data.get("name", ""),
        "dpwh_item_number": data.get("dpwh_item_number", data.get("dpwhItemNumber")),
        "rebar_config": rebar,
        "kind": kind,
    }

    if kind == "beam":
        base.update(width=props.get("width", 0.0), height=props.get("height", 0.0))
    elif kind == "slab":
        base.update(thickness=props.get("thickness", 0.0))
    elif kind == "column":
        if "diameter" in props:
            base["section"] = {"shape": "circular", "diameter": props["diameter"]}
        else:
            base["section"] = {
                "shape": "rectangular",
                "width": props.get("width", 0.0),
                "height": props.get("height", 0.0),
            }
    elif kind == "foundation":
        if "length" in props:
            base["footing"] = {
                "form": "isolated",
                "length": props.get("length", 0.0),
                "width": props.get("width", 0.0),
                "depth": props.get("depth", 0.0),
            }
        else:
            base["footing"] = {"form": "mat", "thickness": props.get("thickness", 0.0)}
    else:
        raise ValueError(f"Unknown template type: {kind!r}")

    return _template_adapter.validate_python(base)


# ---------------------------------------------------------------------------
# Element instances
# ---------------------------------------------------------------------------


class Placement(BaseModel):
    """Where an instance sits: grid span/area refs plus a level (pair)."""

    grid_ref: list[str] = Field(default_factory=list)
    level_id: str
    end_level_id: str | None = None


class ElementInstance(BaseModel):
    id: str
    template_id: str
    placement: Placement
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Finishes
# ---------------------------------------------------------------------------


class GridRectBoundary(BaseModel):
    kind: Literal["gridRect"] = "gridRect"
    grid_x: tuple[str, str]
    grid_y: tuple[str, str]


class PolygonBoundary(BaseModel):
    kind: Literal["polygon"] = "polygon"
    points: list[tuple[float, float]]


Boundary = Annotated[
    Union[GridRectBoundary, PolygonBoundary], Field(discriminator="kind")
]


class Space(BaseModel):
    id: str
    name: str
    level_id: str
    boundary: Boundary
    metadata: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


class Opening(BaseModel):
    id: str
    level_id: str
    space_id: str | None = None
    type: Literal["door", "window", "vent", "louver", "other"] = "door"
    width_m: float
    height_m: float
    qty: int = 1
    tags: list[str] = Field(default_factory=list)

    @property
    def area_m2(self) -> float:
        return self.width_m * self.height_m * self.qty


class WallHeightRule(BaseModel):
    mode: Literal["fullHeight", "fixed"] = "fullHeight"
    value_m: float | None = None


class DeductionRule(BaseModel):
    enabled: bool = True
    min_opening_area_to_deduct_m2: float = 0.0
    include_types: list[str] = Field(default_factory=lambda: ["door", "window"])


class FinishAssumptions(BaseModel):
    waste_percent: float = 0.0
    rounding: int = 2
    notes: str = ""


class FinishType(BaseModel):
    """A finish specification.  ``category`` is validated at calculation time."""

    id: str
    category: str
    finish_name: str
    dpwh_item_number_raw: str
    unit: str = "Square Meter"
    wall_height_rule: WallHeightRule = Field(default_factory=WallHeightRule)
    deduction_rule: DeductionRule = Field(default_factory=DeductionRule)
    assumptions: FinishAssumptions = Field(default_factory=FinishAssumptions)


class FinishOverrides(BaseModel):
    height_m: float | None = None
    waste_percent: float | None = None


class SpaceFinishAssignment(BaseModel):
    id: str
    space_id: str
    finish_type_id: str
    scope: str = ""
    overrides: FinishOverrides = Field(default_factory=FinishOverrides)


class WallGridLine(BaseModel):
    """A wall running along grid line ``label`` between two cross-axis labels."""

    axis: Literal["X", "Y"]
    label: str
    span: tuple[str, str]


class WallSurface(BaseModel):
    id: str
    name: str
    grid_line: WallGridLine
    level_start: str
    level_end: str
    surface_type: Literal["interior", "exterior"] = "interior"
    tags: list[str] = Field(default_factory=list)


class WallSurfaceAssignment(BaseModel):
    id: str
    wall_surface_id: str
    finish_type_id: str
    scope: str = ""
    side: Literal["single", "both"] = "single"


# ---------------------------------------------------------------------------
# Roofing
# ---------------------------------------------------------------------------


class RoofType(BaseModel):
    id: str
    name: str
    dpwh_item_number_raw: str
    unit: str = "Square Meter"
    area_basis: Literal["slopeArea", "planArea"] = "slopeArea"
    lap_allowance_percent: float = 0.0
    waste_percent: float = 0.0


class RoofSlope(BaseModel):
    mode: Literal["ratio", "degrees"] = "ratio"
    value: float = 0.0


class RoofPlaneGeometry(BaseModel):
    plan_area_m2: float = 0.0
    slope_factor: float = 1.0
    slope_area_m2: float = 0.0


class RoofPlane(BaseModel):
    id: str
    name: str
    level_id: str
    boundary: Boundary
    slope: RoofSlope = Field(default_factory=RoofSlope)
    roof_type_id: str
    computed: RoofPlaneGeometry = Field(default_factory=RoofPlaneGeometry)
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Schedule items
# ---------------------------------------------------------------------------


class ScheduleItem(BaseModel):
    """A directly-counted item (doors, fixtures, lump sums)."""

    id: str
    category: str = "other"
    dpwh_item_number_raw: str
    description_override: str | None = None
    unit: str
    qty: float
    basis_note: str = ""
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class ProjectSnapshot(BaseModel):
    """Everything the pipeline reads for one computation request."""

    id: str = ""
    name: str = ""
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    grid_x: list[GridLine] = Field(default_factory=list)
    grid_y: list[GridLine] = Field(default_factory=list)
    levels: list[Level] = Field(default_factory=list)
    element_templates: list[ElementTemplate] = Field(default_factory=list)
    element_instances: list[ElementInstance] = Field(default_factory=list)
    spaces: list[Space] = Field(default_factory=list)
    openings: list[Opening] = Field(default_factory=list)
    finish_types: list[FinishType] = Field(default_factory=list)
    space_finish_assignments: list[SpaceFinishAssignment] = Field(default_factory=list)
    wall_surfaces: list[WallSurface] = Field(default_factory=list)
    wall_surface_assignments: list[WallSurfaceAssignment] = Field(default_factory=list)
    roof_types: list[RoofType] = Field(default_factory=list)
    roof_planes: list[RoofPlane] = Field(default_factory=list)
    truss_design: TrussDesign | None = None
    schedule_items: list[ScheduleItem] = Field(default_factory=list)

    @field_validator("element_templates", mode="before")
    @classmethod
    def _accept_legacy_templates(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            parse_template(t) if isinstance(t, dict) and "kind" not in t else t
            for t in value
        ]

    @model_validator(mode="after")
    def _check_unique_labels(self) -> "ProjectSnapshot":
        for axis, lines in (("X", self.grid_x), ("Y", self.grid_y)):
            labels = [g.label for g in lines]
            dupes = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
            if dupes:
                raise ValueError(f"Duplicate grid {axis} labels: {', '.join(dupes)}")
        labels = [lv.label for lv in self.levels]
        dupes = sorted({lbl for lbl in labels if labels.count(lbl) > 1})
        if dupes:
            raise ValueError(f"Duplicate level labels: {', '.join(dupes)}")
        return self

    def template(self, template_id: str) -> Any:
        """Return the template with *template_id*, or None."""
        for tmpl in self.element_templates:
            if tmpl.id == template_id:
                return tmpl
        return None
