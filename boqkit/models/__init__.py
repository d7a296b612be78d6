"""Value objects for project snapshots, takeoff lines and BOQ lines."""

from boqkit.models.project import (
    BeamTemplate,
    CircularSection,
    ColumnTemplate,
    ElementInstance,
    FinishType,
    FoundationTemplate,
    GridLine,
    GridRectBoundary,
    IsolatedFooting,
    Level,
    MatFooting,
    Opening,
    Placement,
    PolygonBoundary,
    ProjectSettings,
    ProjectSnapshot,
    RebarConfig,
    RectangularSection,
    RoofPlane,
    RoofType,
    ScheduleItem,
    SlabTemplate,
    Space,
    SpaceFinishAssignment,
    WallSurface,
    WallSurfaceAssignment,
    parse_template,
)
from boqkit.models.takeoff import BOQLine, LineClassification, TakeoffLine, Trade
from boqkit.models.truss import FramingInput, MemberMaterial, TrussDesign, TrussParameters

__all__ = [
    "BOQLine",
    "BeamTemplate",
    "CircularSection",
    "ColumnTemplate",
    "ElementInstance",
    "FinishType",
    "FoundationTemplate",
    "FramingInput",
    "GridLine",
    "GridRectBoundary",
    "IsolatedFooting",
    "Level",
    "LineClassification",
    "MatFooting",
    "MemberMaterial",
    "Opening",
    "Placement",
    "PolygonBoundary",
    "ProjectSettings",
    "ProjectSnapshot",
    "RebarConfig",
    "RectangularSection",
    "RoofPlane",
    "RoofType",
    "ScheduleItem",
    "SlabTemplate",
    "Space",
    "SpaceFinishAssignment",
    "TakeoffLine",
    "Trade",
    "TrussDesign",
    "TrussParameters",
    "WallSurface",
    "WallSurfaceAssignment",
    "parse_template",
]
