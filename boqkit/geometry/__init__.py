"""Grid and level geometry resolution."""

from boqkit.geometry.resolver import GeometryResolver, polygon_area, polygon_perimeter, split_span

__all__ = ["GeometryResolver", "polygon_area", "polygon_perimeter", "split_span"]
