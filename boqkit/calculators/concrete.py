"""Concrete volumes (m³) for beams, slabs, columns and foundations."""

from __future__ import annotations

import math

from boqkit.calculators.base import (
    QuantityResult,
    fmt_num,
    require_positive,
    validate_waste,
)
from boqkit.errors import CalculationError
from boqkit.models.project import CircularSection, RectangularSection


def _with_waste(base: float, waste: float, expr: str, inputs: dict) -> QuantityResult:
    value = base * (1 + waste)
    formula = f"{expr} = {fmt_num(base)} m³"
    if waste:
        formula += f" × (1 + {fmt_num(waste)}) = {fmt_num(value)} m³"
    return QuantityResult(value=value, base=base, formula_text=formula, inputs={**inputs, "waste": waste})


def beam_volume(width: float, height: float, length: float, waste: float = 0.0) -> QuantityResult:
    require_positive("Beam", width=width, height=height, length=length)
    validate_waste(waste)
    return _with_waste(
        width * height * length,
        waste,
        f"{fmt_num(width)} × {fmt_num(height)} × {fmt_num(length)}",
        {"width": width, "height": height, "length": length},
    )


def slab_volume(thickness: float, area: float, waste: float = 0.0) -> QuantityResult:
    require_positive("Slab", thickness=thickness, area=area)
    validate_waste(waste)
    return _with_waste(
        thickness * area,
        waste,
        f"{fmt_num(thickness)} × {fmt_num(area)} m²",
        {"thickness": thickness, "area": area},
    )


def mat_volume(thickness: float, area: float, waste: float = 0.0) -> QuantityResult:
    require_positive("Mat foundation", thickness=thickness, area=area)
    validate_waste(waste)
    return _with_waste(
        thickness * area,
        waste,
        f"{fmt_num(thickness)} × {fmt_num(area)} m²",
        {"thickness": thickness, "area": area},
    )


def column_volume(
    section: RectangularSection | CircularSection,
    height: float,
    waste: float = 0.0,
) -> QuantityResult:
    validate_waste(waste)
    if isinstance(section, CircularSection):
        if section.diameter is None or section.diameter <= 0:
            raise CalculationError("Circular column requires positive diameter")
        require_positive("Column", height=height)
        r = section.diameter / 2
        return _with_waste(
            math.pi * r * r * height,
            waste,
            f"π × ({fmt_num(section.diameter)}/2)² × {fmt_num(height)}",
            {"diameter": section.diameter, "height": height},
        )
    require_positive("Column", width=section.width, height=section.height, length=height)
    return _with_waste(
        section.width * section.height * height,
        waste,
        f"{fmt_num(section.width)} × {fmt_num(section.height)} × {fmt_num(height)}",
        {"width": section.width, "depth": section.height, "height": height},
    )


def footing_volume(length: float, width: float, depth: float, waste: float = 0.0) -> QuantityResult:
    require_positive("Footing", length=length, width=width, depth=depth)
    validate_waste(waste)
    return _with_waste(
        length * width * depth,
        waste,
        f"{fmt_num(length)} × {fmt_num(width)} × {fmt_num(depth)}",
        {"length": length, "width": width, "depth": depth},
    )
