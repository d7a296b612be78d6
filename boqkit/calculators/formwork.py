"""Formwork contact areas (m²).  No waste is applied to formwork."""

from __future__ import annotations

import math

from boqkit.calculators.base import QuantityResult, fmt_num, require_positive
from boqkit.errors import CalculationError


def beam_formwork(width: float, height: float, length: float) -> QuantityResult:
    """Bottom plus two sides."""
    require_positive("Beam", width=width, height=height, length=length)
    bottom = width * length
    sides = 2 * height * length
    total = bottom + sides
    return QuantityResult(
        value=total,
        base=total,
        formula_text=(
            f"Bottom: {fmt_num(width)} × {fmt_num(length)} = {fmt_num(bottom)} m² + "
            f"Sides: 2 × {fmt_num(height)} × {fmt_num(length)} = {fmt_num(sides)} m² "
            f"= {fmt_num(total)} m²"
        ),
        inputs={"bottom_area": bottom, "sides_area": sides},
    )


def slab_formwork(area: float) -> QuantityResult:
    """Soffit formwork over the full plan area."""
    require_positive("Slab", area=area)
    return QuantityResult(
        value=area,
        base=area,
        formula_text=f"Plan area (soffit) = {fmt_num(area)} m²",
        inputs={"soffit_area": area},
    )


def column_formwork(height: float, width: float | None = None, depth: float | None = None,
                    diameter: float | None = None) -> QuantityResult:
    """Four sides of a rectangular column or the cylindrical surface of a round one."""
    if diameter is not None:
        if diameter <= 0:
            raise CalculationError("Circular column requires positive diameter")
        require_positive("Column", height=height)
        circumference = math.pi * diameter
        total = circumference * height
        return QuantityResult(
            value=total,
            base=total,
            formula_text=f"π × {fmt_num(diameter)} × {fmt_num(height)} = {fmt_num(total)} m²",
            inputs={"circumference": circumference, "height": height},
        )
    require_positive("Column", width=width, depth=depth, height=height)
    perimeter = 2 * (width + depth)  # type: ignore[operator]
    total = perimeter * height
    return QuantityResult(
        value=total,
        base=total,
        formula_text=(
            f"2 × ({fmt_num(width)} + {fmt_num(depth)}) × {fmt_num(height)} = {fmt_num(total)} m²"
        ),
        inputs={"perimeter": perimeter, "height": height},
    )


def mat_formwork(length_x: float, length_y: float, thickness: float) -> QuantityResult:
    """Perimeter edge forms only; the bottom bears on soil."""
    require_positive("Mat foundation", length_x=length_x, length_y=length_y, thickness=thickness)
    perimeter = 2 * (length_x + length_y)
    total = perimeter * thickness
    return QuantityResult(
        value=total,
        base=total,
        formula_text=f"Perimeter {fmt_num(perimeter)} m × {fmt_num(thickness)} m = {fmt_num(total)} m²",
        inputs={"perimeter": perimeter, "thickness": thickness},
    )


def footing_formwork(length: float, width: float, depth: float) -> QuantityResult:
    """Four full-height vertical sides."""
    require_positive("Footing", length=length, width=width, depth=depth)
    perimeter = 2 * (length + width)
    total = perimeter * depth
    return QuantityResult(
        value=total,
        base=total,
        formula_text=(
            f"2 × ({fmt_num(length)} + {fmt_num(width)}) × {fmt_num(depth)} = {fmt_num(total)} m²"
        ),
        inputs={"perimeter": perimeter, "depth": depth},
    )
