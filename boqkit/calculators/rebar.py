"""Reinforcement weights (kg) and bar lookups.

Unit weights follow the PNS 49 deformed-bar table.  Bar grade and the
governing DPWH Item 902 sub-item are derived from the diameter.
"""

from __future__ import annotations

import math

from boqkit import config
from boqkit.calculators.base import QuantityResult, fmt_num, require_positive, validate_waste
from boqkit.errors import CalculationError

# kg per linear metre by nominal diameter (mm)
UNIT_WEIGHTS: dict[int, float] = {
    10: 0.617,
    12: 0.888,
    16: 1.578,
    20: 2.466,
    25: 3.853,
    28: 4.834,
    32: 6.313,
    36: 7.990,
    40: 9.865,
}

_GRADE_SUFFIX = {40: "a1", 60: "a2", 80: "a3"}


def unit_weight(diameter: int) -> float:
    try:
        return UNIT_WEIGHTS[int(diameter)]
    except (KeyError, TypeError, ValueError):
        raise CalculationError(f"Unknown rebar diameter: {diameter}mm") from None


def bar_grade(diameter: int) -> int:
    """Grade 40 up to 12 mm, grade 60 up to 36 mm, grade 80 above."""
    unit_weight(diameter)
    if diameter <= 12:
        return 40
    if diameter <= 36:
        return 60
    return 80


def dpwh_item_for(diameter: int, epoxy_coated: bool = False) -> str:
    """DPWH pay item for a bar of *diameter*: Item 902 (1) plain, 902 (2) epoxy-coated."""
    suffix = _GRADE_SUFFIX[bar_grade(diameter)]
    return f"902 ({2 if epoxy_coated else 1}) {suffix}"


def lap_length(diameter: int, multiplier: int = config.LAP_MULTIPLIER) -> float:
    """Tension lap splice length in metres."""
    return diameter * multiplier / 1000


def hook_length(diameter: int) -> float:
    return diameter * config.HOOK_LENGTH_FACTOR / 1000


def spaced_count(distance: float, spacing: float) -> int:
    """Bars at *spacing* across *distance*, both ends included."""
    if spacing <= 0:
        raise CalculationError("Bar spacing must be positive")
    return math.ceil(round(distance / spacing, 6)) + 1


def _result(count: int, bar_length: float, diameter: int, waste: float,
            expr: str, inputs: dict) -> QuantityResult:
    w = unit_weight(diameter)
    base = count * bar_length * w
    value = base * (1 + waste)
    formula = f"{expr} × {fmt_num(w)} kg/m = {fmt_num(base, 2)} kg"
    if waste:
        formula += f" × (1 + {fmt_num(waste)}) = {fmt_num(value, 2)} kg"
    return QuantityResult(
        value=value,
        base=base,
        formula_text=formula,
        inputs={
            **inputs,
            "diameter": diameter,
            "count": count,
            "bar_length": bar_length,
            "unit_weight": w,
            "waste": waste,
        },
    )


def main_bars_weight(diameter: int, count: int, length: float, waste: float = 0.0) -> QuantityResult:
    """Longitudinal bars of a beam or column, one lap splice per bar."""
    validate_waste(waste)
    require_positive("Main bar", length=length)
    if count is None or count <= 0:
        raise CalculationError("Main bar count must be positive")
    lap = lap_length(diameter)
    bar_length = length + lap
    return _result(
        count,
        bar_length,
        diameter,
        waste,
        f"{count} bars × ({fmt_num(length)} + {fmt_num(lap)} lap) m",
        {"length": length, "lap": lap},
    )


def stirrups_weight(diameter: int, spacing: float, length: float, width: float, height: float,
                    waste: float = 0.0, cover: float = config.CONCRETE_COVER_M) -> QuantityResult:
    """Closed rectangular stirrups or ties along *length*."""
    validate_waste(waste)
    require_positive("Stirrup", spacing=spacing, length=length, width=width, height=height)
    inner_w = width - 2 * cover
    inner_h = height - 2 * cover
    if inner_w <= 0 or inner_h <= 0:
        raise CalculationError("Section too small for stirrups after cover")
    count = spaced_count(length, spacing)
    cut = 2 * (inner_w + inner_h) + 2 * hook_length(diameter)
    return _result(
        count,
        cut,
        diameter,
        waste,
        f"{count} stirrups @ {fmt_num(spacing)} m × {fmt_num(cut, 3)} m",
        {"length": length, "spacing": spacing, "cover": cover},
    )


def hoops_weight(diameter: int, spacing: float, length: float, column_diameter: float,
                 waste: float = 0.0, cover: float = config.CONCRETE_COVER_M) -> QuantityResult:
    """Circular hoops for a round column."""
    validate_waste(waste)
    require_positive("Hoop", spacing=spacing, length=length, column_diameter=column_diameter)
    core = column_diameter - 2 * cover
    if core <= 0:
        raise CalculationError("Section too small for hoops after cover")
    count = spaced_count(length, spacing)
    cut = math.pi * core + 2 * hook_length(diameter)
    return _result(
        count,
        cut,
        diameter,
        waste,
        f"{count} hoops @ {fmt_num(spacing)} m × {fmt_num(cut, 3)} m",
        {"length": length, "spacing": spacing, "cover": cover},
    )


def distributed_bars_weight(diameter: int, span: float, spacing: float | None = None,
                            distribution: float | None = None, count: int | None = None,
                            waste: float = 0.0) -> QuantityResult:
    """Bars running along *span*, laid across *distribution* at *spacing*.

    An explicit *count* wins over spacing.  *distribution* defaults to the
    span (square panel).
    """
    validate_waste(waste)
    require_positive("Bar", span=span)
    across = distribution if distribution is not None else span
    if count is not None:
        if count <= 0:
            raise CalculationError("Bar count must be positive")
        n = count
        layout = f"{n} bars"
    else:
        s = spacing if spacing else config.DEFAULT_BAR_SPACING_M
        n = spaced_count(across, s)
        layout = f"{n} bars @ {fmt_num(s)} m"
    lap = lap_length(diameter)
    hooks = 2 * hook_length(diameter)
    bar_length = span + lap + hooks
    return _result(
        n,
        bar_length,
        diameter,
        waste,
        f"{layout} × ({fmt_num(span)} + {fmt_num(lap)} lap + {fmt_num(hooks)} hooks) m",
        {"span": span, "distribution": across, "lap": lap},
    )
