"""Shared helpers for the quantity calculators: rounding, validation, results."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

from pydantic import BaseModel, Field

from boqkit.errors import CalculationError


class QuantityResult(BaseModel):
    """A computed quantity with its human-readable derivation.

    ``base`` is the quantity before waste; ``value`` includes waste.
    """

    value: float
    base: float
    formula_text: str
    inputs: dict[str, Any] = Field(default_factory=dict)


def round_quantity(value: float, decimals: int) -> float:
    """Round half away from zero at *decimals* places.

    Works on the shortest decimal representation of *value*, so
    ``round_quantity(2.675, 2) == 2.68`` and repeated rounding is stable.
    """
    if decimals < 0:
        raise CalculationError(f"Decimal places must be non-negative, got {decimals}")
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-decimals)
    ctx = Context(prec=max(28, 330 + decimals))
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP, context=ctx))


def validate_waste(waste: float) -> None:
    if not 0 <= waste <= 1:
        raise CalculationError("Waste must be between 0 and 1")


def require_positive(label: str, **dims: float) -> None:
    """Raise if any named dimension is not strictly positive."""
    for value in dims.values():
        if value is None or value <= 0:
            raise CalculationError(f"{label} dimensions must be positive")


def fmt_num(value: float, places: int = 6) -> str:
    """Compact fixed-point rendering for formula text (``7.8``, ``0.945``)."""
    text = f"{value:.{places}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def waste_pct(waste: float) -> str:
    return f"{fmt_num(waste * 100, 2)}%"
