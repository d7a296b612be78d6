"""Element quantity calculators: concrete, reinforcement and formwork."""

from boqkit.calculators.base import QuantityResult, round_quantity
from boqkit.calculators.elements import (
    BeamCalculator,
    CalcContext,
    ColumnCalculator,
    ElementCalculator,
    FoundationCalculator,
    SlabCalculator,
    calculator_for,
    register_calculator,
)

__all__ = [
    "BeamCalculator",
    "CalcContext",
    "ColumnCalculator",
    "ElementCalculator",
    "FoundationCalculator",
    "QuantityResult",
    "SlabCalculator",
    "calculator_for",
    "register_calculator",
    "round_quantity",
]
