"""Steel roof trusses: synthesis, framing and design orchestration."""

from boqkit.truss.design import (
    TrussDesignResult,
    calculate_truss_design,
    truss_takeoff_lines,
    validate_truss_parameters,
)
from boqkit.truss.framing import FramingResult, calculate_roof_framing
from boqkit.truss.synthesizer import (
    TrussResult,
    generate_truss,
    total_truss_quantities,
    truss_quantity,
)

__all__ = [
    "FramingResult",
    "TrussDesignResult",
    "TrussResult",
    "calculate_roof_framing",
    "calculate_truss_design",
    "generate_truss",
    "total_truss_quantities",
    "truss_quantity",
    "truss_takeoff_lines",
    "validate_truss_parameters",
]
