"""boqkit: quantity takeoff and DPWH Bill-of-Quantities mapping for building projects."""

__version__ = "1.0.0"

from boqkit.api.facade import BoqKit
from boqkit.boq.mapper import BOQMapper, resolve_pay_item
from boqkit.boq.report import BOQReport
from boqkit.catalog.catalog import Catalog, CatalogItem
from boqkit.config_manager import ConfigManager, Settings
from boqkit.errors import (
    BoqKitError,
    CalculationError,
    GeometryError,
    InvalidRequestError,
    TrussError,
)
from boqkit.geometry.resolver import GeometryResolver
from boqkit.models.project import ProjectSnapshot
from boqkit.models.takeoff import BOQLine, TakeoffLine, Trade
from boqkit.models.truss import TrussDesign, TrussParameters
from boqkit.runs.store import CalcRun, CalcRunStore
from boqkit.takeoff.engine import TakeoffEngine
from boqkit.takeoff.report import TakeoffReport
from boqkit.truss.design import TrussDesignResult, calculate_truss_design
from boqkit.truss.synthesizer import TrussResult, generate_truss

__all__ = [
    "__version__",
    # Facade
    "BoqKit",
    # Pipeline
    "BOQMapper",
    "BOQReport",
    "GeometryResolver",
    "TakeoffEngine",
    "TakeoffReport",
    "resolve_pay_item",
    # Models
    "BOQLine",
    "ProjectSnapshot",
    "TakeoffLine",
    "Trade",
    "TrussDesign",
    "TrussParameters",
    # Truss
    "TrussDesignResult",
    "TrussResult",
    "calculate_truss_design",
    "generate_truss",
    # Catalog and runs
    "CalcRun",
    "CalcRunStore",
    "Catalog",
    "CatalogItem",
    "ConfigManager",
    "Settings",
    # Errors
    "BoqKitError",
    "CalculationError",
    "GeometryError",
    "InvalidRequestError",
    "TrussError",
]
