"""Takeoff aggregation."""

from boqkit.takeoff.engine import TakeoffEngine
from boqkit.takeoff.report import TakeoffReport

__all__ = ["TakeoffEngine", "TakeoffReport"]
