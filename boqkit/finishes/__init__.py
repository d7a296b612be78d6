"""Finishing works takeoff."""

from boqkit.finishes.calculator import FinishesResult, calculate_finishes

__all__ = ["FinishesResult", "calculate_finishes"]
