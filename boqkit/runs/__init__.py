"""Calculation run history."""

from boqkit.runs.store import CalcRun, CalcRunStore, new_run_id

__all__ = ["CalcRun", "CalcRunStore", "new_run_id"]
