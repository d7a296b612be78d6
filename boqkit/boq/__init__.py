"""Bill of Quantities mapping."""

from boqkit.boq.mapper import BOQMapper, resolve_pay_item
from boqkit.boq.report import BOQReport

__all__ = ["BOQMapper", "BOQReport", "resolve_pay_item"]
