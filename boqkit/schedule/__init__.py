"""Schedule items (doors, fixtures, lump sums)."""

from boqkit.schedule.calculator import ScheduleResult, calculate_schedule_items, trade_for_category

__all__ = ["ScheduleResult", "calculate_schedule_items", "trade_for_category"]
