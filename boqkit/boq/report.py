"""BOQReport and its Markdown rendering."""

from __future__ import annotations

import json
from typing import Any

from boqkit.models.takeoff import BOQLine


class BOQReport:
    """Aggregated pay-item lines produced from one set of takeoff lines."""

    def __init__(
        self,
        boq_lines: list[BOQLine] | None = None,
        summary: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
        errors: list[str] | None = None,
    ) -> None:
        self.boq_lines = boq_lines or []
        self.summary = summary or {}
        self.warnings = warnings or []
        self.errors = errors or []

    def line_for(self, item_number: str) -> BOQLine | None:
        for line in self.boq_lines:
            if line.dpwh_item_number_raw == item_number:
                return line
        return None

    def to_markdown(self) -> str:
        """Generate BOQ.md content."""
        lines: list[str] = []
        lines.append("# Bill of Quantities")
        lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Lines**: {self.summary.get('total_lines', len(self.boq_lines))}")
        lines.append(f"- **Total quantity**: {self.summary.get('total_quantity', 0)}")
        lines.append("")

        if self.boq_lines:
            lines.append("## Pay Items")
            lines.append("")
            lines.append("| Item | Description | Trade | Quantity | Unit |")
            lines.append("|------|-------------|-------|----------|------|")
            for ln in self.boq_lines:
                lines.append(
                    f"| {ln.dpwh_item_number_raw} | {ln.description} | {ln.trade.value} | "
                    f"{ln.quantity} | {ln.unit} |"
                )
            lines.append("")

        if self.errors:
            lines.append("## Errors")
            lines.append("")
            for err in self.errors:
                lines.append(f"- {err}")
            lines.append("")

        if self.warnings:
            lines.append("## Warnings")
            lines.append("")
            for warn in self.warnings:
                lines.append(f"- {warn}")
            lines.append("")

        return "\n".join(lines)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_dict(self) -> dict[str, Any]:
        return {
            "boq_lines": [ln.model_dump(mode="json") for ln in self.boq_lines],
            "summary": self.summary,
            "warnings": self.warnings,
            "errors": self.errors,
        }
