"""TakeoffReport and its Markdown rendering."""

from __future__ import annotations

import json
from typing import Any

from boqkit.models.takeoff import TakeoffLine


class TakeoffReport:
    """Takeoff lines, summary totals and per-unit errors from one run."""

    def __init__(
        self,
        takeoff_lines: list[TakeoffLine] | None = None,
        summary: dict[str, Any] | None = None,
        errors: list[str] | None = None,
        warnings: list[str] | None = None,
        project_id: str = "",
        run_id: str | None = None,
    ) -> None:
        self.takeoff_lines = takeoff_lines or []
        self.summary = summary or {}
        self.errors = errors or []
        self.warnings = warnings or []
        self.project_id = project_id
        self.run_id = run_id

    def lines_for(self, source_element_id: str) -> list[TakeoffLine]:
        return [ln for ln in self.takeoff_lines if ln.source_element_id == source_element_id]

    def to_markdown(self) -> str:
        """Generate TAKEOFF.md content."""
        lines: list[str] = []
        lines.append(f"# Quantity Takeoff: {self.project_id or 'Project'}")
        lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append("| Quantity | Value |")
        lines.append("|----------|-------|")
        for key, val in self.summary.items():
            lines.append(f"| {key} | {val} |")
        lines.append("")

        if self.takeoff_lines:
            lines.append("## Lines")
            lines.append("")
            lines.append("| ID | Trade | Resource | Quantity | Unit | Formula |")
            lines.append("|----|-------|----------|----------|------|---------|")
            for ln in self.takeoff_lines:
                lines.append(
                    f"| {ln.id} | {ln.trade.value} | {ln.resource_key} | {ln.quantity} | "
                    f"{ln.unit} | {ln.formula_text} |"
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
            "project_id": self.project_id,
            "run_id": self.run_id,
            "takeoff_lines": [ln.model_dump(mode="json") for ln in self.takeoff_lines],
            "summary": self.summary,
            "errors": self.errors,
            "warnings": self.warnings,
        }
