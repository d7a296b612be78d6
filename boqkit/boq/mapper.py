"""BOQMapper: group takeoff lines into Bill-of-Quantities lines by pay item.

Usage::

    from boqkit.boq import BOQMapper

    mapper = BOQMapper(Catalog.default())
    report = mapper.generate_boq(takeoff.takeoff_lines, project)
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any, Iterable

from pydantic import ValidationError

from boqkit import config
from boqkit.boq.report import BOQReport
from boqkit.calculators.base import round_quantity
from boqkit.catalog.catalog import Catalog
from boqkit.errors import InvalidRequestError
from boqkit.models.project import ProjectSnapshot
from boqkit.models.takeoff import DISCRIMINATOR_PREFIXES, BOQLine, TakeoffLine, Trade

logger = logging.getLogger(__name__)

_CORE_UNITS = {Trade.CONCRETE: "cu.m", Trade.REBAR: "kg", Trade.FORMWORK: "sq.m"}

_SCHEDULE_TRADES = {
    Trade.EARTHWORK,
    Trade.PLUMBING,
    Trade.CARPENTRY,
    Trade.HARDWARE,
    Trade.DOORS_WINDOWS,
    Trade.GLAZING,
    Trade.WATERPROOFING,
    Trade.CLADDING,
    Trade.OTHER,
}

SUMMARY_TRADES = ("Concrete", "Rebar", "Formwork", "Finishes", "Roofing", "StructuralSteel", "ScheduleItems")


def resolve_pay_item(
    trade: Trade,
    explicit: str | None,
    default: str | None,
    subject: str = "",
) -> tuple[str | None, str | None]:
    """Pick the pay item for a line: the explicit one, else the trade default.

    Returns ``(item, warning)``.  ``warning`` is set when the default was
    substituted; ``item`` is None when neither is available.
    """
    if explicit:
        return explicit, None
    if not default:
        return None, None
    who = subject or f"{trade.value} line"
    return default, f"{who} has no DPWH item assigned, using default ({default})"


def slug(item_number: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", item_number)


def _histogram(values: Iterable[str | None], style: str = "count") -> str:
    counts = Counter(v for v in values if v)
    if style == "times":
        return ", ".join(f"{n}× {v}" for v, n in counts.items())
    return ", ".join(f"{n} {v}" for v, n in counts.items())


class BOQMapper:
    """Map takeoff lines to DPWH BOQ lines.

    Parameters
    ----------
    catalog:
        Pay-item catalog.  Defaults to the embedded catalog.
    concrete_default, rebar_default, formwork_default:
        Fallback pay items per trade.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        concrete_default: str = config.DEFAULT_CONCRETE_ITEM,
        rebar_default: str = config.DEFAULT_REBAR_ITEM,
        formwork_default: str = config.DEFAULT_FORMWORK_ITEM,
    ) -> None:
        self.catalog = catalog if catalog is not None else Catalog.default()
        self.concrete_default = concrete_default
        self.rebar_default = rebar_default
        self.formwork_default = formwork_default

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_boq(
        self,
        takeoff_lines: Any,
        project: ProjectSnapshot | None = None,
    ) -> BOQReport:
        """Group *takeoff_lines* into BOQ lines.

        Raises InvalidRequestError if *takeoff_lines* is not a list of
        takeoff lines; every other problem is reported on the result.
        """
        lines = self._coerce(takeoff_lines)
        report = BOQReport()
        if not lines:
            report.warnings.append("No takeoff lines to process")
            report.summary = self._summary([])
            return report

        groups = self._group(lines, project, report)

        for (trade, item), members in groups.items():
            catalog_item = self.catalog.find_by_item_number(item)
            if catalog_item is None:
                self._error(
                    report,
                    f"DPWH item {item} ({trade.value}) not found in catalog - "
                    f"{len(members)} takeoff line(s) excluded",
                )
                continue
            if trade in _CORE_UNITS and catalog_item.trade != trade.value:
                self._error(
                    report,
                    f"DPWH item {item} is a {catalog_item.trade} item, not {trade.value} - "
                    f"{len(members)} takeoff line(s) excluded",
                )
                continue
            report.boq_lines.append(self._boq_line(trade, item, catalog_item.description,
                                                   catalog_item.unit, members))

        report.summary = self._summary(report.boq_lines)
        logger.info(
            "BOQ: %d lines from %d takeoff lines (%d warnings, %d errors)",
            len(report.boq_lines), len(lines), len(report.warnings), len(report.errors),
        )
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(takeoff_lines: Any) -> list[TakeoffLine]:
        if not isinstance(takeoff_lines, (list, tuple)):
            raise InvalidRequestError("takeoff_lines must be a list")
        coerced: list[TakeoffLine] = []
        for i, raw in enumerate(takeoff_lines):
            if isinstance(raw, TakeoffLine):
                coerced.append(raw)
                continue
            try:
                coerced.append(TakeoffLine.model_validate(raw))
            except ValidationError as exc:
                raise InvalidRequestError(f"takeoff_lines[{i}] is not a valid takeoff line: {exc}") from exc
        return coerced

    @staticmethod
    def _warn(report: BOQReport, message: str) -> None:
        # Deduplicated by exact message text.
        if message not in report.warnings:
            report.warnings.append(message)
            logger.warning("%s", message)

    @staticmethod
    def _error(report: BOQReport, message: str) -> None:
        if message not in report.errors:
            report.errors.append(message)
            logger.error("%s", message)

    def _default_if_known(self, trade: Trade, item: str, report: BOQReport) -> str | None:
        if self._in_trade(trade, item):
            return item
        if trade == Trade.FORMWORK:
            self._warn(report, "Default formwork item not found in DPWH catalog - formwork will be skipped")
        else:
            self._error(
                report,
                f"Default {trade.value.lower()} item {item} not found in DPWH catalog - "
                f"{trade.value.lower()} lines without an explicit item are skipped",
            )
        return None

    def _in_trade(self, trade: Trade, item: str) -> bool:
        catalog_item = self.catalog.find_by_item_number(item)
        return catalog_item is not None and catalog_item.trade == trade.value

    def _group(
        self,
        lines: list[TakeoffLine],
        project: ProjectSnapshot | None,
        report: BOQReport,
    ) -> dict[tuple[Trade, str], list[TakeoffLine]]:
        groups: dict[tuple[Trade, str], list[TakeoffLine]] = {}
        defaults: dict[Trade, str | None] = {}

        def default_for(trade: Trade, item: str) -> str | None:
            if trade not in defaults:
                defaults[trade] = self._default_if_known(trade, item, report)
            return defaults[trade]

        for line in lines:
            trade = line.trade
            cls = line.classification
            if trade == Trade.CONCRETE:
                explicit = line.pay_item
                if not explicit and project is not None and cls.template_id:
                    template = project.template(cls.template_id)
                    explicit = template.dpwh_item_number if template is not None else None
                if explicit:
                    item = explicit
                else:
                    default = default_for(trade, self.concrete_default)
                    if default is None:
                        continue
                    item, warning = resolve_pay_item(
                        trade, None, default, f'Template "{cls.template or line.source_element_id}"'
                    )
                    self._warn(report, warning)
            elif trade == Trade.REBAR:
                if line.pay_item:
                    item = line.pay_item
                else:
                    default = default_for(trade, self.rebar_default)
                    if default is None:
                        continue
                    item, warning = resolve_pay_item(
                        trade, None, default, f'Rebar for template "{cls.template or line.source_element_id}"'
                    )
                    self._warn(report, warning)
            elif trade == Trade.FORMWORK:
                default = default_for(trade, self.formwork_default)
                if default is None:
                    continue
                item = default
            else:
                if not line.pay_item:
                    self._warn(report, f"Takeoff line {line.id} has no DPWH item - skipped")
                    continue
                item = line.pay_item

            groups.setdefault((trade, item), []).append(line)
        return groups

    def _boq_line(self, trade: Trade, item: str, description: str, catalog_unit: str,
                  members: list[TakeoffLine]) -> BOQLine:
        decimals = config.BOQ_VOLUME_DECIMALS if trade == Trade.CONCRETE else config.BOQ_DEFAULT_DECIMALS
        quantity = round_quantity(sum(ln.quantity for ln in members), decimals)

        if trade in _CORE_UNITS:
            line_id = f"boq_{slug(item)}"
        elif trade == Trade.FINISHES:
            line_id = f"boq_{slug(item)}_finishes"
        elif trade == Trade.ROOFING:
            line_id = f"boq_{slug(item)}_roofing"
        elif trade == Trade.STRUCTURAL_STEEL:
            line_id = f"boq_{slug(item)}_steel"
        else:
            line_id = f"boq_{slug(item)}_schedule_{slug(trade.value.lower())}"

        return BOQLine(
            id=line_id,
            dpwh_item_number_raw=item,
            description=description,
            unit=_CORE_UNITS.get(trade, catalog_unit),
            quantity=quantity,
            trade=trade,
            source_takeoff_line_ids=[ln.id for ln in members],
            tags=self._tags(trade, item, members),
        )

    @staticmethod
    def _tags(trade: Trade, item: str, members: list[TakeoffLine]) -> list[str]:
        tags = [f"dpwh:{item}", f"trade:{trade.value}"]

        # One count per source element, not per line.
        seen: dict[str, str] = {}
        for ln in members:
            if ln.classification.element_type and ln.source_element_id not in seen:
                seen[ln.source_element_id] = ln.classification.element_type
        elements = _histogram(seen.values())
        if elements:
            tags.append(f"elements:{elements}")

        cls = [ln.classification for ln in members]
        extra: list[tuple[str, str]] = []
        if trade == Trade.REBAR:
            extra.append(("rebar-types", _histogram(c.rebar_role for c in cls)))
        elif trade == Trade.FINISHES:
            extra.append(("spaces", _histogram((c.space_name for c in cls), "times")))
            extra.append(("categories", _histogram((c.category for c in cls), "times")))
        elif trade == Trade.ROOFING:
            extra.append(("roofPlanes", _histogram((c.roof_plane for c in cls), "times")))
        elif trade in _SCHEDULE_TRADES or trade == Trade.STRUCTURAL_STEEL:
            extra.append(("categories", _histogram((c.category for c in cls), "times")))
        tags.extend(f"{key}:{value}" for key, value in extra if value)

        for ln in members:
            for tag in ln.tags:
                if tag.startswith(DISCRIMINATOR_PREFIXES) or tag in tags:
                    continue
                tags.append(tag)
        return tags

    @staticmethod
    def _summary(boq_lines: list[BOQLine]) -> dict[str, Any]:
        trades = {name: 0 for name in SUMMARY_TRADES}
        for ln in boq_lines:
            if ln.trade in _SCHEDULE_TRADES:
                key = "ScheduleItems"
            elif ln.trade == Trade.STRUCTURAL_STEEL:
                key = "StructuralSteel"
            else:
                key = ln.trade.value
            trades[key] += 1
        return {
            "total_lines": len(boq_lines),
            "total_quantity": round_quantity(sum(ln.quantity for ln in boq_lines), 2),
            "trades": trades,
        }
