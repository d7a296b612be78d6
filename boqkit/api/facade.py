"""BoqKit: the single entry point for takeoff, BOQ and truss operations.

Usage::

    from boqkit import BoqKit

    kit = BoqKit(project_root="/path/to/project")
    takeoff = kit.generate_takeoff(project)
    boq = kit.generate_boq(takeoff.takeoff_lines, project, run_id=takeoff.run_id)
    kit.design_truss(design)
    kit.search_catalog("reinforcing", trade="Rebar")
    kit.list_runs(project.id)
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from boqkit.boq.mapper import BOQMapper
from boqkit.boq.report import BOQReport
from boqkit.catalog.catalog import Catalog, CatalogItem
from boqkit.config_manager import ConfigManager, Settings
from boqkit.errors import InvalidRequestError
from boqkit.models.project import ProjectSnapshot
from boqkit.models.truss import TrussDesign
from boqkit.runs.store import CalcRun, CalcRunStore
from boqkit.takeoff.engine import TakeoffEngine
from boqkit.takeoff.report import TakeoffReport
from boqkit.truss.design import TrussDesignResult, calculate_truss_design

logger = logging.getLogger(__name__)


class BoqKit:
    """The public interface for boqkit.

    Configuration is read from the project root (``.boqkit/config.json``
    and ``.env``) and the environment.

    Parameters
    ----------
    project_root:
        Directory the configuration is loaded from.
    catalog:
        Pay-item catalog.  Defaults to ``BOQKIT_CATALOG_PATH`` when set,
        else the embedded catalog.
    runs_db:
        CalcRun database path.  Defaults to ``BOQKIT_RUNS_DB`` resolved
        against *project_root*.
    settings:
        Pre-built settings; skips loading from *project_root*.
    """

    def __init__(
        self,
        project_root: str | Path = ".",
        *,
        catalog: Catalog | None = None,
        runs_db: str | Path | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.settings = settings if settings is not None else ConfigManager().load(self.project_root)
        ConfigManager.configure_logging(self.settings)

        if catalog is None:
            path = self.settings.catalog_path
            catalog = Catalog.from_json(path) if path is not None else Catalog.default()
        self.catalog = catalog

        self.engine = TakeoffEngine()
        self.mapper = BOQMapper(self.catalog)

        self.record_runs = self.settings.record_runs
        self.runs = CalcRunStore(runs_db if runs_db is not None else self.settings.runs_db)

    # -- Takeoff and BOQ ------------------------------------------------------

    def generate_takeoff(self, project: ProjectSnapshot | dict[str, Any]) -> TakeoffReport:
        """Run the takeoff and record a CalcRun when the project has an id."""
        if not isinstance(project, ProjectSnapshot):
            project = ProjectSnapshot.model_validate(project)
        report = self.engine.generate_takeoff(project)
        if self.record_runs and project.id:
            try:
                run = self.runs.create_run(project.id, report)
            except sqlite3.Error:
                logger.warning("Could not record run for project %s", project.id, exc_info=True)
            else:
                report.run_id = run.run_id
        return report

    def generate_boq(
        self,
        takeoff_lines: Any,
        project: ProjectSnapshot | dict[str, Any] | None = None,
        run_id: str | None = None,
    ) -> BOQReport:
        """Map takeoff lines to BOQ lines; attach them to *run_id* if given.

        A run that cannot be updated leaves a warning on the report; the
        BOQ itself is still returned.
        """
        if project is not None and not isinstance(project, ProjectSnapshot):
            project = ProjectSnapshot.model_validate(project)
        report = self.mapper.generate_boq(takeoff_lines, project)
        if run_id is not None:
            try:
                if project is not None:
                    project_id = project.id
                else:
                    run = self.runs.get_run(run_id)
                    project_id = run.project_id if run is not None else ""
                self.runs.attach_boq(run_id, project_id, report)
            except (InvalidRequestError, sqlite3.Error) as exc:
                message = f"BOQ not saved to run {run_id}: {exc}"
                logger.warning("%s", message)
                report.warnings.append(message)
        return report

    # -- Truss ----------------------------------------------------------------

    def design_truss(self, design: TrussDesign | dict[str, Any]) -> TrussDesignResult:
        """Synthesize a truss and its roof framing."""
        if not isinstance(design, TrussDesign):
            design = TrussDesign.model_validate(design)
        return calculate_truss_design(design)

    # -- Catalog --------------------------------------------------------------

    def search_catalog(
        self,
        query: str = "",
        *,
        trade: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[CatalogItem]:
        if limit is None:
            return self.catalog.search(query, trade=trade, category=category)
        return self.catalog.search(query, trade=trade, category=category, limit=limit)

    # -- Runs -----------------------------------------------------------------

    def get_run(self, run_id: str) -> CalcRun | None:
        return self.runs.get_run(run_id)

    def list_runs(self, project_id: str, limit: int | None = None) -> list[CalcRun]:
        if limit is None:
            return self.runs.list_runs(project_id)
        return self.runs.list_runs(project_id, limit=limit)

    def close(self) -> None:
        self.runs.close()
