"""CalcRunStore: persisted takeoff/BOQ snapshots backed by SQLite."""

from __future__ import annotations

import json
import logging
import secrets
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from boqkit import config
from boqkit.boq.report import BOQReport
from boqkit.errors import InvalidRequestError
from boqkit.models.takeoff import BOQLine, TakeoffLine
from boqkit.takeoff.report import TakeoffReport

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS calc_runs (
    seq         INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id      TEXT    NOT NULL UNIQUE,
    project_id  TEXT    NOT NULL,
    timestamp   TEXT    NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'completed',
    summary     TEXT    NOT NULL DEFAULT '{}',
    takeoff_lines TEXT  NOT NULL DEFAULT '[]',
    boq_lines   TEXT    NOT NULL DEFAULT '[]',
    errors      TEXT    NOT NULL DEFAULT '[]',
    warnings    TEXT    NOT NULL DEFAULT '[]',
    boq_summary TEXT    NOT NULL DEFAULT '{}',
    boq_errors  TEXT    NOT NULL DEFAULT '[]',
    boq_warnings TEXT   NOT NULL DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_calc_runs_project ON calc_runs (project_id, seq);
"""

_COLUMNS = (
    "run_id, project_id, timestamp, status, summary, takeoff_lines, boq_lines, "
    "errors, warnings, boq_summary, boq_errors, boq_warnings"
)


class CalcRun(BaseModel):
    """Snapshot of one takeoff run and the BOQ generated from it."""

    run_id: str
    project_id: str
    timestamp: str = ""
    status: str = "completed"
    summary: dict[str, Any] = Field(default_factory=dict)
    takeoff_lines: list[TakeoffLine] = Field(default_factory=list)
    boq_lines: list[BOQLine] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    boq_summary: dict[str, Any] = Field(default_factory=dict)
    boq_errors: list[str] = Field(default_factory=list)
    boq_warnings: list[str] = Field(default_factory=list)


def new_run_id() -> str:
    """``run_<epoch ms>_<9 hex chars>``."""
    return f"run_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class CalcRunStore:
    """Append-mostly store of calculation runs.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Defaults to ``':memory:'``.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._conn = sqlite3.connect(self._db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_run(self, project_id: str, takeoff: TakeoffReport) -> CalcRun:
        """Persist a completed takeoff and return the new run."""
        if not project_id:
            raise InvalidRequestError("project_id is required")
        run = CalcRun(
            run_id=new_run_id(),
            project_id=project_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            summary=dict(takeoff.summary),
            takeoff_lines=list(takeoff.takeoff_lines),
            errors=list(takeoff.errors),
            warnings=list(takeoff.warnings),
        )
        self._conn.execute(
            f"INSERT INTO calc_runs ({_COLUMNS}) VALUES (?,?,?,?,?,?,?,?,?,?,?,?)",
            self._row_values(run),
        )
        self._conn.commit()
        logger.info("Recorded run %s for project %s (%d lines)",
                    run.run_id, project_id, len(run.takeoff_lines))
        return run

    def attach_boq(self, run_id: str, project_id: str, boq: BOQReport) -> CalcRun:
        """Store *boq* on an existing run of *project_id*."""
        run = self.get_run(run_id)
        if run is None or run.project_id != project_id:
            raise InvalidRequestError(f"Run {run_id} not found for project {project_id}")

        run.boq_lines = list(boq.boq_lines)
        run.summary = {**run.summary, "boq_line_count": len(boq.boq_lines)}
        run.boq_summary = dict(boq.summary)
        run.boq_errors = list(boq.errors)
        run.boq_warnings = list(boq.warnings)
        self._conn.execute(
            "UPDATE calc_runs SET boq_lines = ?, summary = ?, boq_summary = ?, "
            "boq_errors = ?, boq_warnings = ? WHERE run_id = ?",
            (
                self._dump_lines(run.boq_lines),
                json.dumps(run.summary),
                json.dumps(run.boq_summary),
                json.dumps(run.boq_errors),
                json.dumps(run.boq_warnings),
                run_id,
            ),
        )
        self._conn.commit()
        logger.info("Attached %d BOQ lines to run %s", len(run.boq_lines), run_id)
        return run

    def get_run(self, run_id: str) -> CalcRun | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM calc_runs WHERE run_id = ?", (run_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    def list_runs(self, project_id: str, limit: int = config.RUN_LIST_LIMIT) -> list[CalcRun]:
        """Runs of *project_id*, newest first."""
        if limit <= 0:
            raise InvalidRequestError("limit must be positive")
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM calc_runs WHERE project_id = ? ORDER BY seq DESC LIMIT ?",
            (project_id, limit),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def latest_run(self, project_id: str) -> CalcRun | None:
        runs = self.list_runs(project_id, limit=1)
        return runs[0] if runs else None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _dump_lines(lines: list[Any]) -> str:
        return json.dumps([ln.model_dump(mode="json") for ln in lines])

    def _row_values(self, run: CalcRun) -> tuple[Any, ...]:
        return (
            run.run_id,
            run.project_id,
            run.timestamp,
            run.status,
            json.dumps(run.summary),
            self._dump_lines(run.takeoff_lines),
            self._dump_lines(run.boq_lines),
            json.dumps(run.errors),
            json.dumps(run.warnings),
            json.dumps(run.boq_summary),
            json.dumps(run.boq_errors),
            json.dumps(run.boq_warnings),
        )

    @staticmethod
    def _from_row(row: tuple[Any, ...]) -> CalcRun:
        return CalcRun(
            run_id=row[0],
            project_id=row[1],
            timestamp=row[2],
            status=row[3],
            summary=json.loads(row[4]),
            takeoff_lines=json.loads(row[5]),
            boq_lines=json.loads(row[6]),
            errors=json.loads(row[7]),
            warnings=json.loads(row[8]),
            boq_summary=json.loads(row[9]),
            boq_errors=json.loads(row[10]),
            boq_warnings=json.loads(row[11]),
        )

    def close(self) -> None:
        self._conn.close()
