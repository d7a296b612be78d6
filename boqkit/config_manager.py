"""ConfigManager: layered, typed settings for the BoqKit facade.

Sources, lowest to highest precedence:

1. ``Settings`` field defaults
2. the environment profile (``BOQKIT_ENV``)
3. ``<project>/.boqkit/config.json``
4. ``<project>/.env``
5. ``BOQKIT_*`` environment variables

Keys are accepted either as ``BOQKIT_RUNS_DB`` or as the field name
``runs_db``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, field_validator

from boqkit.config import DEFAULT_RUNS_DB

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOQKIT_"
MEMORY_DB = ":memory:"

_TRUTHY = {"1", "true", "yes", "on"}

# Profile values sit below every file and environment layer.
_PROFILES: dict[str, dict[str, str]] = {
    "development": {"log_level": "DEBUG"},
    "production": {"log_level": "WARNING"},
    "testing": {"log_level": "DEBUG", "runs_db": MEMORY_DB},
}


class Settings(BaseModel):
    """Resolved facade settings.

    Attributes
    ----------
    env:
        Profile name (``development``, ``production`` or ``testing``).
    log_level:
        Level applied to the ``boqkit`` logger.
    catalog_path:
        DPWH catalog JSON; None selects the embedded catalog.
    runs_db:
        CalcRun SQLite path, or ``":memory:"``.
    record_runs:
        Record a CalcRun for every takeoff of a project with an id.
    """

    env: str = "development"
    log_level: str = "INFO"
    catalog_path: Path | None = None
    runs_db: str = str(DEFAULT_RUNS_DB)
    record_runs: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> str:
        return str(value).strip().upper()

    @field_validator("catalog_path", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("record_runs", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY

    def resolved(self, project_root: Path) -> Settings:
        """Copy with relative paths anchored at *project_root*."""
        updates: dict[str, Any] = {}
        if self.catalog_path is not None:
            updates["catalog_path"] = project_root / self.catalog_path
        if self.runs_db != MEMORY_DB:
            updates["runs_db"] = str(project_root / self.runs_db)
        return self.model_copy(update=updates)


def _field_name(key: str) -> str:
    key = key.strip()
    if key.upper().startswith(ENV_PREFIX):
        key = key[len(ENV_PREFIX):]
    return key.lower()


class ConfigManager:
    """Build ``Settings`` for a project directory.

    Parameters
    ----------
    environ:
        Environment mapping to read ``BOQKIT_*`` variables from.
        Defaults to ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def load(self, project_root: str | Path = ".") -> Settings:
        root = Path(project_root)
        layers = [
            self._read_config_json(root / ".boqkit" / "config.json"),
            self._read_env_file(root / ".env"),
            self._read_environ(),
        ]

        env_name = Settings().env
        for layer in layers:
            env_name = layer.get("env", env_name)

        values: dict[str, str] = dict(_PROFILES.get(env_name, {}))
        for layer in layers:
            values.update(layer)
        values["env"] = env_name

        settings = Settings.model_validate(values).resolved(root)
        logger.debug("Loaded %s settings for %s", settings.env, root)
        return settings

    @staticmethod
    def configure_logging(settings: Settings) -> None:
        """Apply ``settings.log_level`` to the package logger."""
        level = getattr(logging, settings.log_level, None)
        if not isinstance(level, int):
            logger.warning("Unknown log level %s, using INFO", settings.log_level)
            level = logging.INFO
        logging.getLogger("boqkit").setLevel(level)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _read_config_json(path: Path) -> dict[str, str]:
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Could not read %s", path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", path)
            return {}
        return {_field_name(k): str(v) for k, v in data.items()}

    @staticmethod
    def _read_env_file(path: Path) -> dict[str, str]:
        if not path.is_file():
            return {}
        values: dict[str, str] = {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            logger.warning("Could not read %s", path, exc_info=True)
            return {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            if key.strip().upper().startswith(ENV_PREFIX):
                values[_field_name(key)] = value.strip().strip("\"'")
        return values

    def _read_environ(self) -> dict[str, str]:
        return {
            _field_name(key): value
            for key, value in self._environ.items()
            if key.upper().startswith(ENV_PREFIX)
        }
