"""Global configuration: default pay items, rounding and detailing constants."""

from pathlib import Path

# Default location of the CalcRun database
DEFAULT_RUNS_DB = Path("calcruns.db")

# Fallback DPWH pay items used when a template carries no explicit item
DEFAULT_CONCRETE_ITEM = "900 (1) a"
DEFAULT_REBAR_ITEM = "902 (1) a2"
DEFAULT_FORMWORK_ITEM = "903 (1)"

# BOQ aggregation decimals (volume vs. weight/area)
BOQ_VOLUME_DECIMALS = 3
BOQ_DEFAULT_DECIMALS = 2

# Storey height assumed for finishes on the top level
DEFAULT_STOREY_HEIGHT_M = 3.0

# Reinforcement detailing
CONCRETE_COVER_M = 0.025
HOOK_LENGTH_FACTOR = 12  # hook extension = 12 bar diameters
LAP_MULTIPLIER = 40  # lap splice = 40 bar diameters
DEFAULT_BAR_SPACING_M = 0.15

# Steel density (kg/m3) for plates and volume conversion
STEEL_DENSITY = 7850.0

# Maximum number of catalog rows a single search returns
CATALOG_SEARCH_LIMIT = 1000
CATALOG_SEARCH_MAX = 5000

# Number of runs returned by a run listing
RUN_LIST_LIMIT = 10

# Roof framing defaults (mm)
DEFAULT_TRUSS_SPACING_MM = 600.0
DEFAULT_PURLIN_SPACING_MM = 600.0
DEFAULT_BRACING_INTERVAL_MM = 6000.0
