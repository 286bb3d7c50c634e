"""
Configuration and path management for the labour force report pipeline.
All paths are relative to the project root.
"""

from pathlib import Path

# Project root: one level up from labour_reports/
_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parent

# ── Data directories ──────────────────────────────────────────────────────────

DATA_DIR = PROJECT_ROOT / "data"

# Raw snapshot exactly as returned by the source
RAW_DATA_DIR = DATA_DIR / "raw"

# Analysis-ready table consumed by the renderer
CLEAN_DATA_DIR = DATA_DIR / "clean"

# ── Output directories ────────────────────────────────────────────────────────

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
REPORTS_DIR = OUTPUTS_DIR / "reports"

# ── Specific data files ──────────────────────────────────────────────────────

RAW_TABLE_FILE = RAW_DATA_DIR / "labour_force_raw.csv"
RAW_MANIFEST_FILE = RAW_DATA_DIR / "manifest.json"
CLEAN_TABLE_FILE = CLEAN_DATA_DIR / "labour_force_clean.csv"
RENDER_REPORT_FILE = OUTPUTS_DIR / "render_report.csv"

# ── Template ─────────────────────────────────────────────────────────────────

TEMPLATES_DIR = _THIS_DIR / "templates"
REPORT_TEMPLATE_FILE = TEMPLATES_DIR / "report.html.j2"
ARTIFACT_SUFFIX = "_report.html"

# ── Source ───────────────────────────────────────────────────────────────────
# ABS Labour Force (LF) dataflow, monthly, Australia, persons aged 15+.
# Full-time / part-time employed, for males, females and persons.

SOURCE_URL = (
    "https://data.api.abs.gov.au/rest/data/ABS,LF,1.0.0/"
    "M3+M4.1+2+3.1599.10+20+30.AUS.M"
    "?startPeriod=2019-01&format=csvfile"
)

# Columns the source always declares; anything else is source metadata
SOURCE_REQUIRED_COLUMNS = ["TIME_PERIOD", "OBS_VALUE"]

# ── Cleaning rules ───────────────────────────────────────────────────────────

# Rows are kept only when every column matches its value.
# TSEST: 10 = original, 20 = seasonally adjusted, 30 = trend
SELECTION = {"TSEST": "20"}

PERIOD_COLUMN = "TIME_PERIOD"
VALUE_COLUMN = "OBS_VALUE"

# Decoded label column -> raw code column. Order fixes the parameter order
# and the artifact naming order.
DIMENSIONS = {
    "measure": "MEASURE",
    "sex": "SEX",
}

# Closed vocabularies. A code missing here must either be listed in
# EXCLUDED_CODES or the cleaning stage fails.
DECODE_TABLES = {
    "MEASURE": {
        "M3": "Full-time",
        "M4": "Part-time",
    },
    "SEX": {
        "1": "Males",
        "2": "Females",
        "3": "Persons",
    },
}

EXCLUDED_CODES = {
    "MEASURE": [],
    "SEX": [],
}

# Column the report charts; its axis range is shared across all reports
CHART_COLUMN = "delta"

# ── HTTP settings ─────────────────────────────────────────────────────────────

REQUEST_TIMEOUT = 60
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (labour-force-reports)",
    "Accept": "application/vnd.sdmx.data+csv;file=true",
}
