"""Central configuration for the 14 KM target tracker.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Deployment-specific values are read from environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_list(key: str) -> list[str]:
    value = os.getenv(key, "")
    return [item.strip() for item in value.split(",") if item.strip()]


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------
# Distance (km) a single session must reach to count as a target achievement.
TARGET_DISTANCE_KM = _env_float("TARGET_DISTANCE_KM", 14.0)


# ---------------------------------------------------------------------------
# Input/Output
# ---------------------------------------------------------------------------
# Workbook holding the Runners and Run Sessions sheets. Absolute or relative.
INPUT_FILE = os.getenv("TRACKER_INPUT_FILE", "runners_input.xlsx")

# Directory where exported reports are written by the CLI.
OUTPUT_DIR = os.getenv("TRACKER_OUTPUT_DIR", "reports")


# ---------------------------------------------------------------------------
# Remote API (data client)
# ---------------------------------------------------------------------------
API_BASE_URL = os.getenv("TRACKER_API_BASE_URL", "http://localhost:4000")

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("TRACKER_REQUEST_TIMEOUT", 15)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Retries for 5xx responses and connection failures.
HTTP_MAX_RETRIES = _env_int("TRACKER_HTTP_MAX_RETRIES", 3)


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------
SERVER_HOST = os.getenv("TRACKER_SERVER_HOST", "localhost")
SERVER_PORT = _env_int("TRACKER_SERVER_PORT", 4000)

# Number of recent achievements listed on the dashboard endpoint.
DASHBOARD_RECENT_LIMIT = _env_int("DASHBOARD_RECENT_LIMIT", 8)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
REPORT_TITLES = {
    "active": "Laporan Pelari Aktif",
    "target": "Laporan Pencapaian Target",
    "14km": "Laporan Khusus Target 14 KM",
}

# Second title row of every exported report.
REPORT_ORGANIZATION_LABEL = os.getenv(
    "REPORT_ORGANIZATION_LABEL", "SISFORUN - Admin Panel"
)

# "landscape" or "portrait".
REPORT_PDF_ORIENTATION = os.getenv("REPORT_PDF_ORIENTATION", "landscape")

# Organisational units offered by the UI filters. Empty means "derive from
# the data"; never hardcode a roster here.
ORGANIZATION_UNITS = _env_list("ORGANIZATION_UNITS")

# Metadata rows written above the spreadsheet table (title, organisation,
# generation date, blank spacer).
EXCEL_METADATA_ROWS = 4


# ---------------------------------------------------------------------------
# Excel formatting
# ---------------------------------------------------------------------------
# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = _env_bool("EXCEL_AUTOSIZE_COLUMNS", True)
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = (
    5000  # skip autosize for very large sheets (performance guard)
)
