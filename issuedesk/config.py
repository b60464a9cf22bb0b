"""
config.py - Path resolution and application constants
Issue Desk v1.0
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path resolution (frozen executable aware)
# ---------------------------------------------------------------------------


def get_base_path() -> str:
    """
    Return the base directory of the application.
    - frozen exe: directory holding the executable
    - script    : project root (one level above this package)
    """
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    # config.py is in issuedesk/, so project root is one level up
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


BASE_PATH = get_base_path()

DB_PATH = os.environ.get("ISSUEDESK_DB_PATH") or os.path.join(BASE_PATH, "issuedesk.db")
EXPORT_DIR = os.path.join(BASE_PATH, "exports")

# ---------------------------------------------------------------------------
# Data source
# ---------------------------------------------------------------------------

BACKEND = os.environ.get("ISSUEDESK_BACKEND", "local").strip().lower()  # "local" | "remote"
API_URL = os.environ.get("ISSUEDESK_API_URL", "http://localhost:8000/api")
API_TOKEN = os.environ.get("ISSUEDESK_API_TOKEN") or None
API_TIMEOUT = float(os.environ.get("ISSUEDESK_API_TIMEOUT", "15"))

# Audit trail is synthesized by the client unless the server owns it
CLIENT_AUDIT = _env_flag("ISSUEDESK_CLIENT_AUDIT", True)

SNAPSHOT_KEY = "issueTrackerData"

# ---------------------------------------------------------------------------
# App constants
# ---------------------------------------------------------------------------

APP_TITLE = "Issue Tracker Dashboard"
APP_VERSION = "1.0.0"
CURRENT_USER_FALLBACK = "Current User"

# Pagination
DEFAULT_PAGE_SIZE = 100
PAGE_SIZE_OPTIONS: tuple[int, ...] = (
    100, 200, 300, 400, 500, 600, 1000, 1500, 2000, 2500,
    3000, 3500, 4000, 4500, 5000, 5500, 6000, 6500, 7000,
)

# Risk scoring
DEFAULT_RISK_WEIGHT = 10
HIGH_RISK_THRESHOLD = 30  # highlighted when strictly above

# Search debounce (seconds) for live local filtering
SEARCH_DEBOUNCE_SECONDS = 0.3

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

COLOR_BG = "#F1F5F9"  # slate-100
COLOR_CARD = "#FFFFFF"
COLOR_BORDER = "#E2E8F0"
COLOR_TEXT_MUTED = "#64748B"
COLOR_TEXT_MAIN = "#1E293B"
COLOR_PRIMARY = "#4F46E5"  # indigo
COLOR_DANGER = "#DC2626"

COLOR_STATUS = {
    "Open": "#2563EB",
    "In Process": "#CA8A04",
    "Resolved": "#16A34A",
}

# AppBar
COLOR_APPBAR_BG = "#FFFFFF"
COLOR_APPBAR_FG = "#1E293B"

# UI constants
BORDER_RADIUS_CARD = 10
BORDER_RADIUS_BTN = 6
