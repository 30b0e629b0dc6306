"""Centralized constants for flashchar.

Scheduling defaults and fallbacks live here so every layer
imports from a single source of truth.
"""

# ---------- Scheduler ----------
GAP_FALLBACK_HOURS = 24  # status below the infinite zone with no ladder rung
MIN_INTERVAL_HOURS = 1
DEFAULT_SPEED_THRESHOLD_SEC = 1.0
HOURS_PER_DAY = 24

# ---------- Infinite zone ----------
DEFAULT_INFINITE_START_STEP = 13
DEFAULT_INFINITE_FAST_THRESHOLD_SEC = 1.0
DEFAULT_BASE_INTERVAL_DAYS = 365
DEFAULT_GROWTH_FACTOR = 1.3
DEFAULT_MAX_INTERVAL_DAYS = 3650

# ---------- Settings validation ----------
MIN_SIDE_FIELDS = 1
MAX_SIDE_FIELDS = 2

# ---------- Import / Export ----------
CSV_EXPORT_HEADER = ["id", "characters", "pinyin", "meaning", "status", "dueAt"]
CSV_HEADER_MARKERS = ("characters", "meaning")
