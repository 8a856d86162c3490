from __future__ import annotations
from typing import Final, Dict

INDEX_NAME: Final[str] = "timestamp"
VALUE_NAME: Final[str] = "value"
DEFAULT_TZ: Final[str] = "UTC"

# Fewer hourly points than one day of context gives no meaningful result
MIN_HOURLY_POINTS: Final[int] = 24
DEFAULT_WINDOWS: Final[tuple[int, ...]] = (1, 2, 4, 8)
DECIMALS: Final[int] = 2
PER_THOUSAND: Final[int] = 1000  # MWh -> GWh
DEFAULT_SUMMARY_DAYS: Final[int] = 7

# Batch artifact lengths
RECENT_HOURLY_POINTS: Final[int] = 168  # 7 days
FLEXIBILITY_POINTS: Final[int] = 720  # 30 days
DAILY_HISTORY_DAYS: Final[int] = 365

COMMON_TIMESTAMP_NAMES = (
    "timestamp",
    "datetime",
    "datetime (utc)",
    "t_start",
    "time",
    "ts",
    "date",
    "from",
)
COMMON_VALUE_NAMES = (
    "value",
    "price",
    "price (eur/mwhe)",
    "carbon_intensity",
    "carbonintensity",
    "intensity",
)

# Heuristic share of the average daily spread captured per window size
SPREAD_FRACTIONS: Dict[int, float] = {1: 0.15, 2: 0.25, 4: 0.40, 8: 0.60}

# Carbon fallback when only a mean intensity is known
MEAN_VARIATION: Final[float] = 0.15
VARIATION_FRACTIONS: Dict[int, float] = {1: 0.3, 2: 0.5, 4: 0.7, 8: 0.9}
