from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from .core import canon
from .exceptions import ConfigError, require


@dataclass
class EstimationConfig:
    # Share of the average daily (max - min) spread captured per window size.
    # Heuristic, not fitted to data.
    spread_fractions: Dict[int, float] = field(
        default_factory=lambda: dict(canon.SPREAD_FRACTIONS)
    )

    # Carbon fallback when only a mean intensity is known
    mean_variation: float = canon.MEAN_VARIATION
    variation_fractions: Dict[int, float] = field(
        default_factory=lambda: dict(canon.VARIATION_FRACTIONS)
    )


@dataclass
class EngineConfig:
    windows: Tuple[int, ...] = canon.DEFAULT_WINDOWS
    min_hourly_points: int = canon.MIN_HOURLY_POINTS
    decimals: int = canon.DECIMALS
    per_thousand: int = canon.PER_THOUSAND
    summary_days: int = canon.DEFAULT_SUMMARY_DAYS
    tz: str = canon.DEFAULT_TZ

    # batch artifact lengths
    recent_hourly_points: int = canon.RECENT_HOURLY_POINTS
    flexibility_points: int = canon.FLEXIBILITY_POINTS
    daily_history_days: int = canon.DAILY_HISTORY_DAYS

    estimation: EstimationConfig = field(default_factory=EstimationConfig)

    def __post_init__(self):
        self.windows = check_windows(self.windows)
        require(self.min_hourly_points >= 1, "min_hourly_points must be >= 1", ConfigError)
        require(self.summary_days >= 1, "summary_days must be >= 1", ConfigError)


def check_windows(windows) -> Tuple[int, ...]:
    """Validate window sizes (hours) and return them sorted and de-duplicated."""
    out = []
    for w in windows:
        try:
            ok = not isinstance(w, bool) and int(w) == w and int(w) >= 1
        except (TypeError, ValueError):
            ok = False
        if not ok:
            raise ConfigError(f"Window sizes must be positive whole hours, got {w!r}.")
        out.append(int(w))
    require(len(out) > 0, "At least one window size is required.", ConfigError)
    return tuple(sorted(set(out)))


def default_config() -> EngineConfig:
    return EngineConfig()


class FeedSettings(BaseModel):
    """Credentials and request limits for the live feeds."""

    entsoe_api_key: Optional[str] = None
    electricity_maps_api_key: Optional[str] = None
    timeout_s: float = 20.0
    price_lookback_days: int = 7
    carbon_lookback_hours: int = 48

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "FeedSettings":
        env = os.environ if environ is None else environ
        return cls(
            entsoe_api_key=env.get("ENTSOE_API_KEY") or None,
            electricity_maps_api_key=env.get("ELECTRICITY_MAPS_API_KEY") or None,
        )
