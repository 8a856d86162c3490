from __future__ import annotations
import logging
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from . import daily, flexibility, utils, validate
from .config import EngineConfig, check_windows, default_config
from .core.types import DailyRecord, FlexibilityMetric, FlexibilityResult, PriceSource

logger = logging.getLogger(__name__)

DateLike = str | date


def filter_window(
    series: pd.Series, start: Optional[DateLike] = None, end: Optional[DateLike] = None
) -> pd.Series:
    """Observations whose calendar date is within [start, end], inclusive."""
    validate.assert_series(series)
    mask = utils.date_mask(pd.DatetimeIndex(series.index), start, end)
    return series[mask].copy()


def merge_series(
    static: pd.Series,
    live: Optional[pd.Series] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> pd.Series:
    """
    Restrict static and live to the window and merge them.

    Live values replace static ones at shared timestamps. The live series is
    read in the static series' timezone so both use the same calendar.
    """
    base = filter_window(static, start, end)
    if live is None or live.empty:
        return base

    validate.assert_series(live)
    tz = pd.DatetimeIndex(static.index).tz
    live = live.tz_convert(tz)
    recent = filter_window(live, start, end)
    if recent.empty:
        return base

    kept = base[~base.index.isin(recent.index)]
    merged = pd.concat([kept, recent]).sort_index()
    merged.index.name = static.index.name
    return merged.rename(static.name)


def price_source(live: Optional[pd.Series]) -> PriceSource:
    return "hybrid" if live is not None and not live.empty else "static"


def _fractions(windows: Sequence[int], table: Dict[int, float]) -> np.ndarray:
    """Per-window fraction; sizes missing from the table are interpolated."""
    keys = sorted(table)
    return np.interp(
        np.asarray(windows, dtype=float),
        np.asarray(keys, dtype=float),
        np.asarray([table[k] for k in keys], dtype=float),
    )


def _estimated_metric(
    value: float, w: int, average: float, cfg: EngineConfig
) -> FlexibilityMetric:
    pct = (value / average) * 100.0 if average != 0 else 0.0
    return FlexibilityMetric(
        window_hours=w,
        avg_savings_per_unit=utils.round_to(value, cfg.decimals),
        savings_per_thousand_units=utils.round_half_up(value * cfg.per_thousand),
        percentage_of_average=utils.round_to(pct, cfg.decimals),
    )


def estimate_from_daily(
    records: Iterable[DailyRecord] | pd.DataFrame,
    windows: Optional[Iterable[int]] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[FlexibilityResult]:
    """
    Approximate flexibility metrics from daily aggregates.

    Uses the average daily (max - min) spread times a per-window fraction.
    No records gives None (insufficient data).
    """
    cfg = config or default_config()
    wins = check_windows(windows) if windows is not None else cfg.windows
    frame = records if isinstance(records, pd.DataFrame) else daily.records_frame(records)
    if frame.empty:
        return None

    avg_spread = float((frame["max_value"] - frame["min_value"]).mean())
    average = float(frame["avg_value"].mean())
    fracs = _fractions(wins, cfg.estimation.spread_fractions)
    metrics = {
        utils.window_label(w): _estimated_metric(avg_spread * f, w, average, cfg)
        for w, f in zip(wins, fracs)
    }
    return FlexibilityResult(
        metrics=metrics,
        is_estimated=True,
        source_point_count=len(frame),
        average_value=utils.round_to(average, cfg.decimals),
        windows=list(wins),
    )


def estimate_from_mean(
    mean_value: Optional[float],
    windows: Optional[Iterable[int]] = None,
    *,
    config: Optional[EngineConfig] = None,
    source_point_count: int = 0,
) -> Optional[FlexibilityResult]:
    """
    Carbon fallback when only an average intensity is known.

    Assumes intensity swings by ``mean_variation`` of its mean between peak
    and off-peak, and that longer windows capture more of that swing.
    """
    if mean_value is None or not np.isfinite(mean_value):
        return None
    cfg = config or default_config()
    wins = check_windows(windows) if windows is not None else cfg.windows
    variation = float(mean_value) * cfg.estimation.mean_variation
    fracs = _fractions(wins, cfg.estimation.variation_fractions)
    metrics = {
        utils.window_label(w): _estimated_metric(variation * f, w, float(mean_value), cfg)
        for w, f in zip(wins, fracs)
    }
    return FlexibilityResult(
        metrics=metrics,
        is_estimated=True,
        source_point_count=source_point_count,
        average_value=utils.round_to(float(mean_value), cfg.decimals),
        windows=list(wins),
    )


def hybrid_flexibility(
    static: pd.Series,
    live: Optional[pd.Series] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    *,
    daily_records: Optional[Iterable[DailyRecord]] = None,
    windows: Optional[Iterable[int]] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[FlexibilityResult]:
    """
    Flexibility metrics for [start, end] from the static archive plus live data.

    Exact when the merged hourly series has enough points; otherwise an
    estimate from daily records in the window (``daily_records`` when given,
    else the daily aggregation of the merged series); None when there are
    no daily records either.
    """
    cfg = config or default_config()
    merged = flexibility.as_hourly(merge_series(static, live, start, end))
    result = flexibility.compute_flexibility(merged, windows, config=cfg)
    if result is not None:
        return result

    if daily_records is not None:
        recs = daily.filter_daily(daily_records, start, end)
    else:
        recs = daily.daily_records(merged, decimals=cfg.decimals)
    logger.debug(
        "Only %d hourly points in window; estimating from %d daily records",
        len(merged),
        len(recs),
    )
    return estimate_from_daily(recs, windows, config=cfg)
