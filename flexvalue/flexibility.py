"""
Window savings: the value of shifting consumption by up to ``w`` hours.

For every position ``i`` the local optimum is the minimum value within
``w`` steps either side (clipped at the series edges). Savings at ``i`` are
``value[i] - local_min``, which is never negative. Per window the reported
average divides the positive savings by the full series length, so it reads
as the expected saving per hour of the whole period.

Window sizes count samples, so ``w`` hours only holds for an hourly series.
Sub-hourly data (15-minute prices, half-hourly carbon) must be resampled
first; ``as_hourly`` does that for any series finer than one hour.

The same function serves price (EUR/MWh) and carbon intensity (gCO2/kWh);
only the units differ.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from . import utils, validate
from .config import EngineConfig, check_windows, default_config
from .core.types import FlexibilityMetric, FlexibilityResult
from .exceptions import SeriesError
from .feeds.base import to_hourly

logger = logging.getLogger(__name__)


def _cadence(series: pd.Series) -> int:
    return utils.infer_cadence_minutes(pd.DatetimeIndex(series.index))


def as_hourly(series: pd.Series) -> pd.Series:
    """Hourly means for a sub-hourly series; hourly or coarser input is returned as-is."""
    validate.assert_series(series)
    if len(series) < 2 or _cadence(series) >= 60:
        return series
    return to_hourly(series)


def _as_values(series: pd.Series | Iterable[float]) -> pd.Series:
    """Positional float Series from a normalised Series or a plain sequence."""
    if isinstance(series, pd.Series):
        validate.assert_series(series)
        cadence = _cadence(series) if len(series) > 1 else 60
        if cadence < 60:
            logger.warning(
                "Series has %d-minute cadence; windows count samples, not hours", cadence
            )
        return pd.Series(series.to_numpy(dtype=float))
    values = np.asarray(list(series), dtype=float)
    if len(values) and not np.isfinite(values).all():
        raise SeriesError("Values must be finite numbers.")
    return pd.Series(values)


def _savings(values: pd.Series, w: int) -> pd.Series:
    local_min = values.rolling(2 * w + 1, center=True, min_periods=1).min()
    return (values - local_min).clip(lower=0.0)


def savings_profile(series: pd.Series | Iterable[float], window_hours: int) -> pd.Series:
    """
    Per-position savings for one window size.

    A centred rolling minimum over ``2 * w + 1`` points with ``min_periods=1``
    is exactly the clipped two-sided window, in O(n).
    """
    (w,) = check_windows([window_hours])
    savings = _savings(_as_values(series), w)
    if isinstance(series, pd.Series):
        savings.index = series.index
    return savings.rename("savings")


def _metric(
    savings: pd.Series, w: int, mean: float, n: int, cfg: EngineConfig
) -> FlexibilityMetric:
    avg = float(savings[savings > 0].sum()) / n
    pct = (avg / mean) * 100.0 if mean != 0 else 0.0
    return FlexibilityMetric(
        window_hours=w,
        avg_savings_per_unit=utils.round_to(avg, cfg.decimals),
        savings_per_thousand_units=utils.round_half_up(avg * cfg.per_thousand),
        percentage_of_average=utils.round_to(pct, cfg.decimals),
    )


def calculate_metrics(
    series: pd.Series | Iterable[float],
    windows: Optional[Iterable[int]] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[Dict[str, FlexibilityMetric]]:
    """
    FlexibilityMetric per window label ('1h', '2h', ...).

    Returns None (insufficient data) when the series is shorter than
    ``config.min_hourly_points``; never a zero-filled result.
    """
    cfg = config or default_config()
    return _calculate(_as_values(series), windows, cfg)


def _calculate(
    values: pd.Series, windows: Optional[Iterable[int]], cfg: EngineConfig
) -> Optional[Dict[str, FlexibilityMetric]]:
    wins = check_windows(windows) if windows is not None else cfg.windows
    n = len(values)
    if n < cfg.min_hourly_points:
        logger.debug(
            "Insufficient data for flexibility metrics: %d < %d points",
            n,
            cfg.min_hourly_points,
        )
        return None

    mean = float(values.mean())
    return {
        utils.window_label(w): _metric(_savings(values, w), w, mean, n, cfg)
        for w in wins
    }


def compute_flexibility(
    series: pd.Series | Iterable[float],
    windows: Optional[Iterable[int]] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> Optional[FlexibilityResult]:
    """Exact metrics tagged with provenance (not estimated, point count)."""
    cfg = config or default_config()
    values = _as_values(series)
    metrics = _calculate(values, windows, cfg)
    if metrics is None:
        return None
    return FlexibilityResult(
        metrics=metrics,
        is_estimated=False,
        source_point_count=len(values),
        average_value=utils.round_to(float(values.mean()), cfg.decimals),
        windows=[m["window_hours"] for m in metrics.values()],
    )
