from __future__ import annotations
from datetime import datetime
from typing import Dict, Mapping, Optional

import pandas as pd

from . import countries, utils, validate
from .core import canon
from .core.types import CountryOverview, PriceStats, SeriesRange, Summary


def _as_of(series: pd.Series, as_of: Optional[str | datetime | pd.Timestamp]) -> pd.Timestamp:
    idx = pd.DatetimeIndex(series.index)
    if as_of is None:
        return idx.max()
    ts = pd.Timestamp(as_of)
    return ts.tz_localize(idx.tz) if ts.tz is None else ts.tz_convert(idx.tz)


def recent_window(
    series: pd.Series,
    *,
    days: int = canon.DEFAULT_SUMMARY_DAYS,
    as_of: Optional[str | datetime | pd.Timestamp] = None,
) -> pd.Series:
    """Observations in the ``days`` days ending at as_of (default: latest timestamp)."""
    validate.assert_series(series)
    if series.empty:
        return series.copy()
    end = _as_of(series, as_of)
    start = end - pd.Timedelta(days=days)
    idx = pd.DatetimeIndex(series.index)
    return series[(idx > start) & (idx <= end)].copy()


def rollup(
    series: pd.Series,
    *,
    days: int = canon.DEFAULT_SUMMARY_DAYS,
    as_of: Optional[str | datetime | pd.Timestamp] = None,
    decimals: int = canon.DECIMALS,
) -> Summary:
    """
    Latest value and N-day mean.

    An empty window reports both as None, which is distinct from a real
    zero reading.
    """
    window = recent_window(series, days=days, as_of=as_of)
    if window.empty:
        return Summary(current_value=None, average_value=None)
    return Summary(
        current_value=float(window.iloc[-1]),
        average_value=utils.round_to(float(window.mean()), decimals),
    )


def price_stats(series: pd.Series, *, decimals: int = canon.DECIMALS) -> PriceStats:
    """Count plus current/average/min/max over the whole series (e.g. a live feed)."""
    validate.assert_series(series)
    if series.empty:
        return PriceStats(count=0, current=None, average=None, min=None, max=None)
    return PriceStats(
        count=int(len(series)),
        current=utils.round_to(float(series.iloc[-1]), decimals),
        average=utils.round_to(float(series.mean()), decimals),
        min=utils.round_to(float(series.min()), decimals),
        max=utils.round_to(float(series.max()), decimals),
    )


def price_change_24h(
    series: pd.Series, *, decimals: int = canon.DECIMALS
) -> Optional[float]:
    """
    Percent change of the latest hourly value against the one 24 points earlier.

    None with 24 points or fewer, or when the earlier value is zero.
    """
    validate.assert_series(series)
    if len(series) <= 24:
        return None
    current = float(series.iloc[-1])
    earlier = float(series.iloc[-25])
    if earlier == 0:
        return None
    return utils.round_to((current - earlier) / earlier * 100.0, decimals)


def series_range(series: pd.Series) -> SeriesRange:
    validate.assert_series(series)
    if series.empty:
        return SeriesRange(start=None, end=None, count=0)
    return SeriesRange(
        start=utils.isoformat(series.index[0]),
        end=utils.isoformat(series.index[-1]),
        count=int(len(series)),
    )


def country_overview(
    iso3: str,
    price: pd.Series,
    carbon: pd.Series,
    *,
    days: int = canon.DEFAULT_SUMMARY_DAYS,
) -> CountryOverview:
    meta = countries.lookup(iso3)
    p = rollup(price, days=days)
    c = rollup(carbon, days=days)
    return CountryOverview(
        name=meta["name"],
        iso2=meta["iso2"],
        current_price=p["current_value"],
        avg_price_7d=p["average_value"],
        avg_carbon_7d=c["average_value"],
    )


def overview(
    prices: Mapping[str, pd.Series],
    carbon: Mapping[str, pd.Series],
    *,
    days: int = canon.DEFAULT_SUMMARY_DAYS,
) -> Dict[str, CountryOverview]:
    """Overview entries for every known country with both price and carbon data."""
    out: Dict[str, CountryOverview] = {}
    for iso3 in sorted(set(prices) & set(carbon)):
        if iso3 not in countries.COUNTRIES:
            continue
        out[iso3] = country_overview(iso3, prices[iso3], carbon[iso3], days=days)
    return out
