"""
Batch path: per-country artifact payloads for the overview and detail views.

Payloads are plain dicts ready for JSON; writing them anywhere is up to the
caller. Flexibility numbers come from the same calculator the interactive
path uses.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from . import countries, daily, flexibility, summary, utils, validate
from .config import EngineConfig, default_config
from .core.types import CountryMeta, CountryPayload, CountryStats, HourlyPoint

logger = logging.getLogger(__name__)


def _mean(series: pd.Series, decimals: int) -> Optional[float]:
    return utils.round_to(float(series.mean()), decimals) if len(series) else None


def is_hourly(series: pd.Series, *, max_cadence_min: int = 60) -> bool:
    """True when the series is sub-daily (hourly or finer)."""
    if len(series) < 2:
        return False
    return utils.infer_cadence_minutes(pd.DatetimeIndex(series.index)) <= max_cadence_min


def recent_hourly(series: pd.Series, points: int) -> list[HourlyPoint]:
    tail = series.iloc[-points:] if points > 0 else series.iloc[:0]
    return [
        HourlyPoint(datetime=utils.isoformat(ts), value=float(v)) for ts, v in tail.items()
    ]


def flexibility_payload(
    series: pd.Series, *, config: Optional[EngineConfig] = None
) -> Optional[Dict[str, Any]]:
    """
    Exact metrics over the most recent ``flexibility_points`` hours.

    Sub-hourly series are averaged to hourly first so window sizes stay in hours.
    """
    cfg = config or default_config()
    hourly = flexibility.as_hourly(series)
    result = flexibility.compute_flexibility(
        hourly.iloc[-cfg.flexibility_points :], config=cfg
    )
    return result.to_payload() if result is not None else None


def country_payload(
    iso3: str,
    price: pd.Series,
    carbon: pd.Series,
    *,
    config: Optional[EngineConfig] = None,
) -> CountryPayload:
    cfg = config or default_config()
    meta = countries.lookup(iso3)
    validate.assert_series(price)
    validate.assert_series(carbon)
    hourly_price = flexibility.as_hourly(price)

    carbon_flex = None
    if is_hourly(carbon):
        carbon_flex = flexibility_payload(carbon, config=cfg)

    carbon_daily = daily.daily_values(carbon, decimals=cfg.decimals)
    carbon_daily_mean = (
        utils.round_to(sum(d["value"] for d in carbon_daily) / len(carbon_daily), cfg.decimals)
        if carbon_daily
        else None
    )

    return CountryPayload(
        iso3=iso3,
        name=meta["name"],
        recent_hourly=recent_hourly(hourly_price, cfg.recent_hourly_points),
        daily_prices=daily.daily_records(price, decimals=cfg.decimals)[-cfg.daily_history_days :],
        carbon_intensity=carbon_daily[-cfg.daily_history_days :],
        flexibility_metrics=flexibility_payload(hourly_price, config=cfg),
        carbon_flexibility_metrics=carbon_flex,
        stats=CountryStats(
            avg_price=_mean(price, cfg.decimals),
            avg_carbon=carbon_daily_mean,
            price_change_24h=summary.price_change_24h(hourly_price, decimals=cfg.decimals),
        ),
    )


def country_meta(iso3: str, price: pd.Series, carbon: pd.Series) -> CountryMeta:
    meta = countries.lookup(iso3)
    return CountryMeta(
        iso3=iso3,
        name=meta["name"],
        iso2=meta["iso2"],
        price_range=summary.series_range(price),
        carbon_range=summary.series_range(carbon),
    )


def available_countries(
    prices: Mapping[str, pd.Series], carbon: Mapping[str, pd.Series]
) -> list[str]:
    """Known countries with both price and carbon data."""
    return sorted(
        iso3
        for iso3 in set(prices) & set(carbon)
        if iso3 in countries.COUNTRIES and len(prices[iso3]) and len(carbon[iso3])
    )


def build_all(
    prices: Mapping[str, pd.Series],
    carbon: Mapping[str, pd.Series],
    *,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """
    Everything the overview and detail views read, keyed by artifact:

      - 'countries': {iso3: CountryMeta}
      - 'summary':   {iso3: CountryOverview}
      - 'payloads':  {iso3: CountryPayload}
    """
    cfg = config or default_config()
    isos = available_countries(prices, carbon)
    logger.info("Building artifacts for %d countries", len(isos))

    payloads: Dict[str, CountryPayload] = {}
    for iso3 in isos:
        payloads[iso3] = country_payload(iso3, prices[iso3], carbon[iso3], config=cfg)
        if payloads[iso3]["flexibility_metrics"] is None:
            logger.info("%s: not enough hourly prices for flexibility metrics", iso3)

    return {
        "countries": {iso3: country_meta(iso3, prices[iso3], carbon[iso3]) for iso3 in isos},
        "summary": summary.overview(
            {i: prices[i] for i in isos},
            {i: carbon[i] for i in isos},
            days=cfg.summary_days,
        ),
        "payloads": payloads,
    }
