from __future__ import annotations

from typing import Mapping, Optional

import pandas as pd

from .. import countries
from ..config import FeedSettings
from .base import Feed, FeedRegistry, HttpFeed, StaticFeed, to_hourly
from .carbon import ElectricityMapsFeed, NesoFeed, parse_electricity_maps, parse_neso
from .entsoe import EntsoeFeed, parse_day_ahead


def default_registry(
    settings: Optional[FeedSettings] = None,
    *,
    static_prices: Optional[Mapping[str, pd.Series]] = None,
    static_carbon: Optional[Mapping[str, pd.Series]] = None,
) -> FeedRegistry:
    """
    Provider table for every known country.

      - prices: static archive, then ENTSO-E when a key is configured
      - carbon: static archive; GB uses NESO, other countries Electricity Maps
        when a key is configured
    """
    settings = settings or FeedSettings()
    registry = FeedRegistry()
    static_prices = static_prices or {}
    static_carbon = static_carbon or {}

    for iso3 in countries.COUNTRIES:
        if iso3 in static_prices:
            registry.register(iso3, "price", StaticFeed(static_prices[iso3]))
        area = countries.ENTSOE_AREAS.get(iso3)
        if area and settings.entsoe_api_key:
            registry.register(
                iso3,
                "price",
                EntsoeFeed(
                    area,
                    settings.entsoe_api_key,
                    days=settings.price_lookback_days,
                    timeout_s=settings.timeout_s,
                ),
            )

        if iso3 in static_carbon:
            registry.register(iso3, "carbon", StaticFeed(static_carbon[iso3]))
        if iso3 == "GBR":
            registry.register(
                iso3,
                "carbon",
                NesoFeed(hours=settings.carbon_lookback_hours, timeout_s=settings.timeout_s),
            )
            continue
        zone = countries.ELECTRICITY_MAPS_ZONES.get(iso3)
        if zone and settings.electricity_maps_api_key:
            registry.register(
                iso3,
                "carbon",
                ElectricityMapsFeed(
                    zone, settings.electricity_maps_api_key, timeout_s=settings.timeout_s
                ),
            )
    return registry


__all__ = [
    "Feed",
    "FeedRegistry",
    "HttpFeed",
    "StaticFeed",
    "EntsoeFeed",
    "NesoFeed",
    "ElectricityMapsFeed",
    "default_registry",
    "parse_day_ahead",
    "parse_neso",
    "parse_electricity_maps",
    "to_hourly",
]
