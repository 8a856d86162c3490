from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional, TypedDict
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd
from pydantic import BaseModel, Field

from . import canon

Metric = Literal["price", "carbon"]
PriceSource = Literal["static", "hybrid"]


###
### INPUT
###


class Observation(BaseModel):
    """One raw reading. Values are validated later, during normalisation."""

    timestamp: datetime | str
    value: Any = None


class FeedData(BaseModel):
    """Observations from one named source; higher priority wins collisions."""

    name: str
    priority: int = 0
    observations: list[Observation] = Field(default_factory=list)


###
### OUTPUT
###


class DailyRecord(TypedDict):
    date: str  # YYYY-MM-DD
    avg_value: float
    min_value: float
    max_value: float


class FlexibilityMetric(TypedDict):
    window_hours: int
    avg_savings_per_unit: float
    savings_per_thousand_units: int
    percentage_of_average: float


class Summary(TypedDict):
    current_value: Optional[float]
    average_value: Optional[float]


class PriceStats(TypedDict):
    count: int
    current: Optional[float]
    average: Optional[float]
    min: Optional[float]
    max: Optional[float]


class SeriesRange(TypedDict):
    start: Optional[str]
    end: Optional[str]
    count: int


class CountryOverview(TypedDict):
    name: str
    iso2: str
    current_price: Optional[float]
    avg_price_7d: Optional[float]
    avg_carbon_7d: Optional[float]


class CountryMeta(TypedDict):
    iso3: str
    name: str
    iso2: str
    price_range: SeriesRange
    carbon_range: SeriesRange


class HourlyPoint(TypedDict):
    datetime: str
    value: float


class CountryStats(TypedDict):
    avg_price: Optional[float]
    avg_carbon: Optional[float]
    price_change_24h: Optional[float]  # percent


class CountryPayload(TypedDict, total=False):
    iso3: str
    name: str
    recent_hourly: List[HourlyPoint]
    daily_prices: List[DailyRecord]
    carbon_intensity: List[Dict[str, float | str]]
    flexibility_metrics: Optional[Dict[str, Any]]
    carbon_flexibility_metrics: Optional[Dict[str, Any]]
    stats: CountryStats


@dataclass
class FlexibilityResult:
    """Per-window metrics plus provenance.

    ``is_estimated`` separates exact results computed from an hourly series
    from approximations derived from daily aggregates.
    """

    metrics: Dict[str, FlexibilityMetric]
    is_estimated: bool
    source_point_count: int
    average_value: Optional[float] = None
    windows: List[int] = field(default_factory=list)

    def __getitem__(self, label: str) -> FlexibilityMetric:
        return self.metrics[label]

    def to_payload(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            label: {
                "avg_savings_per_unit": m["avg_savings_per_unit"],
                "savings_per_thousand_units": m["savings_per_thousand_units"],
                "percentage_of_average": m["percentage_of_average"],
            }
            for label, m in self.metrics.items()
        }
        out["provenance"] = {
            "is_estimated": self.is_estimated,
            "source_point_count": self.source_point_count,
        }
        return out


def empty_series(tz: str = canon.DEFAULT_TZ) -> pd.Series:
    idx = pd.DatetimeIndex([], tz=tz, name=canon.INDEX_NAME)
    return pd.Series([], index=idx, dtype="float64", name=canon.VALUE_NAME)
