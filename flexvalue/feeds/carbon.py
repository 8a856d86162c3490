"""Live carbon-intensity feeds: NESO (GB) and Electricity Maps."""

from __future__ import annotations
from typing import Any, Callable, Optional

import pandas as pd
import requests

from .. import normalize
from ..exceptions import FeedError
from .base import HttpFeed, to_hourly

NESO_API_URL = "https://api.carbonintensity.org.uk/intensity/{from_dt}/{to_dt}"
ELECTRICITY_MAPS_API_URL = "https://api.electricitymap.org/v3/carbon-intensity/history"


def _utcnow() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


def parse_neso(payload: Any) -> pd.Series:
    """NESO intensity payload -> Series; actual intensity, else the forecast."""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise FeedError("NESO payload has no 'data' list")
    points = []
    for item in payload["data"]:
        intensity = item.get("intensity") or {}
        value = intensity.get("actual")
        if value is None:
            value = intensity.get("forecast")
        points.append((item.get("from"), value))
    return normalize.from_observations(points, tz="UTC")


def parse_electricity_maps(payload: Any) -> pd.Series:
    """Electricity Maps history payload -> Series."""
    if not isinstance(payload, dict) or not isinstance(payload.get("history"), list):
        raise FeedError("Electricity Maps payload has no 'history' list")
    points = [(h.get("datetime"), h.get("carbonIntensity")) for h in payload["history"]]
    return normalize.from_observations(points, tz="UTC")


class NesoFeed(HttpFeed):
    """GB carbon intensity (half-hourly, no key needed) over the last ``hours`` hours."""

    name = "neso"
    priority = 20

    def __init__(
        self,
        *,
        hours: int = 48,
        hourly: bool = True,
        timeout_s: float = 20.0,
        session: Optional[requests.Session] = None,
        priority: Optional[int] = None,
        clock: Callable[[], pd.Timestamp] = _utcnow,
    ):
        super().__init__(timeout_s=timeout_s, session=session, priority=priority)
        self.hours = hours
        self.hourly = hourly
        self.clock = clock

    def url(self) -> str:
        end = self.clock().tz_convert("UTC")
        start = end - pd.Timedelta(hours=self.hours)
        return NESO_API_URL.format(
            from_dt=start.strftime("%Y-%m-%dT%H:%MZ"),
            to_dt=end.strftime("%Y-%m-%dT%H:%MZ"),
        )

    def fetch_recent(self) -> pd.Series:
        series = parse_neso(self._json(self.url()))
        return to_hourly(series) if self.hourly else series


class ElectricityMapsFeed(HttpFeed):
    """Past 24h of hourly carbon intensity for one Electricity Maps zone."""

    name = "electricity_maps"
    priority = 10

    def __init__(
        self,
        zone: str,
        api_key: str,
        *,
        timeout_s: float = 20.0,
        session: Optional[requests.Session] = None,
        priority: Optional[int] = None,
    ):
        super().__init__(timeout_s=timeout_s, session=session, priority=priority)
        self.zone = zone
        self.api_key = api_key

    def fetch_recent(self) -> pd.Series:
        payload = self._json(
            ELECTRICITY_MAPS_API_URL,
            params={"zone": self.zone},
            headers={"auth-token": self.api_key},
        )
        return parse_electricity_maps(payload)

    def __repr__(self) -> str:
        return f"ElectricityMapsFeed(zone={self.zone!r})"
