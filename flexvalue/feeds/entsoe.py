"""ENTSO-E Transparency Platform day-ahead prices (document type A44)."""

from __future__ import annotations
import logging
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Optional

import pandas as pd
import requests

from .. import normalize
from ..core.types import empty_series
from ..exceptions import FeedError
from .base import HttpFeed, to_hourly

logger = logging.getLogger(__name__)

API_URL = "https://web-api.tp.entsoe.eu/api"


def _utcnow() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


RESOLUTIONS: Dict[str, pd.Timedelta] = {
    "PT15M": pd.Timedelta(minutes=15),
    "PT30M": pd.Timedelta(minutes=30),
    "PT60M": pd.Timedelta(hours=1),
}


def parse_day_ahead(xml: bytes | str) -> pd.Series:
    """
    Publication_MarketDocument XML -> normalised price Series (UTC).

    Each Period has a start and a resolution; point ``position`` is 1-based.
    An Acknowledgement document (no data for the period) gives an empty Series.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        raise FeedError(f"ENTSO-E returned malformed XML: {exc}") from exc

    if root.tag.endswith("Acknowledgement_MarketDocument"):
        reason = root.findtext(".//{*}Reason/{*}text") or "no data"
        logger.debug("ENTSO-E acknowledgement: %s", reason)
        return empty_series()

    points = []
    for period in root.findall(".//{*}Period"):
        start_text = period.findtext("{*}timeInterval/{*}start")
        if start_text is None:
            continue
        resolution = period.findtext("{*}resolution") or "PT60M"
        step = RESOLUTIONS.get(resolution)
        if step is None:
            raise FeedError(f"Unsupported ENTSO-E resolution {resolution}")
        start = pd.Timestamp(start_text)
        for point in period.findall("{*}Point"):
            pos = point.findtext("{*}position")
            amount = point.findtext("{*}price.amount")
            if pos is None or amount is None:
                continue
            points.append((start + step * (int(pos) - 1), amount))
    return normalize.from_observations(points, tz="UTC")


class EntsoeFeed(HttpFeed):
    """Day-ahead prices for one bidding zone over the last ``days`` days."""

    name = "entsoe"
    priority = 10

    def __init__(
        self,
        area_code: str,
        api_key: str,
        *,
        days: int = 7,
        hourly: bool = True,
        timeout_s: float = 20.0,
        session: Optional[requests.Session] = None,
        priority: Optional[int] = None,
        clock: Callable[[], pd.Timestamp] = _utcnow,
    ):
        super().__init__(timeout_s=timeout_s, session=session, priority=priority)
        self.area_code = area_code
        self.api_key = api_key
        self.days = days
        self.hourly = hourly
        self.clock = clock

    def params(self) -> Dict[str, str]:
        end = self.clock().tz_convert("UTC").floor("h")
        start = end - pd.Timedelta(days=self.days)
        return {
            "securityToken": self.api_key,
            "documentType": "A44",
            "in_Domain": self.area_code,
            "out_Domain": self.area_code,
            "periodStart": start.strftime("%Y%m%d%H%M"),
            "periodEnd": end.strftime("%Y%m%d%H%M"),
        }

    def fetch_recent(self) -> pd.Series:
        resp = self._get(API_URL, params=self.params())
        prices = parse_day_ahead(resp.content)
        if prices.empty:
            logger.warning("Empty price series for %s", self.area_code)
            return prices
        return to_hourly(prices) if self.hourly else prices

    def __repr__(self) -> str:
        return f"EntsoeFeed(area_code={self.area_code!r}, days={self.days})"
