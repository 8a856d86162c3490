from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

import pandas as pd
import requests

from .. import normalize, validate
from ..core import canon
from ..core.types import Metric, empty_series
from ..exceptions import FeedError

logger = logging.getLogger(__name__)


@runtime_checkable
class Feed(Protocol):
    """Anything that can return its most recent observations as a Series."""

    name: str
    priority: int

    def fetch_recent(self) -> pd.Series: ...


def to_hourly(series: pd.Series) -> pd.Series:
    """Mean per clock hour; hours without data are dropped, not filled."""
    validate.assert_series(series)
    if series.empty:
        return series.copy()
    out = series.resample("1h", label="left", closed="left").mean().dropna()
    out.index.name = canon.INDEX_NAME
    return out.rename(canon.VALUE_NAME)


class StaticFeed:
    """An already-loaded archive series, served as-is."""

    def __init__(self, series: pd.Series, *, name: str = "static", priority: int = 0):
        validate.assert_series(series)
        self.series = series
        self.name = name
        self.priority = priority

    def fetch_recent(self) -> pd.Series:
        return self.series.copy()

    def __repr__(self) -> str:
        return f"StaticFeed(name={self.name!r}, points={len(self.series)})"


class HttpFeed:
    """Shared HTTP plumbing for live feeds; subclasses add fetch_recent(). No retries here."""

    name = "http"
    priority = 10

    def __init__(
        self,
        *,
        timeout_s: float = 20.0,
        session: Optional[requests.Session] = None,
        priority: Optional[int] = None,
    ):
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        if priority is not None:
            self.priority = priority

    def _get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout_s)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FeedError(f"{self.name} request failed: {exc}") from exc
        return resp

    def _json(self, url: str, **kwargs: Any) -> Any:
        resp = self._get(url, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise FeedError(f"{self.name} returned invalid JSON") from exc


class FeedRegistry:
    """
    Capability table: (entity, metric) -> feeds, highest priority first.

    Adding a provider means registering another Feed; the analytics do not
    change.
    """

    def __init__(self) -> None:
        self._feeds: Dict[Tuple[str, Metric], List[Feed]] = {}

    def register(self, entity: str, metric: Metric, feed: Feed) -> None:
        if not isinstance(feed, Feed):
            raise TypeError(f"{feed!r} does not implement fetch_recent()")
        self._feeds.setdefault((entity.upper(), metric), []).append(feed)

    def feeds(self, entity: str, metric: Metric) -> List[Feed]:
        found = self._feeds.get((entity.upper(), metric), [])
        return sorted(found, key=lambda f: f.priority, reverse=True)

    def entities(self, metric: Optional[Metric] = None) -> List[str]:
        return sorted({e for (e, m) in self._feeds if metric is None or m == metric})

    def collect(
        self, entity: str, metric: Metric, *, tz: str = canon.DEFAULT_TZ
    ) -> pd.Series:
        """
        Fetch every feed and merge them into one normalised Series.

        Failing feeds are logged and skipped. Timestamp collisions go to the
        higher-priority feed.
        """
        frames: List[pd.DataFrame] = []
        for feed in self.feeds(entity, metric):
            try:
                s = feed.fetch_recent()
            except FeedError as exc:
                logger.warning("Feed %s failed for %s/%s: %s", feed.name, entity, metric, exc)
                continue
            if s is None or s.empty:
                logger.debug("Feed %s returned no data for %s/%s", feed.name, entity, metric)
                continue
            frames.append(
                pd.DataFrame(
                    {
                        "timestamp": pd.DatetimeIndex(s.index).tz_convert(tz),
                        "value": s.to_numpy(),
                        "priority": feed.priority,
                    }
                )
            )
        if not frames:
            return empty_series(tz)
        return normalize.from_dataframe(pd.concat(frames, ignore_index=True), tz=tz)
