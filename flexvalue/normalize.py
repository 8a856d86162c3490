from __future__ import annotations
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from . import utils
from .core import canon
from .core.types import FeedData, Observation, empty_series
from .exceptions import SeriesError

logger = logging.getLogger(__name__)

FeedLike = Union[FeedData, Tuple[str, int, Iterable[Any]], Mapping[str, Any]]


def _observation_pair(obs: Any) -> tuple[Any, Any]:
    """(timestamp, value) from an Observation, a 2-tuple or a mapping."""
    if isinstance(obs, Observation):
        return obs.timestamp, obs.value
    if isinstance(obs, Mapping):
        cols = {str(k).lower(): k for k in obs}
        tkey = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
        vkey = next((cols[k] for k in canon.COMMON_VALUE_NAMES if k in cols), None)
        return (
            obs[tkey] if tkey is not None else None,
            obs[vkey] if vkey is not None else None,
        )
    if isinstance(obs, Sequence) and not isinstance(obs, (str, bytes)) and len(obs) == 2:
        return obs[0], obs[1]
    return None, None


def _coerce_feed(feed: FeedLike) -> tuple[str, int, Iterable[Any]]:
    if isinstance(feed, FeedData):
        return feed.name, feed.priority, feed.observations
    if isinstance(feed, Mapping):
        return (
            str(feed.get("name", "")),
            int(feed.get("priority", 0)),
            feed.get("observations", []),
        )
    name, priority, observations = feed
    return str(name), int(priority), observations


def _resolve(
    timestamps: pd.DatetimeIndex,
    values: np.ndarray,
    priorities: np.ndarray,
    tz: str,
) -> pd.Series:
    """Drop invalid rows, keep the highest-priority value per timestamp, sort."""
    frame = pd.DataFrame(
        {
            "ts": timestamps,
            "value": values,
            "priority": priorities,
            "order": np.arange(len(values)),
        }
    )
    total = len(frame)
    frame = frame[frame["ts"].notna() & np.isfinite(frame["value"].to_numpy(dtype=float))]
    dropped = total - len(frame)
    if dropped:
        logger.debug("Dropped %d of %d observations with bad timestamps or values", dropped, total)

    if frame.empty:
        return empty_series(tz)

    # later rows win within the same priority
    frame = frame.sort_values(["ts", "priority", "order"], kind="mergesort")
    frame = frame.drop_duplicates(subset="ts", keep="last")

    idx = pd.DatetimeIndex(frame["ts"]).as_unit("ns").rename(canon.INDEX_NAME)
    return pd.Series(
        frame["value"].to_numpy(dtype=float), index=idx, name=canon.VALUE_NAME
    )


def from_feeds(feeds: Iterable[FeedLike], *, tz: str = canon.DEFAULT_TZ) -> pd.Series:
    """
    Normalise observations from one or more feeds into a single Series.

      - timestamps parsed into tz (naive ones are taken to be in tz)
      - missing, non-numeric or non-finite values dropped
      - on timestamp collisions the highest-priority feed wins
      - ascending, unique DatetimeIndex named 'timestamp'
    """
    stamps: list[pd.DatetimeIndex] = []
    raw_values: list[float] = []
    prios: list[int] = []
    for feed in feeds:
        name, priority, observations = _coerce_feed(feed)
        feed_ts: list[Any] = []
        for obs in observations:
            ts, value = _observation_pair(obs)
            feed_ts.append(ts)
            raw_values.append(utils.to_float(value))
            prios.append(priority)
        # per feed: a repeated DST hour is judged within one source only
        stamps.append(utils.to_timestamps(feed_ts, tz))
        logger.debug("Feed %r contributed %d observations", name, len(feed_ts))

    timestamps = stamps[0].append(stamps[1:]) if stamps else utils.to_timestamps([], tz)
    return _resolve(
        timestamps,
        np.asarray(raw_values, dtype=float),
        np.asarray(prios, dtype=int),
        tz,
    )


def from_observations(
    observations: Iterable[Any], *, tz: str = canon.DEFAULT_TZ
) -> pd.Series:
    """Single-feed shortcut for from_feeds."""
    return from_feeds([("observations", 0, observations)], tz=tz)


def from_pandas(series: pd.Series, *, tz: str = canon.DEFAULT_TZ) -> pd.Series:
    """Normalise a pandas Series indexed by timestamps."""
    if not isinstance(series, pd.Series):
        raise SeriesError("from_pandas expects a pandas Series.")
    values = pd.to_numeric(series, errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    return _resolve(
        utils.to_timestamps(series.index, tz),
        values,
        np.zeros(len(values), dtype=int),
        tz,
    )


def _auto_columns(df: pd.DataFrame) -> tuple[pd.Series | pd.Index, pd.Series]:
    cols = {str(c).lower(): c for c in df.columns}
    vcol = next((cols[k] for k in canon.COMMON_VALUE_NAMES if k in cols), None)
    if vcol is None:
        raise SeriesError(
            "No value column found. Expected one of: " + ", ".join(canon.COMMON_VALUE_NAMES)
        )
    if isinstance(df.index, pd.DatetimeIndex):
        return df.index, df[vcol]
    tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
    if tcol is None:
        raise SeriesError(
            "No timestamp column found and index is not datetime. "
            "Expected one of: " + ", ".join(canon.COMMON_TIMESTAMP_NAMES)
        )
    return df[tcol], df[vcol]


def from_dataframe(
    df: pd.DataFrame,
    *,
    tz: str = canon.DEFAULT_TZ,
    priority_col: Optional[str] = "priority",
) -> pd.Series:
    """
    Normalise a frame with a timestamp column (or DatetimeIndex) and a value column.

    An optional integer priority column resolves timestamp collisions
    between stacked feeds.
    """
    ts, vals = _auto_columns(df)
    values = pd.to_numeric(vals, errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    if priority_col and priority_col in df.columns:
        prios = pd.to_numeric(df[priority_col], errors="coerce").fillna(0).to_numpy(dtype=int)
    else:
        prios = np.zeros(len(df), dtype=int)
    return _resolve(utils.to_timestamps(ts, tz), values, prios, tz)
