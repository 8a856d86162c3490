# flexvalue/utils.py
from __future__ import annotations
import math
import numpy as np
import pandas as pd
from datetime import date as _date, datetime
from numbers import Real
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from .core import canon


def first_occurrence(naive: pd.DatetimeIndex | pd.Series) -> np.ndarray:
    """
    DST flags for localizing naive wall-clock times.

    In the repeated fall-back hour the first reading of a wall-clock time is
    the summer-time instant and a repeat of it is the winter-time one. The
    flags are ignored for unambiguous times.
    """
    return ~pd.Index(naive).duplicated(keep="first")


def localize_index(idx: pd.DatetimeIndex, tz: str) -> pd.DatetimeIndex:
    """Localize a naive index into tz, or convert an aware one."""
    if idx.tz is None:
        return idx.tz_localize(
            ZoneInfo(tz), ambiguous=first_occurrence(idx), nonexistent="NaT"
        )
    return idx.tz_convert(ZoneInfo(tz))


def safe_localize_series(
    ts: pd.Series, tz: str, *, format: Optional[str] = None
) -> pd.Series:
    """Vectorised parse for a single-format column; unparsable entries become NaT."""
    s = pd.to_datetime(ts, errors="coerce", format=format)
    if getattr(s.dt, "tz", None) is None:
        return s.dt.tz_localize(
            ZoneInfo(tz), ambiguous=first_occurrence(s), nonexistent="NaT"
        )
    return s.dt.tz_convert(ZoneInfo(tz))


def _parse(value: Any) -> pd.Timestamp:
    if value is None or isinstance(value, bool):
        return pd.NaT
    try:
        return pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return pd.NaT


def parse_timestamp(value: Any, tz: str) -> pd.Timestamp:
    """
    Parse one timestamp-like value into tz; NaT when it cannot be parsed.

    A lone naive time in the repeated DST hour is read as summer time.
    """
    ts = _parse(value)
    if pd.isna(ts):
        return pd.NaT
    if ts.tz is None:
        return ts.tz_localize(ZoneInfo(tz), ambiguous=True, nonexistent="NaT")
    return ts.tz_convert(ZoneInfo(tz))


def to_timestamps(values: Iterable[Any], tz: str) -> pd.DatetimeIndex:
    """
    Parse timestamp-like values into a tz-aware DatetimeIndex.

    Already-parsed datetime arrays are localized in one pass; anything else
    (ISO strings with mixed offsets, datetime objects) is parsed per element
    so one bad entry cannot change how the others are read. Naive values are
    localized together so both readings of a repeated DST hour survive.
    """
    if isinstance(values, (pd.Series, pd.Index)) and pd.api.types.is_datetime64_any_dtype(
        values.dtype
    ):
        return localize_index(pd.DatetimeIndex(values), tz)

    zone = ZoneInfo(tz)
    raw = [_parse(v) for v in values]
    out: list[pd.Timestamp] = [pd.NaT] * len(raw)
    naive_pos = []
    for i, ts in enumerate(raw):
        if pd.isna(ts):
            continue
        if ts.tz is None:
            naive_pos.append(i)
        else:
            out[i] = ts.tz_convert(zone)
    if naive_pos:
        local = localize_index(pd.DatetimeIndex([raw[i] for i in naive_pos]), tz)
        for i, ts in zip(naive_pos, local):
            out[i] = ts
    return pd.DatetimeIndex(out, tz=zone)


def to_float(value: Any) -> float:
    """Coerce one reading to float; NaN when missing, non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, Real):
        out = float(value)
    else:
        try:
            out = float(str(value).strip())
        except ValueError:
            return math.nan
    return out if math.isfinite(out) else math.nan


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded towards +inf."""
    return int(np.floor(float(value) + 0.5))


def round_to(value: float, decimals: int = canon.DECIMALS) -> float:
    """Round to ``decimals`` places, halves up (0.125 -> 0.13, not 0.12)."""
    scale = 10.0**decimals
    return float(np.floor(float(value) * scale + 0.5) / scale)


def window_label(hours: int) -> str:
    return f"{int(hours)}h"


def to_date(value: str | _date | datetime | pd.Timestamp) -> _date:
    """'YYYY-MM-DD' / datetime / Timestamp -> calendar date."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, _date):
        return value
    return pd.Timestamp(value).date()


def index_dates(idx: pd.DatetimeIndex) -> np.ndarray:
    """Calendar dates of each timestamp in the index's own timezone."""
    return np.asarray(idx.date)


def date_mask(
    idx: pd.DatetimeIndex,
    start: Optional[str | _date] = None,
    end: Optional[str | _date] = None,
) -> np.ndarray:
    """Boolean mask for timestamps whose calendar date is within [start, end]."""
    mask = np.ones(len(idx), dtype=bool)
    if len(idx) == 0:
        return mask
    dates = index_dates(idx)
    if start is not None:
        mask &= dates >= to_date(start)
    if end is not None:
        mask &= dates <= to_date(end)
    return mask


def isoformat(ts: pd.Timestamp) -> str:
    return pd.Timestamp(ts).isoformat()


def infer_cadence_minutes(idx: pd.DatetimeIndex, default: int = 60) -> int:
    """
    Most common spacing between timestamps, in minutes, ignoring duplicates.
    """
    ts = pd.DatetimeIndex(idx).sort_values().unique()
    if len(ts) < 2:
        return int(default)

    diffs = ts[1:] - ts[:-1]
    diffs_min = (diffs / np.timedelta64(1, "s")).to_numpy(dtype=float) / 60.0
    diffs_min = diffs_min[diffs_min > 0]
    if len(diffs_min) == 0:
        return int(default)

    rounded = np.rint(diffs_min).astype(int)
    vals, counts = np.unique(rounded, return_counts=True)
    return int(vals[np.argmax(counts)])
