from __future__ import annotations
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd

from . import utils, validate
from .core import canon
from .core.types import DailyRecord

DAILY_COLUMNS = ["avg_value", "min_value", "max_value"]


def aggregate_daily(series: pd.Series) -> pd.DataFrame:
    """
    Mean/min/max per calendar date, at full precision.

    Dates come from the series' own timezone. Dates without observations
    produce no row; the frame is sparse, not a contiguous calendar.
    """
    validate.assert_series(series)
    if series.empty:
        out = pd.DataFrame(columns=DAILY_COLUMNS, dtype=float)
        out.index.name = "date"
        return out

    dates = pd.Index(utils.index_dates(pd.DatetimeIndex(series.index)), name="date")
    out = (
        series.groupby(dates, sort=True)
        .agg(["mean", "min", "max"])
        .rename(columns={"mean": "avg_value", "min": "min_value", "max": "max_value"})
    )
    return out[DAILY_COLUMNS]


def daily_records(
    series: pd.Series, *, decimals: int = canon.DECIMALS
) -> List[DailyRecord]:
    """One rounded DailyRecord per date present in the series, ascending."""
    frame = aggregate_daily(series)
    return [
        DailyRecord(
            date=d.isoformat(),
            avg_value=utils.round_to(row.avg_value, decimals),
            min_value=utils.round_to(row.min_value, decimals),
            max_value=utils.round_to(row.max_value, decimals),
        )
        for d, row in zip(frame.index, frame.itertuples(index=False))
    ]


def records_frame(records: Iterable[DailyRecord]) -> pd.DataFrame:
    """DailyRecord list -> frame indexed by date (inverse of daily_records)."""
    rows = list(records)
    if not rows:
        out = pd.DataFrame(columns=DAILY_COLUMNS, dtype=float)
        out.index.name = "date"
        return out
    out = pd.DataFrame(rows)
    out["date"] = [utils.to_date(d) for d in out["date"]]
    return out.set_index("date").sort_index()[DAILY_COLUMNS].astype(float)


def filter_daily(
    records: Iterable[DailyRecord],
    start: Optional[str | date] = None,
    end: Optional[str | date] = None,
) -> List[DailyRecord]:
    """Records whose date lies within [start, end], inclusive."""
    lo = utils.to_date(start) if start is not None else None
    hi = utils.to_date(end) if end is not None else None
    out: List[DailyRecord] = []
    for rec in records:
        d = utils.to_date(rec["date"])
        if lo is not None and d < lo:
            continue
        if hi is not None and d > hi:
            continue
        out.append(rec)
    return out


def daily_values(series: pd.Series, *, decimals: int = canon.DECIMALS) -> List[dict]:
    """
    Already-daily series (e.g. carbon intensity) -> [{'date', 'value'}] records.

    When several readings share a date they are averaged.
    """
    frame = aggregate_daily(series)
    return [
        {"date": d.isoformat(), "value": utils.round_to(v, decimals)}
        for d, v in frame["avg_value"].items()
    ]
