from __future__ import annotations
import numpy as np
import pandas as pd
from typing import cast

from . import exceptions
from .core import canon


def assert_series(series: pd.Series) -> None:
    if not isinstance(series, pd.Series):
        raise exceptions.SeriesError("Expected a pandas Series.")
    if not isinstance(series.index, pd.DatetimeIndex):
        raise exceptions.SeriesError("Index must be a DatetimeIndex.")
    if series.index.name != canon.INDEX_NAME:
        raise exceptions.SeriesError(f"Index must be '{canon.INDEX_NAME}'.")
    tz_index = cast(pd.DatetimeIndex, series.index)
    if tz_index.tz is None:
        raise exceptions.SeriesError("Index must be tz-aware.")
    if not tz_index.is_unique:
        raise exceptions.SeriesError("Timestamps must be unique.")
    if not tz_index.is_monotonic_increasing:
        raise exceptions.SeriesError("Index must be sorted ascending.")
    try:
        values = series.to_numpy(dtype=float, na_value=np.nan)
    except (TypeError, ValueError):
        raise exceptions.SeriesError("Values must be numeric.") from None
    if len(values) and not np.isfinite(values).all():
        raise exceptions.SeriesError("Values must be finite numbers.")


def is_normalized(series: pd.Series) -> bool:
    try:
        assert_series(series)
    except exceptions.SeriesError:
        return False
    return True


def ensure_series(obj: pd.Series | pd.DataFrame, tz: str = canon.DEFAULT_TZ) -> pd.Series:
    """Return obj unchanged when already normalised, otherwise normalise it."""
    from . import normalize

    if isinstance(obj, pd.Series) and is_normalized(obj):
        return obj
    if isinstance(obj, pd.DataFrame):
        return normalize.from_dataframe(obj, tz=tz)
    return normalize.from_pandas(obj, tz=tz)
