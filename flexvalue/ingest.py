from __future__ import annotations
import logging
from pathlib import Path
from typing import IO, Dict

import pandas as pd

from . import countries, normalize, utils
from .core import canon
from .exceptions import IngestError

logger = logging.getLogger(__name__)

PRICE_COLUMNS = ("Country", "Datetime (UTC)", "Price (EUR/MWhe)")
CARBON_COLUMNS = ("ISO", "Timestamp", "Value")


def _require_columns(df: pd.DataFrame, required: tuple[str, ...], what: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise IngestError(f"{what} archive missing column(s): {', '.join(missing)}")


def _split_by_country(df: pd.DataFrame, *, tz: str) -> Dict[str, pd.Series]:
    """Frame with iso3, t, value columns -> {iso3: normalised Series}."""
    out: Dict[str, pd.Series] = {}
    for iso3, g in df.groupby("iso3", sort=True):
        s = pd.Series(g["value"].to_numpy(), index=pd.DatetimeIndex(g["t"]))
        out[str(iso3)] = normalize.from_pandas(s, tz=tz)
    return out


def from_price_frame(df: pd.DataFrame, *, tz: str = canon.DEFAULT_TZ) -> Dict[str, pd.Series]:
    """
    Hourly day-ahead price archive -> {iso3: Series}.

    Expects columns 'Country', 'Datetime (UTC)', 'Price (EUR/MWhe)'.
    Countries outside the known table are skipped.
    """
    _require_columns(df, PRICE_COLUMNS, "Price")
    iso3 = df["Country"].astype(str).map(countries.iso3_from_name)
    unknown = df.loc[iso3.isna(), "Country"].unique()
    if len(unknown):
        logger.debug("Skipping unknown countries in price archive: %s", ", ".join(map(str, unknown)))
    t = utils.safe_localize_series(df["Datetime (UTC)"], "UTC").dt.tz_convert(tz)
    frame = pd.DataFrame(
        {
            "iso3": iso3,
            "t": t,
            "value": pd.to_numeric(df["Price (EUR/MWhe)"], errors="coerce"),
        }
    ).dropna(subset=["iso3"])
    return _split_by_country(frame, tz=tz)


def from_carbon_frame(df: pd.DataFrame, *, tz: str = canon.DEFAULT_TZ) -> Dict[str, pd.Series]:
    """
    Daily carbon-intensity archive -> {iso3: Series at local midnight}.

    Expects columns 'ISO', 'Timestamp' (YYYY/M/D), 'Value'.
    """
    _require_columns(df, CARBON_COLUMNS, "Carbon")
    iso3 = df["ISO"].astype(str).str.strip().str.upper()
    frame = pd.DataFrame(
        {
            "iso3": iso3.where(iso3.isin(list(countries.COUNTRIES))),
            "t": utils.safe_localize_series(df["Timestamp"].astype(str), tz, format="%Y/%m/%d"),
            "value": pd.to_numeric(df["Value"], errors="coerce"),
        }
    ).dropna(subset=["iso3"])
    return _split_by_country(frame, tz=tz)


def read_price_archive(
    path_or_buffer: str | Path | IO[str], *, tz: str = canon.DEFAULT_TZ
) -> Dict[str, pd.Series]:
    return from_price_frame(pd.read_csv(path_or_buffer, skipinitialspace=True), tz=tz)


def read_carbon_archive(
    path_or_buffer: str | Path | IO[str], *, tz: str = canon.DEFAULT_TZ
) -> Dict[str, pd.Series]:
    return from_carbon_frame(pd.read_csv(path_or_buffer, skipinitialspace=True), tz=tz)
