"""Tests for turning raw feed observations into a canonical Series."""

import math

import pandas as pd
import pytest

from flexvalue import normalize, validate
from flexvalue.core import canon
from flexvalue.core.types import FeedData, Observation
from flexvalue.exceptions import SeriesError


def test_from_observations_sorts_and_names():
    obs = [
        ("2024-01-01T02:00:00Z", 3.0),
        ("2024-01-01T00:00:00Z", 1.0),
        ("2024-01-01T01:00:00Z", 2.0),
    ]
    s = normalize.from_observations(obs)
    validate.assert_series(s)
    assert s.index.name == canon.INDEX_NAME
    assert s.name == canon.VALUE_NAME
    assert s.tolist() == [1.0, 2.0, 3.0]
    assert s.index.is_monotonic_increasing


def test_bad_values_are_dropped_not_zero_filled():
    obs = [
        ("2024-01-01T00:00:00Z", 1.0),
        ("2024-01-01T01:00:00Z", None),
        ("2024-01-01T02:00:00Z", "n/a"),
        ("2024-01-01T03:00:00Z", math.inf),
        ("2024-01-01T04:00:00Z", float("nan")),
        ("not a timestamp", 5.0),
        ("2024-01-01T05:00:00Z", "6.5"),
    ]
    s = normalize.from_observations(obs)
    assert s.tolist() == [1.0, 6.5]
    assert 0.0 not in s.tolist()


def test_empty_input_gives_empty_series():
    s = normalize.from_observations([])
    assert s.empty
    validate.assert_series(s)

    only_bad = normalize.from_observations([("2024-01-01T00:00:00Z", "x")])
    assert only_bad.empty


def test_higher_priority_feed_wins_collisions():
    static = ("archive", 0, [("2024-01-01T00:00Z", 5.0), ("2024-01-01T01:00Z", 6.0)])
    live = ("live", 10, [("2024-01-01T01:00Z", 9.0)])
    # order of feeds must not matter
    for feeds in ([static, live], [live, static]):
        s = normalize.from_feeds(feeds)
        assert s.tolist() == [5.0, 9.0]


def test_same_priority_later_observation_wins():
    s = normalize.from_observations(
        [("2024-01-01T00:00Z", 1.0), ("2024-01-01T00:00Z", 2.0)]
    )
    assert s.tolist() == [2.0]


def test_pydantic_feed_input():
    feed = FeedData(
        name="live",
        priority=3,
        observations=[
            Observation(timestamp="2024-01-01T00:00:00+01:00", value=10),
            Observation(timestamp="2024-01-01T00:00:00Z", value="bad"),
        ],
    )
    s = normalize.from_feeds([feed])
    assert len(s) == 1
    # +01:00 midnight is 23:00 UTC the day before
    assert s.index[0] == pd.Timestamp("2023-12-31T23:00:00Z")


def test_mixed_offsets_and_naive_timestamps():
    obs = [
        {"datetime": "2024-06-01T12:00:00+02:00", "price": 1.0},
        {"datetime": "2024-06-01 11:00:00", "price": 2.0},  # naive, read in tz
    ]
    s = normalize.from_observations(obs, tz="UTC")
    # both refer to 10:00 / 11:00 UTC
    assert [ts.hour for ts in s.index] == [10, 11]
    assert s.tolist() == [1.0, 2.0]


def test_naive_timestamps_follow_requested_tz():
    s = normalize.from_observations([("2024-01-01 00:00", 1.0)], tz="Europe/Berlin")
    assert str(s.index.tz) == "Europe/Berlin"
    assert s.index[0].hour == 0


def test_normalizing_twice_is_identity(series_factory):
    raw = series_factory([3.0, 1.0, 2.0, 5.0])
    once = normalize.from_pandas(raw)
    twice = normalize.from_pandas(once)
    pd.testing.assert_series_equal(once, twice)


def test_from_dataframe_detects_columns_and_priority():
    df = pd.DataFrame(
        {
            "Datetime": ["2024-01-01 01:00", "2024-01-01 00:00", "2024-01-01 01:00"],
            "Price": [10.0, 20.0, 30.0],
            "priority": [5, 0, 0],
        }
    )
    s = normalize.from_dataframe(df)
    assert s.tolist() == [20.0, 10.0]


def test_from_dataframe_requires_value_column():
    df = pd.DataFrame({"timestamp": ["2024-01-01"], "kwh": [1.0]})
    with pytest.raises(SeriesError):
        normalize.from_dataframe(df)


def test_from_pandas_rejects_non_series():
    with pytest.raises(SeriesError):
        normalize.from_pandas([1, 2, 3])


def test_repeated_dst_hour_is_kept():
    s = normalize.from_observations(
        [("2024-10-27 01:00", 1.0), ("2024-10-27 02:00", 2.0), ("2024-10-27 03:00", 3.0)],
        tz="Europe/Berlin",
    )
    assert s.tolist() == [1.0, 2.0, 3.0]
    # a lone 02:00 is read as summer time (UTC+2)
    assert s.index[1] == pd.Timestamp("2024-10-27T00:00:00Z")


def test_both_readings_of_repeated_dst_hour_survive():
    obs = [
        ("2024-10-27 01:00", 1.0),
        ("2024-10-27 02:00", 2.0),
        ("2024-10-27 02:00", 2.5),
        ("2024-10-27 03:00", 3.0),
    ]
    s = normalize.from_observations(obs, tz="Europe/Berlin")
    assert s.tolist() == [1.0, 2.0, 2.5, 3.0]
    assert [ts.strftime("%H:%M") for ts in s.index.tz_convert("UTC")] == [
        "23:00",
        "00:00",
        "01:00",
        "02:00",
    ]


def test_repeated_dst_hour_from_naive_datetime_index():
    idx = pd.DatetimeIndex(
        ["2024-10-27 01:00", "2024-10-27 02:00", "2024-10-27 02:00", "2024-10-27 03:00"]
    )
    s = normalize.from_pandas(pd.Series([1.0, 2.0, 2.5, 3.0], index=idx), tz="Europe/Berlin")
    assert len(s) == 4
    assert s.index.is_unique


def test_dst_hour_is_judged_per_feed():
    static = ("archive", 0, [("2024-10-27 02:00", 2.0)])
    live = ("live", 10, [("2024-10-27 02:00", 9.0)])
    s = normalize.from_feeds([static, live], tz="Europe/Berlin")
    # both feeds mean the same (first) 02:00, so live wins
    assert s.tolist() == [9.0]
