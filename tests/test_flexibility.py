import numpy as np
import pytest

from flexvalue import flexibility
from flexvalue.config import EngineConfig
from flexvalue.exceptions import ConfigError, SeriesError


def _reference_average(values, w):
    """Plain O(n*w) version of the savings average."""
    n = len(values)
    total = 0.0
    for i in range(n):
        lo, hi = max(0, i - w), min(n, i + w + 1)
        saving = values[i] - min(values[lo:hi])
        if saving > 0:
            total += saving
    return total / n


def test_flat_series_has_zero_savings(series_factory):
    metrics = flexibility.calculate_metrics(series_factory([10.0] * 30))
    assert set(metrics) == {"1h", "2h", "4h", "8h"}
    for m in metrics.values():
        assert m["avg_savings_per_unit"] == 0.0
        assert m["savings_per_thousand_units"] == 0
        assert m["percentage_of_average"] == 0.0


def test_alternating_prices(alternating_24):
    metrics = flexibility.calculate_metrics(alternating_24)
    one = metrics["1h"]
    assert one == {
        "window_hours": 1,
        "avg_savings_per_unit": 5.0,
        "savings_per_thousand_units": 5000,
        "percentage_of_average": 11.11,
    }
    # every 50 already sits next to a 40
    assert metrics["8h"]["avg_savings_per_unit"] == 5.0


def test_too_short_is_insufficient(series_factory):
    assert flexibility.calculate_metrics(series_factory([1.0] * 10)) is None
    assert flexibility.calculate_metrics(series_factory(range(23))) is None
    assert flexibility.calculate_metrics(series_factory(range(24))) is not None
    assert flexibility.compute_flexibility(series_factory(range(5))) is None


def test_all_zero_prices_report_zero_percentage(series_factory):
    metrics = flexibility.calculate_metrics(series_factory([0.0] * 24))
    assert metrics["1h"]["percentage_of_average"] == 0.0


def test_edges_are_clipped(series_factory):
    # spike at position 0 only sees the right-hand neighbours
    values = [100.0] + [10.0] * 23
    metrics = flexibility.calculate_metrics(series_factory(values), [1])
    assert metrics["1h"]["avg_savings_per_unit"] == 3.75

    profile = flexibility.savings_profile(series_factory(values), 1)
    assert profile.iloc[0] == 90.0
    assert (profile.iloc[1:] == 0.0).all()


def test_last_positions_are_included(series_factory):
    values = [10.0] * 23 + [100.0]
    metrics = flexibility.calculate_metrics(series_factory(values), [1])
    assert metrics["1h"]["avg_savings_per_unit"] == 3.75


def test_matches_reference_on_random_prices(series_factory):
    rng = np.random.default_rng(42)
    values = rng.normal(80.0, 30.0, size=200)
    metrics = flexibility.calculate_metrics(series_factory(values), [1, 3, 8, 24])
    for w in (1, 3, 8, 24):
        expected = _reference_average(list(values), w)
        got = metrics[f"{w}h"]
        assert got["avg_savings_per_unit"] == pytest.approx(expected, abs=0.006)
        assert abs(got["savings_per_thousand_units"] - expected * 1000) <= 1


def test_savings_never_negative_and_grow_with_window(series_factory):
    rng = np.random.default_rng(3)
    s = series_factory(rng.uniform(-20.0, 150.0, size=96))
    previous = None
    for w in (1, 2, 4, 8, 12):
        profile = flexibility.savings_profile(s, w)
        assert (profile >= 0).all()
        if previous is not None:
            assert (profile >= previous).all()
        previous = profile

    metrics = flexibility.calculate_metrics(s)
    avgs = [metrics[k]["avg_savings_per_unit"] for k in ("1h", "2h", "4h", "8h")]
    assert avgs == sorted(avgs)


def test_savings_profile_keeps_index(series_factory):
    s = series_factory(range(30))
    profile = flexibility.savings_profile(s, 2)
    assert profile.index.equals(s.index)
    assert profile.name == "savings"


def test_custom_windows_are_sorted_and_labelled(alternating_24):
    metrics = flexibility.calculate_metrics(alternating_24, [3, 1, 3])
    assert list(metrics) == ["1h", "3h"]
    assert metrics["3h"]["window_hours"] == 3


@pytest.mark.parametrize("bad", [[0], [-1], [1.5], ["x"], [True], []])
def test_bad_windows_raise(alternating_24, bad):
    with pytest.raises(ConfigError):
        flexibility.calculate_metrics(alternating_24, bad)


def test_unsorted_series_rejected(series_factory):
    s = series_factory(range(30))
    with pytest.raises(SeriesError):
        flexibility.calculate_metrics(s.iloc[::-1])


def test_plain_sequence_input():
    metrics = flexibility.calculate_metrics([50.0, 40.0] * 12, [1])
    assert metrics["1h"]["avg_savings_per_unit"] == 5.0
    with pytest.raises(SeriesError):
        flexibility.calculate_metrics([1.0] * 23 + [float("nan")])


def test_min_points_is_configurable(series_factory):
    cfg = EngineConfig(min_hourly_points=4)
    assert flexibility.calculate_metrics(series_factory([1.0, 2.0, 1.0, 2.0]), config=cfg)


def test_result_carries_provenance(hourly_30_days):
    result = flexibility.compute_flexibility(hourly_30_days)
    assert result.is_estimated is False
    assert result.source_point_count == 720
    assert result.windows == [1, 2, 4, 8]
    assert result["1h"]["window_hours"] == 1
    assert result.average_value == 41.88

    payload = result.to_payload()
    assert set(payload) == {"1h", "2h", "4h", "8h", "provenance"}
    assert payload["provenance"] == {"is_estimated": False, "source_point_count": 720}
    assert set(payload["4h"]) == {
        "avg_savings_per_unit",
        "savings_per_thousand_units",
        "percentage_of_average",
    }


def test_same_numbers_for_price_and_carbon_units(series_factory):
    values = [200.0, 400.0] * 12
    s = series_factory(values)
    m = flexibility.calculate_metrics(s, [1])["1h"]
    assert m["avg_savings_per_unit"] == 100.0
    assert m["percentage_of_average"] == pytest.approx(33.33)


def test_one_flat_day_is_worth_nothing(series_factory):
    metrics = flexibility.calculate_metrics(series_factory([10.0] * 24))
    assert list(metrics) == ["1h", "2h", "4h", "8h"]
    for m in metrics.values():
        assert m["avg_savings_per_unit"] == 0.0
        assert m["savings_per_thousand_units"] == 0
        assert m["percentage_of_average"] == 0.0


def test_halves_round_up(series_factory):
    # one 1.5 saving over 24 hours: 0.0625 average, 62.5 per thousand
    values = [1.5] + [0.0] * 23
    m = flexibility.calculate_metrics(series_factory(values), [1])["1h"]
    assert m["savings_per_thousand_units"] == 63
    assert m["avg_savings_per_unit"] == 0.06


def test_as_hourly_averages_sub_hourly_series(series_factory):
    s = series_factory([100.0, 100.0, 100.0, 10.0] * 12, freq="30min")
    hourly = flexibility.as_hourly(s)
    assert len(hourly) == 24
    assert hourly.tolist()[:2] == [100.0, 55.0]

    already = series_factory(range(30))
    assert flexibility.as_hourly(already) is already


def test_sub_hourly_input_is_flagged(series_factory, caplog):
    s = series_factory([1.0, 2.0] * 24, freq="15min")
    with caplog.at_level("WARNING"):
        flexibility.calculate_metrics(s)
    assert "15-minute cadence" in caplog.text
