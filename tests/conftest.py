import pandas as pd
import pytest
import requests

from flexvalue import normalize

TZ = "UTC"


def make_series(values, start="2024-01-01", freq="1h", tz=TZ):
    idx = pd.date_range(start, periods=len(values), freq=freq, tz=tz)
    return normalize.from_pandas(pd.Series(list(values), index=idx), tz=tz)


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def alternating_24():
    # 50, 40, 50, 40, ... one day of hourly prices
    return make_series([50.0 if i % 2 == 0 else 40.0 for i in range(24)])


@pytest.fixture
def hourly_30_days():
    # 720 hourly prices with a daily shape: cheap nights, expensive evenings
    values = [40.0 + 30.0 * ((i % 24) in range(17, 21)) - 15.0 * ((i % 24) < 5) for i in range(720)]
    return make_series(values, start="2024-03-01")


@pytest.fixture
def daily_carbon():
    return make_series([300.0 + (i % 5) * 10.0 for i in range(40)], start="2024-02-01", freq="1D")


class FakeResponse:
    def __init__(self, *, json_data=None, content=b"", status=200):
        self._json = json_data
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeSession:
    """Records calls to get() and answers with a canned response."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def fake_http():
    def _make(**kwargs):
        error = kwargs.pop("error", None)
        return FakeSession(error if error is not None else FakeResponse(**kwargs))

    return _make
