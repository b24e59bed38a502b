"""Tests for stratlab.data.series."""

from datetime import date
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from stratlab.data.series import PriceHistory, PricePoint, PriceSeries
from stratlab.utils.validation import ValidationError

from conftest import make_series


class TestPriceSeries:
    def test_from_closes(self):
        s = PriceSeries.from_closes("X", [date(2021, 1, 4), date(2021, 1, 5)], ["10", 10.5])
        assert len(s) == 2
        assert s.closes == [Decimal("10"), Decimal("10.5")]
        assert s.start_date == date(2021, 1, 4)
        assert s.end_date == date(2021, 1, 5)

    def test_from_closes_length_mismatch(self):
        with pytest.raises(ValidationError, match="differ in length"):
            PriceSeries.from_closes("X", [date(2021, 1, 4)], ["1", "2"])

    def test_rejects_unordered_dates(self):
        with pytest.raises(ValidationError, match="strictly increasing"):
            PriceSeries.from_closes("X", [date(2021, 1, 5), date(2021, 1, 4)], ["1", "2"])

    def test_rejects_duplicate_dates(self):
        with pytest.raises(ValidationError, match="strictly increasing"):
            PriceSeries.from_closes("X", [date(2021, 1, 4), date(2021, 1, 4)], ["1", "2"])

    def test_rejects_negative_close(self):
        with pytest.raises(ValidationError, match="negative"):
            PriceSeries("X", (PricePoint(date(2021, 1, 4), Decimal("-1")),))

    def test_from_frame_sorts_dedups_and_drops_missing(self):
        idx = pd.DatetimeIndex(
            ["2021-01-06", "2021-01-04", "2021-01-05", "2021-01-05", "2021-01-07"],
            name="date",
        )
        df = pd.DataFrame({"close": [3.0, 1.0, 2.0, 2.5, np.nan]}, index=idx)
        with pytest.warns(UserWarning):
            s = PriceSeries.from_frame("X", df)
        assert s.dates == [date(2021, 1, 4), date(2021, 1, 5), date(2021, 1, 6)]
        # Last observation wins for a duplicated date
        assert s.closes == [Decimal("1.0"), Decimal("2.5"), Decimal("3.0")]

    def test_from_frame_date_column(self):
        df = pd.DataFrame({"date": pd.to_datetime(["2021-01-04", "2021-01-05"]), "close": [1.0, 2.0]})
        s = PriceSeries.from_frame("X", df)
        assert s.dates == [date(2021, 1, 4), date(2021, 1, 5)]

    def test_between_is_inclusive(self):
        s = make_series(range(1, 11))
        sub = s.between(s.dates[2], s.dates[5])
        assert len(sub) == 4
        assert sub.start_date == s.dates[2]
        assert sub.end_date == s.dates[5]

    def test_between_empty(self):
        s = make_series([1, 2, 3])
        assert len(s.between(date(1999, 1, 1), date(1999, 12, 31))) == 0

    def test_to_frame(self):
        s = make_series([1.5, 2.5])
        df = s.to_frame()
        assert list(df.columns) == ["close"]
        assert df.index.name == "date"
        np.testing.assert_allclose(df["close"].to_numpy(), [1.5, 2.5])

    def test_to_frame_roundtrip_keeps_decimals(self):
        s = make_series(["101.1", "99.37", "100.0001"])
        back = PriceSeries.from_frame(s.symbol, s.to_frame())
        assert back == s


class TestPriceHistory:
    def test_length_and_indexing(self):
        s = make_series([1, 2, 3, 4, 5])
        h = s.history(3)
        assert len(h) == 3
        assert h[-1].close == Decimal("3")
        assert [p.close for p in h[-2:]] == [Decimal("2"), Decimal("3")]
        with pytest.raises(IndexError):
            h[3]

    def test_out_of_range_length(self):
        s = make_series([1, 2])
        with pytest.raises(IndexError):
            s.history(3)

    def test_is_a_sequence(self):
        h = make_series([1, 2, 3]).history(2)
        assert isinstance(h, PriceHistory)
        assert [p.close for p in h] == [Decimal("1"), Decimal("2")]

    def test_closes_window_and_offset(self):
        h = make_series([1, 2, 3, 4, 5]).history(5)
        assert h.closes(2) == (Decimal("4"), Decimal("5"))
        assert h.closes(2, offset=1) == (Decimal("3"), Decimal("4"))
        assert h.closes(5, offset=1) == ()
        assert h.closes(6) == ()
