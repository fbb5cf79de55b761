"""Unit tests for RT hourly averaging."""
import random

import pandas as pd
import pytest

from virtual_energy.core.hourly import average_rt_to_hourly
from virtual_energy.core.market import PricePoint


def _sample(ts, price: float) -> PricePoint:
    return PricePoint(timestamp=ts, settlement_point="HB_NORTH", price=price)


class TestAverageRtToHourly:
    def test_simple_mean(self) -> None:
        samples = [
            _sample("2024-06-01T14:00:00-05:00", 50.0),
            _sample("2024-06-01T14:05:00-05:00", 60.0),
            _sample("2024-06-01T14:10:00-05:00", 70.0),
        ]
        result = average_rt_to_hourly(samples)

        assert len(result) == 1
        assert result[0].avg_price == pytest.approx(60.0)
        assert result[0].sample_count == 3
        assert result[0].settlement_point == "HB_NORTH"
        assert result[0].hour_start == pd.Timestamp("2024-06-01 14:00").tz_localize("America/Chicago")

    def test_buckets_are_ascending(self) -> None:
        samples = [
            _sample("2024-06-01T16:20:00-05:00", 10.0),
            _sample("2024-06-01T14:55:00-05:00", 20.0),
            _sample("2024-06-01T15:00:00-05:00", 30.0),
        ]
        hours = [a.hour_start.hour for a in average_rt_to_hourly(samples)]
        assert hours == [14, 15, 16]

    def test_utc_input_is_bucketed_in_market_time(self) -> None:
        # 19:30 UTC is 14:30 CDT
        result = average_rt_to_hourly([_sample("2024-06-01T19:30:00Z", 42.0)])
        assert result[0].hour_start.hour == 14
        assert str(result[0].hour_start.tz) == "America/Chicago"

    def test_empty_input(self) -> None:
        assert average_rt_to_hourly([]) == []

    def test_order_invariant(self) -> None:
        samples = [
            _sample(pd.Timestamp("2024-06-01 10:00", tz="America/Chicago") + pd.Timedelta(minutes=5 * i),
                    price)
            for i, price in enumerate([0.1, 0.2, 0.3, 17.77, -3.5, 1e-9, 22.2, 0.7, 13.0, 8.8, 4.4, 9.9])
        ]
        expected = average_rt_to_hourly(samples)

        rng = random.Random(42)
        for _ in range(5):
            shuffled = list(samples)
            rng.shuffle(shuffled)
            assert average_rt_to_hourly(shuffled) == expected


class TestDaylightSaving:
    def test_fall_back_repeated_hour_is_two_buckets(self) -> None:
        # 2024-11-03: 01:00-02:00 CDT then 01:00-02:00 CST
        samples = [
            _sample("2024-11-03T01:10:00-05:00", 10.0),
            _sample("2024-11-03T01:20:00-05:00", 20.0),
            _sample("2024-11-03T01:10:00-06:00", 100.0),
        ]
        result = average_rt_to_hourly(samples)

        assert len(result) == 2
        first, second = result
        assert first.hour_start < second.hour_start
        assert first.hour_start.hour == second.hour_start.hour == 1
        assert first.avg_price == pytest.approx(15.0)
        assert second.avg_price == pytest.approx(100.0)

    def test_spring_forward_hours(self) -> None:
        # 2024-03-10: 02:00 CST does not exist; 01:55 CST is followed by 03:00 CDT
        samples = [
            _sample("2024-03-10T01:55:00-06:00", 10.0),
            _sample("2024-03-10T03:00:00-05:00", 30.0),
        ]
        result = average_rt_to_hourly(samples)
        assert [a.hour_start.hour for a in result] == [1, 3]
