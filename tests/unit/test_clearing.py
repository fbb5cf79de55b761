"""Unit tests for bid clearing and P&L."""
import logging
import random

import pandas as pd
import pytest

from virtual_energy.core.clearing import clear_bids, run_clearing, should_bid_clear, summarize_clears
from virtual_energy.core.hourly import average_rt_to_hourly
from virtual_energy.core.market import Bid, BidSide, HourlyAverage, PricePoint


def _hour(hh: int) -> pd.Timestamp:
    return pd.Timestamp(f"2024-01-01 {hh:02d}:00").tz_localize("America/Chicago")


def _bid(hh: int, side: BidSide, price: float, qty: float) -> Bid:
    return Bid(hour_start=_hour(hh), side=side, price=price, quantity_mwh=qty)


def _da(hh: int, price: float) -> PricePoint:
    return PricePoint(timestamp=_hour(hh), settlement_point="HB_HOUSTON", price=price)


def _rt(hh: int, price: float) -> HourlyAverage:
    return HourlyAverage(hour_start=_hour(hh), avg_price=price, settlement_point="HB_HOUSTON")


class TestShouldBidClear:
    def test_buy_clears_at_or_above_da(self) -> None:
        assert should_bid_clear(_bid(8, BidSide.BUY, 50.0, 1.0), 50.0)
        assert should_bid_clear(_bid(8, BidSide.BUY, 50.01, 1.0), 50.0)
        assert not should_bid_clear(_bid(8, BidSide.BUY, 49.99, 1.0), 50.0)

    def test_sell_clears_at_or_below_da(self) -> None:
        assert should_bid_clear(_bid(8, BidSide.SELL, 50.0, 1.0), 50.0)
        assert should_bid_clear(_bid(8, BidSide.SELL, 49.99, 1.0), 50.0)
        assert not should_bid_clear(_bid(8, BidSide.SELL, 50.01, 1.0), 50.0)


class TestReferenceScenario:
    def test_hourly_results(self, reference_bids, reference_da, reference_rt) -> None:
        clears = run_clearing(reference_bids, reference_da, reference_rt)

        assert [c.hour_start for c in clears] == [_hour(8), _hour(9)]
        h8, h9 = clears
        # BUY 100@60 and SELL 50@50 both clear against DA 55
        assert h8.cleared_qty == 50.0
        assert h8.avg_rt_price == pytest.approx(60.0)
        assert h8.pnl == pytest.approx(250.0)
        assert h9.cleared_qty == 75.0
        assert h9.pnl == pytest.approx(375.0)

    def test_summary(self, reference_bids, reference_da, reference_rt) -> None:
        summary = summarize_clears(run_clearing(reference_bids, reference_da, reference_rt))

        assert summary.total_pnl == pytest.approx(625.0)
        assert summary.long_qty == 125.0
        assert summary.short_qty == 0.0
        assert summary.total_cleared_qty == 125.0
        assert summary.hours_with_positions == 2
        assert summary.hours_with_pnl == 2
        assert summary.avg_pnl_per_hour == pytest.approx(312.5)

    def test_idempotent(self, reference_bids, reference_da, reference_rt) -> None:
        first = run_clearing(reference_bids, reference_da, reference_rt)
        second = run_clearing(reference_bids, reference_da, reference_rt)
        assert first == second

    def test_input_order_does_not_matter(self, reference_bids, reference_da, reference_rt) -> None:
        expected = run_clearing(reference_bids, reference_da, reference_rt)

        rng = random.Random(7)
        bids, da, rt = list(reference_bids), list(reference_da), list(reference_rt)
        for items in (bids, da, rt):
            rng.shuffle(items)
        assert run_clearing(bids, da, rt) == expected


class TestMissingData:
    def test_no_da_means_nothing_clears(self) -> None:
        clears = clear_bids([_bid(8, BidSide.BUY, 100.0, 10.0)], [], [_rt(8, 70.0)])

        assert len(clears) == 1
        assert clears[0].da_price is None
        assert clears[0].cleared_qty == 0.0
        assert clears[0].pnl == 0.0

    def test_missing_rt_gives_position_without_pnl(self) -> None:
        clears = clear_bids([_bid(8, BidSide.BUY, 100.0, 10.0)], [_da(8, 50.0)], [])

        assert clears[0].cleared_qty == 10.0
        assert clears[0].avg_rt_price is None
        assert clears[0].spread is None
        assert clears[0].pnl == 0.0

    def test_da_hours_without_bids_are_reported_flat(self) -> None:
        clears = clear_bids([], [_da(8, 50.0), _da(9, 45.0)], [_rt(8, 52.0)])

        assert [c.hour_start for c in clears] == [_hour(8), _hour(9)]
        assert all(c.position == "FLAT" and c.pnl == 0.0 for c in clears)
        assert clears[0].spread == pytest.approx(2.0)

    def test_rt_only_hours_are_excluded(self) -> None:
        clears = clear_bids([_bid(8, BidSide.BUY, 100.0, 1.0)], [_da(8, 50.0)], [_rt(8, 55.0), _rt(10, 80.0)])
        assert [c.hour_start for c in clears] == [_hour(8)]

    def test_bids_without_any_market_data(self, reference_bids) -> None:
        clears = clear_bids(reference_bids, [], [])

        assert [c.hour_start for c in clears] == [_hour(8), _hour(9)]
        assert all(c.da_price is None and c.avg_rt_price is None for c in clears)
        assert all(c.cleared_qty == 0.0 and c.pnl == 0.0 for c in clears)

    def test_empty_inputs(self) -> None:
        assert clear_bids([], [], []) == []
        summary = summarize_clears([])
        assert summary.total_pnl == 0.0
        assert summary.avg_pnl_per_hour == 0.0


class TestPositions:
    def test_net_short_position_loses_when_rt_above_da(self) -> None:
        clears = clear_bids(
            [_bid(8, BidSide.SELL, 20.0, 30.0), _bid(8, BidSide.BUY, 10.0, 100.0)],
            [_da(8, 25.0)],
            [_rt(8, 35.0)],
        )
        # Only the SELL clears: -30 MWh * (35 - 25)
        assert clears[0].cleared_qty == -30.0
        assert clears[0].position == "SHORT"
        assert clears[0].pnl == pytest.approx(-300.0)

        summary = summarize_clears(clears)
        assert summary.short_qty == 30.0
        assert summary.long_qty == 0.0

    def test_offsetting_bids_are_flat(self) -> None:
        clears = clear_bids(
            [_bid(8, BidSide.BUY, 60.0, 40.0), _bid(8, BidSide.SELL, 40.0, 40.0)],
            [_da(8, 50.0)],
            [_rt(8, 90.0)],
        )
        assert clears[0].cleared_qty == 0.0
        assert clears[0].pnl == 0.0
        assert summarize_clears(clears).hours_with_positions == 0

    def test_negative_prices(self) -> None:
        clears = clear_bids([_bid(8, BidSide.SELL, 1.0, 10.0)], [_da(8, -5.0)], [_rt(8, -15.0)])
        # SELL 1.0 > DA -5.0 does not clear
        assert clears[0].cleared_qty == 0.0

        clears = clear_bids([_bid(8, BidSide.BUY, 1.0, 10.0)], [_da(8, -5.0)], [_rt(8, -15.0)])
        assert clears[0].pnl == pytest.approx(-100.0)

    def test_bid_count_per_hour_is_not_capped(self) -> None:
        bids = [_bid(8, BidSide.BUY, 60.0, 1.0) for _ in range(12)]

        clears = clear_bids(bids, [_da(8, 50.0)], [_rt(8, 55.0)])

        assert clears[0].cleared_qty == 12.0
        assert clears[0].pnl == pytest.approx(60.0)


class TestFallBackDay:
    def test_repeated_one_oclock_hours_clear_separately(self, caplog) -> None:
        first = pd.Timestamp("2024-11-03T01:00:00-05:00")
        second = pd.Timestamp("2024-11-03T01:00:00-06:00")
        bids = [
            Bid(hour_start=second, side=BidSide.BUY, price=40.0, quantity_mwh=5.0),
            Bid(hour_start=first, side=BidSide.BUY, price=40.0, quantity_mwh=10.0),
        ]
        da = [
            PricePoint(timestamp=first, settlement_point="HB_HOUSTON", price=20.0),
            PricePoint(timestamp=second, settlement_point="HB_HOUSTON", price=30.0),
        ]

        with caplog.at_level(logging.WARNING, logger="virtual_energy.core.clearing"):
            clears = clear_bids(bids, da, [])

        assert len(clears) == 2
        assert [c.hour_start.hour for c in clears] == [1, 1]
        assert clears[1].hour_start - clears[0].hour_start == pd.Timedelta(hours=1)
        assert [c.da_price for c in clears] == [20.0, 30.0]
        assert [c.cleared_qty for c in clears] == [10.0, 5.0]
        assert "Duplicate DA price" not in caplog.text


class TestDuplicateDA:
    def test_last_value_wins_and_is_logged(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="virtual_energy.core.clearing"):
            clears = clear_bids([_bid(8, BidSide.BUY, 55.0, 10.0)], [_da(8, 50.0), _da(8, 60.0)], [])

        assert clears[0].da_price == 60.0
        assert clears[0].cleared_qty == 0.0
        assert "Duplicate DA price" in caplog.text


def test_run_clearing_matches_manual_pipeline(reference_bids, reference_da, reference_rt) -> None:
    manual = clear_bids(reference_bids, reference_da, average_rt_to_hourly(reference_rt))
    assert run_clearing(reference_bids, reference_da, reference_rt) == manual
