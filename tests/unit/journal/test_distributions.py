"""Tests for profit histogram and bucketed performance."""

from datetime import datetime, timedelta, timezone

import pytest

from trade_analytics.journal.distributions import (
    DAY_NAMES,
    BucketPerformance,
    bin_count_for,
    day_of_week_performance,
    hourly_performance,
    pnl_histogram,
    symbol_performance,
)


class TestBinCount:
    @pytest.mark.parametrize(
        "n, expected", [(0, 0), (1, 1), (4, 2), (5, 3), (100, 10), (400, 20), (1000, 20)]
    )
    def test_sqrt_rule(self, n, expected):
        assert bin_count_for(n) == expected

    def test_custom_cap(self):
        assert bin_count_for(1000, max_bins=5) == 5


class TestHistogram:
    def test_bins(self):
        hist = pnl_histogram([-10.0, 0.0, 10.0, 20.0])
        assert hist.bin_count == 2
        assert hist.counts == (2, 2)
        assert hist.edges == pytest.approx((-10.0, 5.0, 20.0))
        assert hist.centers == pytest.approx((-2.5, 12.5))

    def test_max_lands_in_last_bin(self):
        hist = pnl_histogram([0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0])
        assert hist.bin_count == 3
        assert hist.counts == (3, 3, 3)

    def test_equal_values_go_to_first_bin(self):
        hist = pnl_histogram([5.0, 5.0, 5.0])
        assert hist.counts == (3, 0)

    def test_counts_sum_to_n(self):
        profits = [(-1) ** i * i * 1.7 for i in range(57)]
        assert sum(pnl_histogram(profits).counts) == 57

    def test_empty(self):
        hist = pnl_histogram([])
        assert hist.counts == ()
        assert hist.edges == ()


class TestDayOfWeek:
    def test_monday_first_keyed_on_close(self, make_trade):
        monday = datetime(2024, 1, 1, 15, tzinfo=timezone.utc)
        trades = [
            make_trade(10.0, close_time=monday),
            make_trade(-5.0, close_time=monday),
            make_trade(7.0, close_time=monday + timedelta(days=4)),
        ]
        buckets = day_of_week_performance(trades)
        assert [b.label for b in buckets] == list(DAY_NAMES)
        assert buckets[0].label == "Monday"
        assert buckets[0].count == 2
        assert buckets[0].profit == pytest.approx(5.0)
        assert buckets[0].win_rate == pytest.approx(50.0)
        assert buckets[4].count == 1
        assert buckets[6].count == 0
        assert buckets[6].win_rate == 0.0

    def test_sunday_is_last(self, make_trade):
        sunday = datetime(2024, 1, 7, 9, tzinfo=timezone.utc)
        buckets = day_of_week_performance([make_trade(3.0, close_time=sunday)])
        assert buckets[6].label == "Sunday"
        assert buckets[6].count == 1
        assert sum(b.count for b in buckets[:6]) == 0


class TestHourly:
    def test_keyed_on_open_hour(self, make_trade):
        close = datetime(2024, 1, 1, 15, 30, tzinfo=timezone.utc)
        trades = [
            make_trade(10.0, close_time=close, hold=timedelta(hours=6)),
            make_trade(-5.0, close_time=close, hold=timedelta(minutes=10)),
        ]
        buckets = hourly_performance(trades)
        assert len(buckets) == 24
        assert buckets[9].label == "9:00"
        assert buckets[9].count == 1
        assert buckets[15].count == 1
        assert buckets[15].wins == 0
        assert sum(b.count for b in buckets) == 2


class TestSymbol:
    def test_ranked_by_count(self, make_trade):
        trades = [
            make_trade(5.0, symbol="GBPUSD", volume=0.2),
            make_trade(1.0, symbol="EURUSD", volume=0.1),
            make_trade(-2.0, symbol="EURUSD", volume=0.3),
            make_trade(3.0, symbol="USDJPY"),
        ]
        ranked = symbol_performance(trades)
        assert [s.label for s in ranked] == ["EURUSD", "GBPUSD", "USDJPY"]
        eur = ranked[0]
        assert eur.count == 2
        assert eur.profit == pytest.approx(-1.0)
        assert eur.volume == pytest.approx(0.4)
        assert eur.win_rate == pytest.approx(50.0)

    def test_top_n(self, make_trade):
        trades = [make_trade(symbol=f"SYM{i:03d}") for i in range(15)]
        ranked = symbol_performance(trades, top_n=10)
        assert len(ranked) == 10
        assert ranked[0].label == "SYM000"


class TestBucket:
    def test_empty_bucket_win_rate(self):
        assert BucketPerformance(label="x", profit=0.0, count=0, wins=0).win_rate == 0.0
