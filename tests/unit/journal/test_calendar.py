"""Tests for daily P&L aggregation and month summaries."""

from datetime import date, datetime, timedelta, timezone

import pytest

from trade_analytics.journal.calendar import DayPnL, daily_pnl, monthly_summary


def _at(day: int, month: int = 1, hour: int = 12) -> datetime:
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


class TestDailyPnl:
    def test_grouped_by_close_date(self, make_trade):
        trades = [
            make_trade(10.0, close_time=_at(3, hour=9)),
            make_trade(-4.0, close_time=_at(3, hour=17)),
            make_trade(0.0, close_time=_at(2)),
        ]
        days = daily_pnl(trades)
        assert [d.day for d in days] == [date(2024, 1, 2), date(2024, 1, 3)]

        flat, busy = days
        assert (flat.trades, flat.wins, flat.losses) == (1, 0, 0)
        assert busy.profit == pytest.approx(6.0)
        assert (busy.trades, busy.wins, busy.losses) == (2, 1, 1)

    def test_pips_summed(self, make_trade):
        trades = [
            make_trade(close_time=_at(5), open_price=1.1000, close_price=1.1050),
            make_trade(close_time=_at(5), open_price=1.1000, close_price=1.0980),
        ]
        (day,) = daily_pnl(trades)
        assert day.pips == pytest.approx(30.0)

    def test_overnight_trade_counts_on_close_day(self, make_trade):
        trade = make_trade(close_time=_at(10, hour=1), hold=timedelta(hours=5))
        (day,) = daily_pnl([trade])
        assert day.day == date(2024, 1, 10)

    def test_empty(self):
        assert daily_pnl([]) == ()


class TestMonthlySummary:
    def test_summary(self):
        days = [
            DayPnL(day=date(2024, 1, 2), profit=50.0, pips=10.0, trades=2, wins=2, losses=0),
            DayPnL(day=date(2024, 1, 3), profit=-20.0, pips=-5.0, trades=1, wins=0, losses=1),
            DayPnL(day=date(2024, 1, 4), profit=0.0, pips=0.0, trades=2, wins=1, losses=1),
            DayPnL(day=date(2024, 2, 1), profit=99.0, pips=1.0, trades=1, wins=1, losses=0),
        ]
        summary = monthly_summary(days, 2024, 1)
        assert summary.total_profit == pytest.approx(30.0)
        assert summary.total_trades == 5
        assert summary.profit_days == 1
        assert summary.loss_days == 1
        assert summary.trading_days == 2

    def test_other_month_is_empty(self):
        summary = monthly_summary([], 2023, 12)
        assert (summary.year, summary.month) == (2023, 12)
        assert summary.total_trades == 0
        assert summary.total_profit == 0.0
