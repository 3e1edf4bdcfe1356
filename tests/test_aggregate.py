"""Property-based tests for the metrics aggregator.

**Feature: trade-journal**
"""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from trade_factories import PAIRS, make_trade, trade_lists
from tradejournal.analytics import aggregate, format_duration, format_profit_factor
from tradejournal.models import AggregateMetrics


class TestEmptyInputClosure:
    """
    **Feature: trade-journal, Property 1: Empty-input closure**

    *For any* pair table and capital, aggregating no trades returns the
    all-zero metrics without raising.
    """

    @given(capital=st.floats(min_value=0, max_value=1e7, allow_nan=False))
    @settings(max_examples=30)
    def test_empty_trades_give_zero_metrics(self, capital: float):
        result = aggregate([], PAIRS, capital)

        assert result == AggregateMetrics()
        assert result.profit_factor == 0
        assert result.trades == 0

    def test_empty_pair_table(self):
        assert aggregate([], {}, 0) == AggregateMetrics()


class TestProfitFactorInfinity:
    """
    **Feature: trade-journal, Property 2: Profit-factor infinity**

    Only winners give an infinite profit factor; only losers give 0.
    """

    @given(pls=st.lists(st.integers(min_value=1, max_value=10000), min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_all_wins_infinite(self, pls: list[int]):
        trades = [make_trade(pl=float(pl)) for pl in pls]

        result = aggregate(trades, PAIRS, 10000)

        assert math.isinf(result.profit_factor)
        assert result.win_rate == 1.0
        assert format_profit_factor(result.profit_factor) == "∞"

    @given(pls=st.lists(st.integers(min_value=1, max_value=10000), min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_all_losses_zero(self, pls: list[int]):
        trades = [make_trade(pl=-float(pl)) for pl in pls]

        result = aggregate(trades, PAIRS, 10000)

        assert result.profit_factor == 0
        assert result.win_rate == 0
        assert result.total_pl == -sum(pls)

    def test_only_neutral_trades(self):
        trades = [make_trade(pl=0.0), make_trade(pl=0.0)]

        result = aggregate(trades, PAIRS, 10000)

        assert result.profit_factor == 0
        assert result.expectancy == 0
        assert result.trades == 2


class TestAggregateScenario:
    """
    **Feature: trade-journal, Property 7: Round-trip scenario**

    Two winners and a loser reduce to the expected totals and ratios.
    """

    def test_three_trade_scenario(self):
        trades = [make_trade(pl=100.0), make_trade(pl=-50.0), make_trade(pl=200.0)]

        result = aggregate(trades, PAIRS, 10000)

        assert result.profit == 300
        assert result.loss == -50
        assert result.total_pl == 250
        assert result.win_rate == pytest.approx(2 / 3)
        assert result.profit_factor == pytest.approx(6.0)
        assert result.avg_win == 150
        assert result.avg_loss == 50
        assert result.expectancy == pytest.approx(2 / 3 * 150 - 1 / 3 * 50)
        assert result.gain_percent == pytest.approx(2.5)
        assert result.win_count == 2
        assert result.loss_count == 1

    def test_realized_r_uses_stop_distance(self):
        # 10 pips * 1 lot * 10 per pip = 100 at risk
        trades = [make_trade(pl=100.0), make_trade(pl=-100.0), make_trade(pl=250.0)]

        result = aggregate(trades, PAIRS, 10000)

        assert result.total_r == pytest.approx(2.5)
        assert result.avg_r == pytest.approx(2.5 / 3)

    def test_trade_without_stop_contributes_zero_r(self):
        trades = [make_trade(pl=100.0, stop_loss=0.0)]

        assert aggregate(trades, PAIRS, 10000).total_r == 0

    def test_zero_capital_gain_percent(self):
        assert aggregate([make_trade(pl=100.0)], PAIRS, 0).gain_percent == 0

    def test_scores_split_by_outcome(self):
        trades = [
            make_trade(pl=100.0, score=90),
            make_trade(pl=50.0, score=70),
            make_trade(pl=-20.0, score=40),
        ]

        result = aggregate(trades, PAIRS, 10000)

        assert result.avg_score == pytest.approx(200 / 3)
        assert result.avg_win_score == 80
        assert result.avg_loss_score == 40


class TestAggregateInvariants:
    """
    **Feature: trade-journal, Property: Aggregate invariants**

    *For any* trade list, counts, rates and totals stay consistent.
    """

    @given(trades=trade_lists(min_size=1))
    @settings(max_examples=100)
    def test_totals_consistent(self, trades):
        result = aggregate(trades, PAIRS, 10000)

        assert result.trades == len(trades)
        assert 0 <= result.win_rate <= 1
        assert result.win_count + result.loss_count <= result.trades
        assert result.total_pl == pytest.approx(sum(t.auto.pl for t in trades))
        assert result.total_pl == pytest.approx(result.profit + result.loss)
        assert result.loss <= 0 <= result.profit

    @given(trades=trade_lists(min_size=1))
    @settings(max_examples=100)
    def test_streaks_bounded_by_counts(self, trades):
        result = aggregate(trades, PAIRS, 10000)

        assert result.max_win_streak <= result.win_count
        assert result.max_loss_streak <= result.loss_count


class TestMaxStreaks:
    """Neutral outcomes break both running streaks."""

    def test_neutral_resets_streaks(self):
        pls = [100, 100, -50, 100, 100, 100, 0, 100, -10, -10]
        trades = [make_trade(pl=float(pl)) for pl in pls]

        result = aggregate(trades, PAIRS, 10000)

        assert result.max_win_streak == 3
        assert result.max_loss_streak == 2


class TestFormatting:
    """Duration and profit-factor rendering."""

    @pytest.mark.parametrize(
        "minutes,expected",
        [
            (0, "<1m"),
            (0.5, "<1m"),
            (45, "45m"),
            (90, "1.5h"),
            (3000, "50.0h"),
        ],
    )
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected

    def test_format_duration_with_days(self):
        assert format_duration(2880, with_days=True) == "2.0d"
        assert format_duration(120, with_days=True) == "2.0h"

    def test_format_profit_factor(self):
        assert format_profit_factor(math.inf) == "∞"
        assert format_profit_factor(1.23456) == "1.23"
