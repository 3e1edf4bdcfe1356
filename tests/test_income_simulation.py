"""Tests for income estimates, overall stats and the simulators.

**Feature: trade-journal**
"""

import random
from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from trade_factories import PAIRS, make_trade
from tradejournal.analytics import (
    CancellationToken,
    estimate_income,
    overall_stats,
    params_from_history,
    run_compounding,
    run_monte_carlo,
)
from tradejournal.analytics.summary import trade_gaps
from tradejournal.errors import SimulationCancelled
from tradejournal.models import CompoundingParams, IncomeStats, MonteCarloParams


def mc_params(**overrides) -> MonteCarloParams:
    values = {
        "starting_balance": 10000.0,
        "win_rate": 0.5,
        "avg_win_r": 1.5,
        "avg_loss_r": 1.0,
        "risk_per_trade": 0.02,
        "num_trades": 40,
        "num_simulations": 20,
    }
    values.update(overrides)
    return MonteCarloParams(**values)


class TestIncomeEstimates:
    """Avg-based and real-time income blocks."""

    def test_two_trading_days(self):
        trades = [
            make_trade(pl=100.0, opened=datetime(2024, 1, 1, 9)),
            make_trade(pl=200.0, opened=datetime(2024, 1, 3, 9)),
        ]

        income = estimate_income(trades, 300.0)

        # 2024-01-01 09:00 to 2024-01-03 10:00
        assert income.elapsed_minutes == 2 * 1440 + 60
        assert income.days_traded == 2
        hourly = 300 / 49
        assert income.avg_based.hourly == pytest.approx(hourly)
        assert income.avg_based.daily == pytest.approx(150)
        assert income.avg_based.weekly == pytest.approx(150 * 7)
        assert income.avg_based.monthly == pytest.approx(150 * 30.44)
        assert income.avg_based.yearly == pytest.approx(150 * 365.25)
        assert income.real_time.daily == pytest.approx(hourly * 24)
        assert income.real_time.yearly == pytest.approx(hourly * 24 * 365.25)

    def test_as_of_extends_window(self):
        trades = [make_trade(pl=240.0, opened=datetime(2024, 1, 1, 0, 0))]

        income = estimate_income(trades, 240.0, as_of=datetime(2024, 1, 11, 0, 0))

        assert income.real_time.daily == pytest.approx(24.0)
        assert income.avg_based.daily == pytest.approx(240.0)

    def test_elapsed_floored(self):
        trades = [make_trade(pl=10.0, duration=0)]

        income = estimate_income(trades, 10.0)

        assert income.elapsed_minutes == 1
        assert income.avg_based.weekly == pytest.approx(70.0)

    def test_empty(self):
        assert estimate_income([], 0.0) == IncomeStats()


class TestOverallStats:
    """Gaps, hour ranking and score extremes."""

    def test_gaps_between_trades(self):
        trades = [
            make_trade(pl=10.0, opened=datetime(2024, 1, 1, 9), duration=60),
            make_trade(pl=10.0, opened=datetime(2024, 1, 1, 12), duration=60),
            make_trade(pl=10.0, opened=datetime(2024, 1, 5, 9), duration=60),
        ]

        # The 4-day break is not a gap between trades.
        assert trade_gaps(trades) == [120.0]

    def test_overall(self):
        trades = [
            make_trade(pl=100.0, opened=datetime(2024, 1, 1, 9), duration=30, score=90),
            make_trade(pl=-40.0, opened=datetime(2024, 1, 1, 14), duration=90, score=40),
            make_trade(pl=25.0, opened=datetime(2024, 1, 2, 9), duration=0, score=70),
        ]

        stats = overall_stats(trades)

        assert stats.total_trades == 3
        assert stats.total_pl == 85
        assert stats.best_time == "09:00"
        assert stats.worst_time == "14:00"
        assert stats.longest_duration == 90
        assert stats.shortest_duration == 30
        assert stats.highest_score == 90
        assert stats.lowest_score == 40


class TestMonteCarloBoundary:
    """
    **Feature: trade-journal, Property 8: Monte Carlo boundary**

    *For any* seed, a 0% win rate only loses and a 100% win rate only wins.
    """

    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    @settings(max_examples=30)
    def test_never_winning(self, seed: int):
        result = run_monte_carlo(mc_params(win_rate=0.0), rng=random.Random(seed))

        assert result.probability_of_profit == 0
        for path in result.paths:
            assert all(b >= a for a, b in zip(path[1:], path))
            assert min(path) >= 0

    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    @settings(max_examples=30)
    def test_always_winning(self, seed: int):
        result = run_monte_carlo(mc_params(win_rate=1.0), rng=random.Random(seed))

        assert result.probability_of_ruin == 0
        assert result.probability_of_profit == 1
        for path in result.paths:
            assert all(b >= a for a, b in zip(path, path[1:]))

    def test_ruin_clamps_at_zero(self):
        params = mc_params(win_rate=0.0, risk_per_trade=1.0, avg_loss_r=2.0)

        result = run_monte_carlo(params, rng=random.Random(1))

        assert result.probability_of_ruin == 1
        assert all(path[1:] == [0.0] * params.num_trades for path in result.paths)


class TestMonteCarloRun:
    """Shape, reproducibility and cancellation."""

    def test_path_shape(self):
        params = mc_params()

        result = run_monte_carlo(params, rng=random.Random(3))

        assert len(result.paths) == params.num_simulations
        assert all(len(p) == params.num_trades + 1 for p in result.paths)
        assert all(p[0] == params.starting_balance for p in result.paths)
        assert result.min_final_balance <= result.avg_final_balance <= result.max_final_balance
        assert result.overall_min_balance <= result.min_final_balance
        assert result.projected_minutes == params.num_trades * (240 + 180)

    def test_seeded_runs_repeat(self):
        first = run_monte_carlo(mc_params(), rng=random.Random(42))
        second = run_monte_carlo(mc_params(), rng=random.Random(42))

        assert first == second

    def test_cancelled_token_stops_run(self):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SimulationCancelled):
            run_monte_carlo(mc_params(), cancel_token=token)
        assert token.cancelled


class TestParamsFromHistory:
    """Monte Carlo inputs seeded from a trade history."""

    def test_defaults_for_short_history(self):
        params = params_from_history([make_trade(pl=10.0)], PAIRS, 10000, 5000)

        assert params.win_rate == 0.5
        assert params.avg_win_r == 1.5
        assert params.avg_loss_r == 1.0
        assert params.starting_balance == 5000

    def test_ratio_from_averages(self):
        trades = [
            make_trade(pl=pl, opened=datetime(2024, 1, 1, 9 + i), duration=30)
            for i, pl in enumerate([200.0, 200.0, -100.0, 200.0, -100.0])
        ]

        params = params_from_history(trades, PAIRS, 10000, 10000)

        assert params.win_rate == pytest.approx(0.6)
        assert params.avg_win_r == pytest.approx(2.0)
        assert params.avg_holding_minutes == 30
        assert params.avg_gap_minutes == 30


class TestCompounding:
    """Month-by-month compounding projection."""

    def test_always_winning_growth(self):
        params = CompoundingParams(
            starting_balance=1000,
            win_rate=1.0,
            risk_reward_ratio=2.0,
            risk_per_trade=0.01,
            trades_per_month=10,
            months_to_project=3,
        )

        points = run_compounding(params, rng=random.Random(0))

        assert [p.month for p in points] == [0, 1, 2, 3]
        assert points[-1].balance == pytest.approx(1000 * 1.02 ** 30)

    def test_contributions_added_monthly(self):
        params = CompoundingParams(
            starting_balance=1000,
            monthly_contribution=100,
            win_rate=1.0,
            risk_reward_ratio=1.0,
            risk_per_trade=0.001,
            trades_per_month=1,
            months_to_project=1,
        )

        points = run_compounding(params, rng=random.Random(0))

        assert points[1].balance == pytest.approx(1100 * 1.001)

    def test_stops_at_ruin(self):
        params = CompoundingParams(
            starting_balance=1000,
            win_rate=0.0,
            risk_reward_ratio=2.0,
            risk_per_trade=1.0,
            trades_per_month=5,
            months_to_project=12,
        )

        points = run_compounding(params, rng=random.Random(0))

        assert len(points) == 2
        assert points[-1].balance == 0
