"""Tests for content-hash memoization of analytics.

**Feature: trade-journal**
"""

import pytest
from hypothesis import given, settings

from trade_factories import PAIRS, make_trade, trade_lists
from tradejournal.analytics import (
    AnalyticsCache,
    CriterionRegistry,
    aggregate,
    default_registry,
    fingerprint,
)


class TestFingerprint:
    """
    **Feature: trade-journal, Property: Content fingerprint**

    *For any* trade list, equal content gives equal fingerprints.
    """

    @given(trades=trade_lists())
    @settings(max_examples=50)
    def test_copies_share_fingerprint(self, trades):
        copies = [t.model_copy() for t in trades]

        assert fingerprint(copies) == fingerprint(trades)

    def test_changes_alter_fingerprint(self):
        first, second = make_trade(pl=10.0), make_trade(pl=-5.0)
        edited = first.model_copy(update={"lot_size": 2.0})

        assert fingerprint([first, second]) != fingerprint([second, first])
        assert fingerprint([first, second]) != fingerprint([edited, second])


class TestAnalyticsCache:
    """Hits, misses, eviction and invalidation."""

    def test_hit_returns_cached_value(self):
        cache = AnalyticsCache()
        trades = [make_trade(pl=10.0), make_trade(pl=-4.0)]

        first = cache.aggregate(trades, PAIRS, 10000)
        second = cache.aggregate(list(trades), PAIRS, 10000)

        assert second is first
        assert first == aggregate(trades, PAIRS, 10000)
        assert (cache.hits, cache.misses) == (1, 1)

    def test_capital_is_part_of_key(self):
        cache = AnalyticsCache()
        trades = [make_trade(pl=10.0)]

        cache.aggregate(trades, PAIRS, 10000)
        cache.aggregate(trades, PAIRS, 5000)

        assert cache.misses == 2

    def test_group_and_equity(self):
        cache = AnalyticsCache()
        registry = default_registry(pair_configs=PAIRS)
        trades = [make_trade(pl=10.0), make_trade(pl=-4.0)]

        rows = cache.group(trades, ["Outcome"], registry, PAIRS, 10000)
        curve = cache.equity_curve(trades, 1000.0, PAIRS)

        assert cache.group(trades, ("Outcome",), registry, PAIRS, 10000) == rows
        assert cache.equity_curve(trades, 1000.0, PAIRS) == curve
        assert (cache.hits, len(cache)) == (2, 2)

    def test_returned_lists_are_copies(self):
        cache = AnalyticsCache()
        registry = default_registry(pair_configs=PAIRS)
        trades = [make_trade(pl=10.0), make_trade(pl=-4.0)]

        rows = cache.group(trades, ["Outcome"], registry, PAIRS, 10000)
        curve = cache.equity_curve(trades, 1000.0, PAIRS)
        rows.clear()
        curve.append(curve[0])

        assert len(cache.group(trades, ["Outcome"], registry, PAIRS, 10000)) == 2
        assert len(cache.equity_curve(trades, 1000.0, PAIRS)) == 3

    def test_registries_in_sequence(self):
        cache = AnalyticsCache()
        trades = [make_trade(pl=10.0), make_trade(pl=-4.0)]

        labels = []
        for i in range(20):
            registry = CriterionRegistry()
            registry.register("X", lambda t, tag=f"L{i}": tag)
            labels.append(cache.group(trades, ["X"], registry, PAIRS, 10000)[0].label)
            del registry

        assert labels == [f"L{i}" for i in range(20)]
        assert cache.hits == 0

    def test_reregistration_misses(self):
        cache = AnalyticsCache()
        registry = CriterionRegistry()
        registry.register("X", lambda t: "before")
        trades = [make_trade(pl=10.0)]

        cache.group(trades, ["X"], registry, PAIRS, 10000)
        registry.register("X", lambda t: "after", replace=True)
        rows = cache.group(trades, ["X"], registry, PAIRS, 10000)

        assert rows[0].label == "after"
        assert cache.misses == 2

    def test_lru_eviction(self):
        cache = AnalyticsCache(max_entries=2)
        a, b, c = ([make_trade(pl=float(pl))] for pl in (1, 2, 3))

        cache.aggregate(a, PAIRS, 1)
        cache.aggregate(b, PAIRS, 1)
        cache.aggregate(a, PAIRS, 1)
        cache.aggregate(c, PAIRS, 1)

        assert len(cache) == 2
        cache.aggregate(a, PAIRS, 1)
        assert cache.hits == 2
        cache.aggregate(b, PAIRS, 1)
        assert cache.misses == 4

    def test_invalidate(self):
        cache = AnalyticsCache()
        cache.aggregate([make_trade(pl=1.0)], PAIRS, 1)

        cache.invalidate()

        assert len(cache) == 0

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            AnalyticsCache(max_entries=0)
