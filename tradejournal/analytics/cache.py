"""Memoized analytics keyed by a content hash of the input trades.

The cache never observes mutations: callers pass immutable snapshots, and
any change to the trades changes their fingerprint. Pivots are also keyed
by the registry's token and version, so re-registering a criterion misses.
Cached lists are handed out as copies; their elements are frozen models.
"""

import hashlib
import json
import logging
from collections import OrderedDict
from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import Any, TypeVar

from tradejournal.analytics.aggregate import aggregate
from tradejournal.analytics.criteria import CriterionRegistry
from tradejournal.analytics.pivot import group_recursively
from tradejournal.analytics.timeseries import build_equity_curve
from tradejournal.models import (
    AggregateMetrics,
    EquityPoint,
    GroupRow,
    PairConfig,
    TradeRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ENTRIES = 128


def _digest(payload: Any) -> str:
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def fingerprint(trades: Sequence[TradeRecord]) -> str:
    """SHA-256 over the canonical JSON of the trades, order-sensitive."""
    return _digest([t.model_dump(mode="json", by_alias=True) for t in trades])


def pairs_fingerprint(pair_configs: Mapping[str, PairConfig]) -> str:
    return _digest({k: v.model_dump(mode="json") for k, v in pair_configs.items()})


class AnalyticsCache:
    """Bounded LRU cache over the aggregation entry points."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("Cache hit for %s", key[0])
            return self._entries[key]

        self.misses += 1
        value = compute()
        self._entries[key] = value
        if len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return value

    def aggregate(
        self,
        trades: Sequence[TradeRecord],
        pair_configs: Mapping[str, PairConfig],
        capital: float,
    ) -> AggregateMetrics:
        key = ("aggregate", fingerprint(trades), pairs_fingerprint(pair_configs), capital)
        return self._get_or_compute(key, lambda: aggregate(trades, pair_configs, capital))

    def group(
        self,
        trades: Sequence[TradeRecord],
        criteria: Sequence[str],
        registry: CriterionRegistry,
        pair_configs: Mapping[str, PairConfig],
        capital: float,
    ) -> list[GroupRow]:
        key = (
            "group",
            fingerprint(trades),
            tuple(criteria),
            registry.identity,
            pairs_fingerprint(pair_configs),
            capital,
        )
        rows = self._get_or_compute(
            key,
            lambda: group_recursively(trades, list(criteria), registry, pair_configs, capital),
        )
        return list(rows)

    def equity_curve(
        self,
        trades: Sequence[TradeRecord],
        initial_deposit: float,
        pair_configs: Mapping[str, PairConfig],
    ) -> list[EquityPoint]:
        key = ("equity", fingerprint(trades), pairs_fingerprint(pair_configs), initial_deposit)
        points = self._get_or_compute(
            key, lambda: build_equity_curve(trades, initial_deposit, pair_configs)
        )
        return list(points)

    def invalidate(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()
