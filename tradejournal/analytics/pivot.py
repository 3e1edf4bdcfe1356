"""Recursive grouping of trades into a pivot tree.

Each row's metrics are computed over exactly the trades that match the
row's criteria path, so ``trades_for_row(trades, row.criteria, registry)``
reproduces the row.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from tradejournal.analytics.aggregate import aggregate
from tradejournal.analytics.criteria import CriterionRegistry
from tradejournal.models import GroupCriterion, GroupRow, PairConfig, TradeRecord

logger = logging.getLogger(__name__)


def _bucket(
    trades: Sequence[TradeRecord], name: str, registry: CriterionRegistry
) -> dict[str, list[TradeRecord]]:
    buckets: dict[str, list[TradeRecord]] = {}
    for trade in trades:
        for value in registry.values(name, trade):
            buckets.setdefault(value, []).append(trade)
    return buckets


def group_recursively(
    trades: Sequence[TradeRecord],
    criteria: Sequence[str],
    registry: CriterionRegistry,
    pair_configs: Mapping[str, PairConfig],
    capital: float,
    level: int = 0,
    parent_path: Sequence[GroupCriterion] = (),
) -> list[GroupRow]:
    """Partition trades by ``criteria[0]`` and recurse into the rest.

    Args:
        trades: Trades to group.
        criteria: Ordered criterion names.
        registry: Resolvers for the criterion names.
        pair_configs: Pair reference data passed to the aggregator.
        capital: Account capital passed to the aggregator.
        level: Depth of the rows produced by this call.
        parent_path: Criteria path of the parent row.

    Returns:
        One row per bucket. Sibling order is first-encounter order unless
        the criterion has a sort key.

    Raises:
        UnknownCriterionError: If any criterion name is not registered.
    """
    if level == 0:
        for name in criteria:
            registry.resolve(name)
    if not criteria:
        return []

    name, rest = criteria[0], criteria[1:]
    criterion = registry.resolve(name)
    buckets = _bucket(trades, name, registry)
    values = list(buckets)
    if criterion.sort_key is not None:
        values.sort(key=criterion.sort_key)
    logger.debug("Grouped %d trades by %s into %d buckets", len(trades), name, len(values))

    rows = []
    for value in values:
        bucket = buckets[value]
        path = [*parent_path, GroupCriterion(key=name, value=value)]
        sub_rows = group_recursively(
            bucket, rest, registry, pair_configs, capital, level + 1, path
        )
        rows.append(
            GroupRow(
                key=f"{level}-{value}",
                level=level,
                label=value,
                metrics=aggregate(bucket, pair_configs, capital),
                criteria=path,
                sub_rows=sub_rows,
            )
        )
    return rows


def trades_for_row(
    trades: Iterable[TradeRecord],
    criteria_path: Iterable[GroupCriterion],
    registry: CriterionRegistry,
) -> list[TradeRecord]:
    """Trades represented by a row: those matching every step of its path."""
    path = list(criteria_path)
    return [
        trade
        for trade in trades
        if all(step.value in registry.values(step.key, trade) for step in path)
    ]


def flatten_rows(
    rows: Iterable[GroupRow], expanded: Optional[set[str]] = None
) -> list[GroupRow]:
    """Depth-first list of rows for table rendering.

    Args:
        rows: Top-level rows.
        expanded: Keys of rows whose children are shown. None shows all.
    """
    flat = []
    for row in rows:
        flat.append(row)
        if row.sub_rows and (expanded is None or row.key in expanded):
            flat.extend(flatten_rows(row.sub_rows, expanded))
    return flat
