"""
Balance Series Builder

Cumulative two-sided distribution pivoted around a reference price.

Starting at the pivot bucket, one walk moves up through the strikes
accumulating the up expression and another moves down accumulating the
down expression. Each position stores the running total of its walk, so
the chart shows how much of the expression sits above or below any strike
as seen from the reference price.

Pivot rule:
- first bucket whose strike is above the reference price
- if that is bucket 0, or no strike is above the reference, the midpoint
  bucket (count // 2) is used instead

The midpoint fallback also fires when the reference legitimately sits just
below the lowest strike; the two cases are not told apart.
"""

from typing import Optional, Sequence

from loguru import logger

from src.chainviz.core.evaluator import ExpressionEvaluator
from src.chainviz.core.labels import ClampOrder, strike_labeler
from src.chainviz.core.models import BalancePoint, BalanceSeries, StrikeBucket


def find_pivot(buckets: Sequence[StrikeBucket], reference_price: float) -> int:
    """
    Find the bucket index the two walks start from.

    Args:
        buckets: Strike buckets, ascending by strike
        reference_price: Price the distribution is centred on

    Returns:
        Pivot index (0 for empty input)
    """
    index = next(
        (i for i, bucket in enumerate(buckets) if bucket.strike > reference_price),
        0,
    )

    if index == 0:
        index = len(buckets) // 2

    return index


def build_balance(
    buckets: Sequence[StrikeBucket],
    reference_price: float,
    expression_up: str,
    expression_down: str,
    evaluator: ExpressionEvaluator,
) -> BalanceSeries:
    """
    Build the balance series for strike buckets.

    Args:
        buckets: Strike buckets, ascending by strike
        reference_price: Price the distribution is pivoted around
        expression_up: Expression accumulated walking up from the pivot
        expression_down: Expression accumulated walking down from the pivot
        evaluator: Soft-failing expression evaluator

    Returns:
        BalanceSeries with one point per bucket
    """
    buckets = tuple(buckets)
    count = len(buckets)
    pivot = find_pivot(buckets, reference_price)

    ups: list[Optional[float]] = [None] * count
    downs: list[Optional[float]] = [None] * count

    index_up = pivot
    index_down = pivot
    sum_up = 0.0
    sum_down = 0.0

    # Both walks advance together; each stops contributing at its own bound
    for _ in range(count):
        if index_up < count:
            sum_up += evaluator.total(expression_up, buckets[index_up].contracts)
            ups[index_up] = sum_up

        if index_down >= 0:
            sum_down += evaluator.total(expression_down, buckets[index_down].contracts)
            downs[index_down] = sum_down

        index_up += 1
        index_down -= 1

    points = [
        BalancePoint(position_index=i, up_value=ups[i], down_value=downs[i])
        for i in range(count)
    ]

    logger.debug(
        f"Built {count} balance points around {reference_price} (pivot index {pivot})"
    )

    return BalanceSeries(
        points=points,
        label=strike_labeler(buckets, ClampOrder.MAX_MIN),
        pivot_index=pivot,
        strikes=[bucket.strike for bucket in buckets],
    )
