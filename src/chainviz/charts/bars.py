"""
Bar Series Builder

One up/down bar pair per occupied strike. The up bar sums the up
expression over the bucket; the down bar sums the down expression and is
negated so it hangs below the baseline.
"""

from typing import Sequence

from loguru import logger

from src.chainviz.core.evaluator import ExpressionEvaluator
from src.chainviz.core.labels import ClampOrder, strike_labeler
from src.chainviz.core.models import BarSeries, SeriesPoint, StrikeBucket


def build_bars(
    buckets: Sequence[StrikeBucket],
    expression_up: str,
    expression_down: str,
    evaluator: ExpressionEvaluator,
) -> BarSeries:
    """
    Build the bar series for strike buckets.

    Args:
        buckets: Strike buckets, ascending by strike
        expression_up: Expression summed into the up bar
        expression_down: Expression summed into the (negated) down bar
        evaluator: Soft-failing expression evaluator

    Returns:
        BarSeries with exactly one point per bucket
    """
    buckets = tuple(buckets)
    points = []

    for i, bucket in enumerate(buckets):
        ups = evaluator.total(expression_up, bucket.contracts)
        downs = -evaluator.total(expression_down, bucket.contracts)
        points.append(SeriesPoint(position_index=i, up_value=ups, down_value=downs))

    logger.debug(f"Built {len(points)} bar points")

    return BarSeries(
        points=points,
        label=strike_labeler(buckets, ClampOrder.MIN_MAX),
        strikes=[bucket.strike for bucket in buckets],
    )
