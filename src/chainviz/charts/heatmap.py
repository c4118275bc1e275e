"""
Heatmap Series Builder

Strike x expiration grid of summed expression values with a color
intensity per cell.

Intensity is a min-max normalisation against the global range of
per-contract values (not cell sums), clamped into [0, 1]. A flat dataset
(max == min) maps every cell to a fixed intensity.
"""

from typing import Sequence

from loguru import logger

from src.chainviz.core.evaluator import ExpressionEvaluator
from src.chainviz.core.grouping import group_by_expiration
from src.chainviz.core.labels import ClampOrder, Rounding, expiration_labeler, strike_labeler
from src.chainviz.core.models import HeatmapCell, HeatmapSeries, StrikeBucket


DEFAULT_MAX_VALUE_TICKS = 5
DEFAULT_FLAT_INTENSITY = 0.5


def color_intensity(value: float, low: float, high: float, flat: float = DEFAULT_FLAT_INTENSITY) -> float:
    """
    Map a value into [0, 1] against a [low, high] range.

    Args:
        value: Cell value
        low: Global minimum
        high: Global maximum
        flat: Intensity used when high == low

    Returns:
        float: Intensity in [0, 1]
    """
    if high == low:
        return flat

    return min(max((value - low) / (high - low), 0.0), 1.0)


def build_heatmap(
    buckets: Sequence[StrikeBucket],
    expression: str,
    evaluator: ExpressionEvaluator,
    max_value_ticks: int = DEFAULT_MAX_VALUE_TICKS,
    flat_intensity: float = DEFAULT_FLAT_INTENSITY,
) -> HeatmapSeries:
    """
    Build the heatmap for strike buckets.

    Contracts without an expiration cannot be placed on the grid and are
    left out (a warning is logged). Each remaining contract is evaluated
    exactly once.

    Args:
        buckets: Strike buckets, ascending by strike
        expression: Expression summed per cell
        evaluator: Soft-failing expression evaluator
        max_value_ticks: Cap on the number of value axis ticks
        flat_intensity: Intensity for every cell when all values are equal

    Returns:
        HeatmapSeries with cells, row/column labellers and tick count
    """
    rows: list[StrikeBucket] = []
    undated = 0

    for bucket in buckets:
        dated = tuple(c for c in bucket.contracts if c.expiration is not None)
        undated += len(bucket.contracts) - len(dated)
        if dated:
            rows.append(StrikeBucket(strike=bucket.strike, contracts=dated))

    if undated:
        logger.warning(f"Heatmap skipped {undated} contracts without an expiration date")

    # Pass 1: evaluate every contract once, keeping per-cell sums
    sums: list[tuple[int, object, float]] = []
    values: list[float] = []

    for row_index, row in enumerate(rows):
        for column in group_by_expiration(row.contracts):
            evaluated = [evaluator.evaluate(expression, c) for c in column.contracts]
            values.extend(evaluated)
            sums.append((row_index, column.expiration, sum(evaluated)))

    expirations = sorted({expiration for _, expiration, _ in sums})
    columns = {expiration: i for i, expiration in enumerate(expirations)}

    low = min(values) if values else 0.0
    high = max(values) if values else 0.0

    # Pass 2: place cells on the global expiration axis
    cells = [
        HeatmapCell(
            strike_index=row_index,
            expiration_index=columns[expiration],
            value=total,
            color_intensity=color_intensity(total, low, high, flat_intensity),
        )
        for row_index, expiration, total in sums
    ]

    logger.debug(
        f"Built heatmap {len(rows)} strikes x {len(expirations)} expirations, "
        f"range [{low}, {high}]"
    )

    return HeatmapSeries(
        cells=cells,
        row_label=strike_labeler(rows, ClampOrder.MIN_MAX, Rounding.TRUNCATE),
        column_label=expiration_labeler(expirations, Rounding.TRUNCATE),
        value_axis_count=min(len(expirations), max_value_ticks),
        strikes=[row.strike for row in rows],
        expirations=expirations,
    )
