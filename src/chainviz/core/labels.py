"""
Axis Labels

Builds the index -> label callbacks handed to the chart engine for axis
ticks. The chart engine passes fractional coordinates; every labeller
clamps into the valid bucket range and returns None when there is nothing
to label.
"""

import math
from datetime import date
from enum import Enum
from typing import Optional, Sequence

from src.chainviz.core.models import LabelFn, StrikeBucket


class ClampOrder(str, Enum):
    """Order in which the lower and upper bound are applied."""

    MIN_MAX = "min_max"  # min(max(i, 0), n - 1)
    MAX_MIN = "max_min"  # max(min(i, n - 1), 0)


class Rounding(str, Enum):
    """How a fractional chart coordinate becomes an index."""

    ROUND = "round"  # half-to-even
    TRUNCATE = "truncate"


def format_strike(strike: float) -> str:
    """Format a strike without a trailing '.0' for whole numbers."""
    value = float(strike)
    if value.is_integer():
        return str(int(value))
    return str(value)


def clamp_index(
    position: float,
    count: int,
    order: ClampOrder = ClampOrder.MIN_MAX,
    rounding: Rounding = Rounding.ROUND,
) -> Optional[int]:
    """
    Convert a chart coordinate into a valid index.

    Args:
        position: Chart coordinate (may be fractional or out of range)
        count: Number of buckets
        order: Bound application order
        rounding: Coordinate to index conversion

    Returns:
        Index in [0, count), or None if count is 0 or position is NaN
    """
    if count <= 0 or math.isnan(position):
        return None

    if math.isinf(position):
        index = 0 if position < 0 else count - 1
    else:
        index = round(position) if rounding == Rounding.ROUND else int(position)

    if order == ClampOrder.MIN_MAX:
        return min(max(index, 0), count - 1)
    return max(min(index, count - 1), 0)


def strike_labeler(
    buckets: Sequence[StrikeBucket],
    order: ClampOrder = ClampOrder.MIN_MAX,
    rounding: Rounding = Rounding.ROUND,
) -> LabelFn:
    """
    Build a labeller returning the strike of the bucket at an index.

    The strike is read from the bucket's first contract.
    """
    buckets = tuple(buckets)

    def label(position: float) -> Optional[str]:
        index = clamp_index(position, len(buckets), order, rounding)
        if index is None:
            return None
        return format_strike(buckets[index].contracts[0].strike)

    return label


def expiration_labeler(
    expirations: Sequence[date],
    rounding: Rounding = Rounding.TRUNCATE,
) -> LabelFn:
    """Build a labeller returning the yyyy-mm-dd expiration at an index."""
    expirations = tuple(expirations)

    def label(position: float) -> Optional[str]:
        index = clamp_index(position, len(expirations), ClampOrder.MIN_MAX, rounding)
        if index is None:
            return None
        return expirations[index].strftime("%Y-%m-%d")

    return label
