"""
Data models for the chain visualizer.

This module contains dataclass definitions shared across the evaluator,
the grouping helpers and the chart builders to avoid circular imports.

Key patterns:
- dataclass(slots=True) for internal data
- frozen contracts so no aggregation pass can mutate them
- __post_init__ validation for bucket integrity
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Optional


LabelFn = Callable[[float], Optional[str]]


class OptionSide(str, Enum):
    """Option side (call or put leg)."""

    CALL = "C"
    PUT = "P"

    @classmethod
    def parse(cls, value) -> "OptionSide":
        """
        Parse a side from broker notation.

        Accepts 'C', 'P', 'CALL', 'PUT' in any case, or an OptionSide.

        Raises:
            ValueError: If the value is not a recognised side
        """
        if isinstance(value, cls):
            return value

        text = str(value).strip().upper()
        if text in ("C", "CALL"):
            return cls.CALL
        if text in ("P", "PUT"):
            return cls.PUT

        raise ValueError(f"Invalid option side: {value!r}")


@dataclass(frozen=True, slots=True)
class OptionContract:
    """
    Option contract snapshot.

    Attributes:
        strike: Strike price
        expiration: Expiration date (None if the feed did not provide one)
        side: Call or put
        volume: Trading volume
        volatility: Implied volatility
        open_interest: Open interest
        intrinsic_value: Intrinsic value
        bid_size: Size at best bid
        ask_size: Size at best ask
        vega: Option vega
        gamma: Option gamma
        theta: Option theta
        delta: Option delta
        symbol: Underlying symbol (SPY, AAPL, ...)
    """
    strike: float
    expiration: Optional[date]
    side: OptionSide
    volume: float = 0.0
    volatility: float = 0.0
    open_interest: float = 0.0
    intrinsic_value: float = 0.0
    bid_size: float = 0.0
    ask_size: float = 0.0
    vega: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    delta: float = 0.0
    symbol: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StrikeBucket:
    """All contracts sharing one strike, in input order."""

    strike: float
    contracts: tuple[OptionContract, ...]

    def __post_init__(self):
        if not self.contracts:
            raise ValueError(f"Strike bucket {self.strike} cannot be empty")


@dataclass(frozen=True, slots=True)
class ExpirationBucket:
    """All contracts sharing one expiration date within a strike bucket."""

    expiration: Optional[date]
    contracts: tuple[OptionContract, ...]

    def __post_init__(self):
        if not self.contracts:
            raise ValueError(f"Expiration bucket {self.expiration} cannot be empty")


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """
    One bar chart point.

    down_value is stored as a negative magnitude so the chart mirrors it
    below the baseline.
    """

    position_index: int
    up_value: float
    down_value: float


@dataclass(frozen=True, slots=True)
class BalancePoint:
    """
    One balance chart point.

    Each side holds a cumulative sum, or None when the walk on that side
    never reached this position.
    """

    position_index: int
    up_value: Optional[float] = None
    down_value: Optional[float] = None


@dataclass(frozen=True, slots=True)
class HeatmapCell:
    """One (strike, expiration) cell of the heatmap."""

    strike_index: int
    expiration_index: int
    value: float
    color_intensity: float


@dataclass(slots=True)
class BarSeries:
    """Bar chart output: one point per occupied strike plus the axis labeller."""

    points: list[SeriesPoint]
    label: LabelFn
    strikes: list[float] = field(default_factory=list)


@dataclass(slots=True)
class BalanceSeries:
    """Balance chart output: cumulative points pivoted around a reference price."""

    points: list[BalancePoint]
    label: LabelFn
    pivot_index: int = 0
    strikes: list[float] = field(default_factory=list)


@dataclass(slots=True)
class HeatmapSeries:
    """
    Heatmap output.

    Attributes:
        cells: Cells present in the data (strike row x expiration column)
        row_label: Chart index -> strike label
        column_label: Chart index -> expiration label (yyyy-mm-dd)
        value_axis_count: Number of value axis ticks to show
        strikes: Row strikes, ascending
        expirations: Column expirations, ascending
    """

    cells: list[HeatmapCell]
    row_label: LabelFn
    column_label: LabelFn
    value_axis_count: int = 0
    strikes: list[float] = field(default_factory=list)
    expirations: list[date] = field(default_factory=list)


class ChartKind(str, Enum):
    """Kind of chart a group renders."""

    BAR = "bar"
    BALANCE = "balance"
    MAP = "map"


@dataclass(slots=True)
class ChartGroup:
    """
    A named set of chart panels created for one chart request.

    Lives as long as the chart is displayed; panels are keyed by caption
    (the chart caption for combined groups, the expiration otherwise).
    """

    caption: str
    kind: ChartKind
    panels: dict[str, object] = field(default_factory=dict)

    @property
    def panel_count(self) -> int:
        return len(self.panels)
