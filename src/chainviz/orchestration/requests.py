"""
Chart Request Models

What the chart editors hand over: a symbol, an expiration range, whether to
combine expirations, and the chart-specific expressions.

Requests are validated on construction (internal data, dataclass +
__post_init__).
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from src.chainviz.config.chart_config import ChartConfig


DEFAULT_SYMBOL = "SPY"
DEFAULT_RANGE_DAYS = 5
DEFAULT_EXPRESSION_UP = "(CVolume - COpenInterest) * CGamma"
DEFAULT_EXPRESSION_DOWN = "(PVolume - POpenInterest) * PGamma"
DEFAULT_MAP_EXPRESSION = "CVolume + PVolume"


def _default_end() -> date:
    return date.today() + timedelta(days=DEFAULT_RANGE_DAYS)


def _require_expression(name: str, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{name} cannot be empty")


@dataclass(slots=True)
class ChartRequest:
    """
    Base chart request.

    Attributes:
        name: Underlying symbol
        start: First expiration date included
        end: Last expiration date included
        combine: True renders all expirations as one group,
            False renders one group per expiration
    """

    name: str = DEFAULT_SYMBOL
    start: date = field(default_factory=date.today)
    end: date = field(default_factory=_default_end)
    combine: bool = True

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Chart request name cannot be empty")
        self.name = self.name.strip().upper()

        if self.start > self.end:
            raise ValueError(f"Invalid date range: {self.start} is after {self.end}")

    @staticmethod
    def _config_defaults(config: ChartConfig, today: Optional[date]) -> dict:
        start = today or date.today()
        return {
            "name": config.default_symbol,
            "start": start,
            "end": start + timedelta(days=config.default_range_days),
            "combine": config.combine_by_default,
        }


@dataclass(slots=True)
class BarChartRequest(ChartRequest):
    """Bar chart request: one expression per bar direction."""

    expression_up: str = DEFAULT_EXPRESSION_UP
    expression_down: str = DEFAULT_EXPRESSION_DOWN

    def __post_init__(self):
        ChartRequest.__post_init__(self)
        _require_expression("expression_up", self.expression_up)
        _require_expression("expression_down", self.expression_down)

    @classmethod
    def from_config(cls, config: ChartConfig, today: Optional[date] = None, **overrides) -> "BarChartRequest":
        """Request pre-filled from config defaults."""
        values = cls._config_defaults(config, today)
        values["expression_up"] = config.default_expression_up
        values["expression_down"] = config.default_expression_down
        values.update(overrides)
        return cls(**values)


@dataclass(slots=True)
class BalanceChartRequest(BarChartRequest):
    """Balance chart request: bar expressions plus the pivot reference price."""

    price: float = 0.0


@dataclass(slots=True)
class MapChartRequest(ChartRequest):
    """Heatmap request: a single expression."""

    expression: str = DEFAULT_MAP_EXPRESSION

    def __post_init__(self):
        ChartRequest.__post_init__(self)
        _require_expression("expression", self.expression)

    @classmethod
    def from_config(cls, config: ChartConfig, today: Optional[date] = None, **overrides) -> "MapChartRequest":
        """Request pre-filled from config defaults."""
        values = cls._config_defaults(config, today)
        values["expression"] = config.default_map_expression
        values.update(overrides)
        return cls(**values)
