"""
Chart Series Builders

Exports:
- build_bars: one up/down pair per strike
- build_balance: cumulative distribution pivoted around a price
- build_heatmap: strike x expiration grid with color intensities
"""

from src.chainviz.charts.balance import build_balance
from src.chainviz.charts.bars import build_bars
from src.chainviz.charts.heatmap import build_heatmap

__all__ = ["build_bars", "build_balance", "build_heatmap"]
