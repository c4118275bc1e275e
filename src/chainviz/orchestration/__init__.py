"""
Chart Orchestration

Exports:
- ChartService: runs chart requests end to end and keeps the groups on screen
- ChartRequest, BarChartRequest, BalanceChartRequest, MapChartRequest
"""

from src.chainviz.orchestration.chart_service import ChartService
from src.chainviz.orchestration.requests import (
    BalanceChartRequest,
    BarChartRequest,
    ChartRequest,
    MapChartRequest,
)

__all__ = [
    "ChartService",
    "ChartRequest",
    "BarChartRequest",
    "BalanceChartRequest",
    "MapChartRequest",
]
