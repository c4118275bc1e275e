"""
Chain Visualizer Configuration Module

This module provides the chart configuration and its loader.
"""

from src.chainviz.config.chart_config import ChartConfig
from src.chainviz.config.loader import configure_logging, load_config

__all__ = ["ChartConfig", "configure_logging", "load_config"]
