"""
Unit tests for the heatmap series builder.
"""

from datetime import date, timedelta

import pytest

from src.chainviz.charts.heatmap import build_heatmap, color_intensity
from src.chainviz.core.grouping import group_by_strike
from src.chainviz.core.models import HeatmapCell
from tests.fixtures.chain_fixtures import FEB, MAR, make_contract


@pytest.fixture
def grid():
    """
    Three contracts over two strikes and two expirations.

    - 100 FEB call, volume 10
    - 100 MAR call, volume 20
    - 105 FEB put, volume 30
    """
    return group_by_strike([
        make_contract(105, "P", FEB, volume=30),
        make_contract(100, "C", MAR, volume=20),
        make_contract(100, "C", FEB, volume=10),
    ])


class TestColorIntensity:
    """Test min-max normalisation."""

    def test_linear_mapping(self):
        assert color_intensity(10, 10, 30) == 0.0
        assert color_intensity(20, 10, 30) == 0.5
        assert color_intensity(30, 10, 30) == 1.0

    def test_clamped(self):
        """Test values outside the range clamp into [0, 1]."""
        assert color_intensity(60, 10, 30) == 1.0
        assert color_intensity(-5, 10, 30) == 0.0

    def test_flat_range(self):
        """Test max == min maps to the flat intensity."""
        assert color_intensity(5, 5, 5) == 0.5
        assert color_intensity(5, 5, 5, flat=0.25) == 0.25


class TestBuildHeatmap:
    """Test heatmap construction."""

    def test_cells(self, grid, evaluator):
        """Test one cell per (strike, expiration) present, on the global column axis."""
        series = build_heatmap(grid, "Volume", evaluator)

        assert series.strikes == [100, 105]
        assert series.expirations == [FEB, MAR]
        assert series.cells == [
            HeatmapCell(strike_index=0, expiration_index=0, value=10.0, color_intensity=0.0),
            HeatmapCell(strike_index=0, expiration_index=1, value=20.0, color_intensity=0.5),
            HeatmapCell(strike_index=1, expiration_index=0, value=30.0, color_intensity=1.0),
        ]

    def test_intensity_uses_contract_range_not_cell_sums(self, evaluator):
        """Test a cell summing above the per-contract max clamps to 1."""
        buckets = group_by_strike([
            make_contract(100, "C", FEB, volume=10),
            make_contract(105, "C", FEB, volume=30),
            make_contract(105, "P", FEB, volume=30),
        ])

        series = build_heatmap(buckets, "Volume", evaluator)

        assert series.cells[1].value == 60.0
        assert series.cells[1].color_intensity == 1.0

    def test_all_equal_values_use_half_intensity(self, sample_chain, evaluator):
        """Test every cell gets 0.5 when every contract evaluates the same."""
        series = build_heatmap(group_by_strike(sample_chain), "OpenInterest", evaluator)

        assert series.cells
        assert all(cell.color_intensity == 0.5 for cell in series.cells)

    def test_labels(self, grid, evaluator):
        """Test row labels are strikes and column labels are dates, both clamped."""
        series = build_heatmap(grid, "Volume", evaluator)

        assert series.row_label(0) == "100"
        assert series.row_label(1.7) == "105"
        assert series.row_label(-2) == "100"
        assert series.row_label(9) == "105"
        assert series.column_label(0) == "2026-02-20"
        assert series.column_label(1) == "2026-03-20"
        assert series.column_label(5) == "2026-03-20"

    def test_value_axis_count_capped(self, evaluator):
        """Test tick count is min(expirations, 5)."""
        start = date(2026, 1, 2)
        buckets = group_by_strike([
            make_contract(100, "C", start + timedelta(weeks=i), volume=i) for i in range(7)
        ])

        series = build_heatmap(buckets, "Volume", evaluator)

        assert len(series.expirations) == 7
        assert series.value_axis_count == 5

    def test_value_axis_count_below_cap(self, grid, evaluator):
        assert build_heatmap(grid, "Volume", evaluator).value_axis_count == 2

    def test_custom_tick_cap_and_flat_intensity(self, sample_chain, evaluator):
        """Test configurable tick cap and flat intensity."""
        series = build_heatmap(
            group_by_strike(sample_chain), "OpenInterest", evaluator,
            max_value_ticks=1, flat_intensity=0.8,
        )

        assert series.value_axis_count == 1
        assert all(cell.color_intensity == 0.8 for cell in series.cells)

    def test_each_contract_evaluated_once(self, grid, evaluator, sink):
        """Test a broken expression is reported once per contract."""
        series = build_heatmap(grid, "Volume +", evaluator)

        assert len(sink.messages) == 3
        assert all(cell.value == 0.0 for cell in series.cells)
        assert all(cell.color_intensity == 0.5 for cell in series.cells)

    def test_undated_contracts_skipped(self, evaluator, log_messages):
        """Test contracts without expiration are left off the grid with a warning."""
        buckets = group_by_strike([
            make_contract(100, "C", None, volume=99),
            make_contract(105, "C", FEB, volume=5),
        ])

        series = build_heatmap(buckets, "Volume", evaluator)

        assert series.strikes == [105]
        assert [cell.value for cell in series.cells] == [5.0]
        assert any("without an expiration" in m for m in log_messages)

    def test_empty_input(self, evaluator):
        """Test empty input yields no cells, None labels and zero ticks."""
        series = build_heatmap([], "Volume", evaluator)

        assert series.cells == []
        assert series.value_axis_count == 0
        assert series.row_label(0) is None
        assert series.column_label(0) is None
