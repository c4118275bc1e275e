"""
Chart Service

Runs a chart request end to end:

    cache snapshot -> expiration range filter -> grouping policy
        -> strike buckets -> series builder -> ChartGroup

and keeps the groups currently on screen.

Usage:
    service = ChartService(cache, SnackbarErrorSink(), config)
    group = service.create_bar_chart(BarChartRequest(name="SPY"))
    for caption, series in group.panels.items():
        ...
    service.clear()
"""

from typing import Callable, Optional

from loguru import logger

from src.chainviz.alerts.notifier import ErrorSink, SnackbarErrorSink
from src.chainviz.charts.balance import build_balance
from src.chainviz.charts.bars import build_bars
from src.chainviz.charts.heatmap import build_heatmap
from src.chainviz.config.chart_config import ChartConfig
from src.chainviz.core.evaluator import ExpressionEvaluator
from src.chainviz.core.grouping import group_by_strike, split_groups
from src.chainviz.core.models import ChartGroup, ChartKind, OptionContract, StrikeBucket
from src.chainviz.data.contract_cache import ContractCache, ContractSource, filter_by_expiration
from src.chainviz.orchestration.requests import (
    BalanceChartRequest,
    BarChartRequest,
    ChartRequest,
    MapChartRequest,
)


class ChartService:
    """
    Build chart groups from cached option chains.

    Attributes:
        cache: Snapshot cache the chains are read from
        sink: Error sink for soft failures
        config: Chart configuration
        source: Optional collaborator used for symbols the cache does not hold
        evaluator: Shared soft-failing evaluator
        groups: Chart groups on screen, keyed by caption
    """

    def __init__(
        self,
        cache: ContractCache,
        sink: ErrorSink,
        config: Optional[ChartConfig] = None,
        source: Optional[ContractSource] = None,
    ):
        self.cache = cache
        self.sink = sink
        self.config = config or ChartConfig()
        self.source = source
        self.evaluator = ExpressionEvaluator(sink)
        self.groups: dict[str, ChartGroup] = {}
        self._count = 1

    @classmethod
    def from_config(
        cls,
        config: ChartConfig,
        source: Optional[ContractSource] = None,
    ) -> "ChartService":
        """Create a service with a configured cache and snackbar sink."""
        return cls(
            ContractCache.from_config(config),
            SnackbarErrorSink(capacity=config.snackbar_capacity),
            config,
            source,
        )

    def _next_caption(self, request: ChartRequest) -> str:
        caption = f"{self._count} : {request.name} : {request.start} : {request.end}"
        self._count += 1
        return caption

    def load_contracts(self, request: ChartRequest) -> list[OptionContract]:
        """
        Load the contracts for a request.

        Reads a snapshot from the cache. Symbols the cache does not hold are
        fetched from the source (when configured) and tracked for refresh.
        Fetch failures are reported to the sink and yield an empty list.

        Returns:
            Contracts expiring within the request range
        """
        contracts = self.cache.snapshot_range(request.name, request.start, request.end)
        if contracts is not None:
            return contracts

        if self.source is None:
            logger.warning(f"No cached chain for {request.name} and no source configured")
            return []

        try:
            fetched = self.source(request.name, request.start, request.end)
        except Exception as e:
            logger.error(f"Failed to fetch {request.name}: {e}")
            self.sink.notify(f"Failed to load {request.name}: {e}")
            return []

        self.cache.track(request.name)
        return filter_by_expiration(fetched, request.start, request.end)

    def _create(
        self,
        request: ChartRequest,
        kind: ChartKind,
        build: Callable[[list[StrikeBucket]], object],
    ) -> ChartGroup:
        caption = self._next_caption(request)
        contracts = self.load_contracts(request)

        group = ChartGroup(caption=caption, kind=kind)
        for panel, members in split_groups(contracts, request.combine, caption).items():
            group.panels[panel] = build(group_by_strike(members))

        self.groups[caption] = group

        logger.info(
            f"Created {kind.value} chart '{caption}': "
            f"{len(contracts)} contracts, {group.panel_count} panels"
        )

        return group

    def create_bar_chart(self, request: BarChartRequest) -> ChartGroup:
        """Create a bar chart group (one up/down pair per strike)."""
        return self._create(
            request,
            ChartKind.BAR,
            lambda buckets: build_bars(
                buckets,
                request.expression_up,
                request.expression_down,
                self.evaluator,
            ),
        )

    def create_balance_chart(self, request: BalanceChartRequest) -> ChartGroup:
        """Create a balance chart group pivoted around request.price."""
        return self._create(
            request,
            ChartKind.BALANCE,
            lambda buckets: build_balance(
                buckets,
                request.price,
                request.expression_up,
                request.expression_down,
                self.evaluator,
            ),
        )

    def create_map_chart(self, request: MapChartRequest) -> ChartGroup:
        """Create a heatmap group (strike x expiration)."""
        return self._create(
            request,
            ChartKind.MAP,
            lambda buckets: build_heatmap(
                buckets,
                request.expression,
                self.evaluator,
                max_value_ticks=self.config.max_value_ticks,
                flat_intensity=self.config.flat_intensity,
            ),
        )

    def close(self, caption: str) -> bool:
        """
        Remove one chart group.

        Returns:
            True if the group existed
        """
        return self.groups.pop(caption, None) is not None

    def clear(self) -> None:
        """Remove every chart group."""
        self.groups.clear()
