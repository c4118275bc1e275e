"""
Contract Snapshot Cache

In-memory, per-symbol store of option contracts shared between chart
requests and the refresh cycle.

Key patterns:
- Copy-on-write: replace() stores an immutable tuple
- Copy-on-read: snapshot() hands out that tuple, so a concurrent refresh
  swaps the entry without touching a chart that is mid-aggregation
- The cache never schedules itself; the caller drives refresh()
"""

import threading
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from src.chainviz.config.chart_config import DEFAULT_ASSETS, ChartConfig
from src.chainviz.core.models import OptionContract


# (symbol, min expiration, max expiration) -> contracts
ContractSource = Callable[[str, date, date], Sequence[OptionContract]]


def filter_by_expiration(
    contracts: Iterable[OptionContract],
    start: date,
    end: date,
) -> list[OptionContract]:
    """Keep contracts expiring within [start, end]; undated contracts are dropped."""
    return [
        c for c in contracts
        if c.expiration is not None and start <= c.expiration <= end
    ]


class ContractCache:
    """
    Thread-safe snapshot cache of option chains.

    Attributes:
        horizon_days: How far ahead refresh() fetches expirations
        refresh_interval_seconds: Minimum spacing between refresh_if_due() runs
        last_refresh: When refresh() last completed (None before the first run)
    """

    def __init__(
        self,
        assets: Optional[Iterable[str]] = None,
        horizon_days: int = 5 * 365,
        refresh_interval_seconds: int = 60,
    ):
        self.horizon_days = horizon_days
        self.refresh_interval_seconds = refresh_interval_seconds
        self.last_refresh: Optional[datetime] = None
        self._lock = threading.RLock()
        self._contracts: dict[str, tuple[OptionContract, ...]] = {}
        self._assets: list[str] = []

        for symbol in (DEFAULT_ASSETS if assets is None else assets):
            self.track(symbol)

    @classmethod
    def from_config(cls, config: ChartConfig) -> "ContractCache":
        """Create a cache tracking the configured assets."""
        return cls(
            assets=config.tracked_assets,
            horizon_days=config.refresh_horizon_days,
            refresh_interval_seconds=config.refresh_interval_seconds,
        )

    @staticmethod
    def _key(symbol: str) -> str:
        return symbol.strip().upper()

    @property
    def tracked(self) -> list[str]:
        """Symbols refreshed by refresh()."""
        with self._lock:
            return list(self._assets)

    def track(self, symbol: str) -> None:
        """Add a symbol to the refresh list (no-op if already tracked)."""
        key = self._key(symbol)
        with self._lock:
            if key not in self._assets:
                self._assets.append(key)

    def replace(self, symbol: str, contracts: Iterable[OptionContract]) -> int:
        """
        Replace the chain stored for a symbol.

        Returns:
            int: Number of contracts stored
        """
        snapshot = tuple(contracts)
        with self._lock:
            self._contracts[self._key(symbol)] = snapshot
        return len(snapshot)

    def snapshot(self, symbol: str) -> Optional[tuple[OptionContract, ...]]:
        """Return the stored chain, or None if the symbol has never been loaded."""
        with self._lock:
            return self._contracts.get(self._key(symbol))

    def snapshot_range(self, symbol: str, start: date, end: date) -> Optional[list[OptionContract]]:
        """Return the stored chain filtered to [start, end], or None if unknown."""
        snapshot = self.snapshot(symbol)
        if snapshot is None:
            return None
        return filter_by_expiration(snapshot, start, end)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return self._key(symbol) in self._contracts

    def refresh(self, source: ContractSource, today: Optional[date] = None) -> int:
        """
        Re-fetch every tracked symbol from a source.

        A failing symbol keeps its previous chain and does not stop the
        remaining symbols from refreshing.

        Args:
            source: Contract source collaborator
            today: First expiration date to fetch (default: today)

        Returns:
            int: Number of symbols refreshed
        """
        start = today or date.today()
        end = start + timedelta(days=self.horizon_days)
        refreshed = 0

        for symbol in self.tracked:
            try:
                count = self.replace(symbol, source(symbol, start, end))
            except Exception as e:
                logger.error(f"Failed to refresh {symbol}: {e}")
                continue

            refreshed += 1
            logger.info(f"✓ Refreshed {symbol}: {count} contracts")

        self.last_refresh = datetime.now()
        return refreshed

    def is_refresh_due(self, now: Optional[datetime] = None) -> bool:
        """Check whether refresh_interval_seconds has passed since the last refresh."""
        if self.last_refresh is None:
            return True
        elapsed = ((now or datetime.now()) - self.last_refresh).total_seconds()
        return elapsed >= self.refresh_interval_seconds

    def refresh_if_due(
        self,
        source: ContractSource,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Run refresh() when the refresh interval has elapsed.

        Returns:
            int: Number of symbols refreshed (0 when not due)
        """
        if not self.is_refresh_due(now):
            logger.debug("Refresh skipped: interval not elapsed")
            return 0
        return self.refresh(source, today)
