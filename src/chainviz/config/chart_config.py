"""
Chart Configuration

Defaults for chart requests, the snapshot cache and heatmap rendering.

Config location: config/chainviz.yaml

Schema:
- default_symbol / default_range_days: editor defaults
- default_expression_up / default_expression_down / default_map_expression
- combine_by_default: render all expirations as one group
- tracked_assets / refresh_interval_seconds / refresh_horizon_days: cache refresh
- max_value_ticks / flat_intensity: heatmap rendering
- snackbar_capacity: number of error messages kept for display
- log_level / log_file: logging
"""

from dataclasses import dataclass, field, fields
from typing import Any, List, Optional


DEFAULT_ASSETS = ["SPY", "AAPL", "MSFT", "GOOG", "TSLA", "NVDA"]

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class ChartConfig:
    """
    Chart configuration.

    Attributes:
        default_symbol: Symbol pre-filled in chart requests
        default_range_days: Days from today covered by the default date range
        default_expression_up: Default up expression (bar/balance)
        default_expression_down: Default down expression (bar/balance)
        default_map_expression: Default heatmap expression
        combine_by_default: Combine expirations into one group by default
        tracked_assets: Symbols the cache refreshes
        refresh_interval_seconds: Interval between cache refreshes (see ContractCache.refresh_if_due)
        refresh_horizon_days: How far ahead a refresh fetches expirations
        max_value_ticks: Cap on heatmap value axis ticks
        flat_intensity: Heatmap intensity when every value is equal
        snackbar_capacity: Messages kept by the snackbar sink
        log_level: Logging level
        log_file: Log file path (None = stderr only)
    """

    default_symbol: str = "SPY"
    default_range_days: int = 5
    default_expression_up: str = "(CVolume - COpenInterest) * CGamma"
    default_expression_down: str = "(PVolume - POpenInterest) * PGamma"
    default_map_expression: str = "CVolume + PVolume"
    combine_by_default: bool = True
    tracked_assets: List[str] = field(default_factory=lambda: list(DEFAULT_ASSETS))
    refresh_interval_seconds: int = 60
    refresh_horizon_days: int = 5 * 365
    max_value_ticks: int = 5
    flat_intensity: float = 0.5
    snackbar_capacity: int = 10
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/chainviz.log"

    def __post_init__(self):
        """Normalise symbols and log level."""
        self.default_symbol = self.default_symbol.strip().upper()
        self.tracked_assets = [s.strip().upper() for s in self.tracked_assets]
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChartConfig":
        """
        Create config from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If the resulting config is invalid
        """
        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in (data or {}).items() if k in known})

        errors = config.validate()
        if errors:
            raise ValueError(
                "Chart config validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        return config

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.default_symbol:
            errors.append("default_symbol cannot be empty")
        if self.default_range_days < 0:
            errors.append(f"default_range_days must be >= 0: {self.default_range_days}")

        for name in ("default_expression_up", "default_expression_down", "default_map_expression"):
            if not getattr(self, name).strip():
                errors.append(f"{name} cannot be empty")

        if not all(self.tracked_assets):
            errors.append("tracked_assets cannot contain empty symbols")
        if self.refresh_interval_seconds < 10:
            errors.append("refresh_interval_seconds must be >= 10 seconds")
        if self.refresh_horizon_days < 1:
            errors.append(f"refresh_horizon_days must be >= 1: {self.refresh_horizon_days}")

        if self.max_value_ticks < 1:
            errors.append(f"max_value_ticks must be >= 1: {self.max_value_ticks}")
        if not (0 <= self.flat_intensity <= 1):
            errors.append(f"flat_intensity must be between 0 and 1: {self.flat_intensity}")
        if self.snackbar_capacity < 1:
            errors.append(f"snackbar_capacity must be >= 1: {self.snackbar_capacity}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Invalid log_level: {self.log_level}")

        return errors
