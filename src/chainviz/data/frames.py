"""
Polars Frame Adapters

Converts option snapshot frames into contracts, and chart series into
frames for the charting side.

Snapshot frame columns (same layout as the option snapshot tables):
- strike: Strike price
- expiry: Expiration (YYYYMMDD string, ISO string, or date)
- right: Put or Call ('P'/'C' or 'PUT'/'CALL')
- volume, open_interest, iv, delta, gamma, theta, vega
- optional: bid_size, ask_size, intrinsic_value, symbol

Missing or null numeric columns become 0.0.
"""

from datetime import date, datetime
from typing import Optional

import polars as pl

from src.chainviz.core.models import (
    BalanceSeries,
    BarSeries,
    HeatmapSeries,
    OptionContract,
    OptionSide,
)


# Contract attribute -> candidate frame columns, first match wins
NUMERIC_COLUMNS = {
    "volume": ("volume",),
    "volatility": ("iv", "volatility"),
    "open_interest": ("open_interest",),
    "intrinsic_value": ("intrinsic_value",),
    "bid_size": ("bid_size",),
    "ask_size": ("ask_size",),
    "vega": ("vega",),
    "gamma": ("gamma",),
    "theta": ("theta",),
    "delta": ("delta",),
}


def parse_expiry(value) -> Optional[date]:
    """
    Parse an expiry value.

    Raises:
        ValueError: If a string is neither YYYYMMDD nor ISO format
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    if len(text) == 8 and text.isdigit():
        return datetime.strptime(text, "%Y%m%d").date()
    return date.fromisoformat(text)


def contracts_from_frame(df: pl.DataFrame) -> list[OptionContract]:
    """
    Convert an option snapshot frame into contracts.

    Args:
        df: Frame with at least strike, expiry and right columns

    Returns:
        list[OptionContract] in frame row order

    Raises:
        ValueError: If a required column is missing or a row is malformed
    """
    missing = [c for c in ("strike", "expiry", "right") if c not in df.columns]
    if missing:
        raise ValueError(f"Snapshot frame missing columns: {missing}")

    columns = {
        attr: next((c for c in candidates if c in df.columns), None)
        for attr, candidates in NUMERIC_COLUMNS.items()
    }
    has_symbol = "symbol" in df.columns

    contracts = []
    for row in df.iter_rows(named=True):
        numeric = {
            attr: float(row[column] or 0.0) if column else 0.0
            for attr, column in columns.items()
        }
        contracts.append(
            OptionContract(
                strike=float(row["strike"]),
                expiration=parse_expiry(row["expiry"]),
                side=OptionSide.parse(row["right"]),
                symbol=row["symbol"] if has_symbol else None,
                **numeric,
            )
        )

    return contracts


POINT_SCHEMA = {"position": pl.Int64, "strike": pl.Float64, "up": pl.Float64, "down": pl.Float64}


def _points_frame(points, strikes) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "position": [p.position_index for p in points],
            "strike": [strikes[p.position_index] for p in points],
            "up": [p.up_value for p in points],
            "down": [p.down_value for p in points],
        },
        schema=POINT_SCHEMA,
    )


def bars_to_frame(series: BarSeries) -> pl.DataFrame:
    """Bar series as a frame: position, strike, up, down."""
    return _points_frame(series.points, series.strikes)


def balance_to_frame(series: BalanceSeries) -> pl.DataFrame:
    """Balance series as a frame; up/down are null where a walk never reached."""
    return _points_frame(series.points, series.strikes)


def heatmap_to_frame(series: HeatmapSeries) -> pl.DataFrame:
    """Heatmap cells as a long frame: strike, expiration, value, intensity plus grid indexes."""
    return pl.DataFrame(
        {
            "strike_index": [c.strike_index for c in series.cells],
            "expiration_index": [c.expiration_index for c in series.cells],
            "strike": [series.strikes[c.strike_index] for c in series.cells],
            "expiration": [series.expirations[c.expiration_index] for c in series.cells],
            "value": [c.value for c in series.cells],
            "intensity": [c.color_intensity for c in series.cells],
        },
        schema={
            "strike_index": pl.Int64,
            "expiration_index": pl.Int64,
            "strike": pl.Float64,
            "expiration": pl.Date,
            "value": pl.Float64,
            "intensity": pl.Float64,
        },
    )
