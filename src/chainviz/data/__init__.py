"""
Contract Data

Snapshot cache and polars frame adapters.
"""

from src.chainviz.data.contract_cache import ContractCache, ContractSource, filter_by_expiration

__all__ = ["ContractCache", "ContractSource", "filter_by_expiration"]
