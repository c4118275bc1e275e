"""
Contract Grouping

Buckets option contracts by strike and by expiration, and splits a chart
request into per-expiration groups.

Bucket order is positional: chart index i corresponds to the i-th bucket,
so every function here returns buckets in ascending key order and never
materialises an empty bucket.
"""

from datetime import date
from itertools import groupby
from typing import Iterable, Optional

from src.chainviz.core.models import ExpirationBucket, OptionContract, StrikeBucket


NO_EXPIRATION_CAPTION = "No expiration"


def _expiration_key(contract: OptionContract) -> tuple[bool, date]:
    # Undated contracts sort after every dated one
    if contract.expiration is None:
        return (True, date.max)
    return (False, contract.expiration)


def group_by_strike(contracts: Iterable[OptionContract]) -> list[StrikeBucket]:
    """
    Group contracts by strike price.

    Args:
        contracts: Contracts in any order

    Returns:
        Buckets strictly ascending by strike; contracts keep input order
        inside a bucket
    """
    ordered = sorted(contracts, key=lambda c: c.strike)

    return [
        StrikeBucket(strike=strike, contracts=tuple(members))
        for strike, members in groupby(ordered, key=lambda c: c.strike)
    ]


def group_by_expiration(contracts: Iterable[OptionContract]) -> list[ExpirationBucket]:
    """
    Group contracts by expiration date.

    Args:
        contracts: Contracts in any order (usually one strike bucket)

    Returns:
        Buckets ascending by expiration, undated contracts last
    """
    ordered = sorted(contracts, key=_expiration_key)

    return [
        ExpirationBucket(expiration=members[0].expiration, contracts=tuple(members))
        for members in (
            list(group) for _, group in groupby(ordered, key=_expiration_key)
        )
    ]


def expiration_caption(expiration: Optional[date]) -> str:
    """Caption for a per-expiration group."""
    if expiration is None:
        return NO_EXPIRATION_CAPTION
    return expiration.isoformat()


def split_groups(
    contracts: Iterable[OptionContract],
    combine: bool,
    caption: str,
) -> dict[str, list[OptionContract]]:
    """
    Decide how a request's contracts are rendered.

    Args:
        contracts: Contracts for the request
        combine: True to render everything as one group
        caption: Caption of the combined group

    Returns:
        Ordered mapping of group caption -> contracts. One entry when
        combine is True, otherwise one entry per distinct expiration in
        ascending order.
    """
    contracts = list(contracts)

    if combine:
        return {caption: contracts}

    return {
        expiration_caption(bucket.expiration): list(bucket.contracts)
        for bucket in group_by_expiration(contracts)
    }
