"""
Unit tests for contract grouping.

Tests strike and expiration bucketing and the combine/split grouping policy.
"""

from datetime import date

import pytest

from src.chainviz.core.grouping import (
    NO_EXPIRATION_CAPTION,
    group_by_expiration,
    group_by_strike,
    split_groups,
)
from src.chainviz.core.models import StrikeBucket
from tests.fixtures.chain_fixtures import APR, FEB, MAR, make_contract


class TestGroupByStrike:
    """Test strike bucketing."""

    def test_buckets_strictly_ascending(self, sample_chain):
        """Test buckets come out ascending with no duplicate strikes."""
        buckets = group_by_strike(sample_chain)
        strikes = [b.strike for b in buckets]

        assert strikes == [440, 445, 450, 455, 460]
        assert len(set(strikes)) == len(strikes)

    def test_no_contract_lost_or_duplicated(self, sample_chain):
        """Test bucket sizes add up to the input size."""
        buckets = group_by_strike(sample_chain)

        assert sum(len(b.contracts) for b in buckets) == len(sample_chain)
        assert all(len(b.contracts) == 4 for b in buckets)

    def test_bucket_members_share_strike(self, sample_chain):
        """Test every contract sits in its own strike's bucket."""
        for bucket in group_by_strike(sample_chain):
            assert all(c.strike == bucket.strike for c in bucket.contracts)

    def test_input_order_kept_within_bucket(self):
        """Test grouping is stable inside a bucket."""
        first = make_contract(100, "C", volume=1)
        second = make_contract(100, "P", volume=2)
        third = make_contract(100, "C", volume=3)

        buckets = group_by_strike([first, make_contract(90, "C"), second, third])

        assert buckets[1].contracts == (first, second, third)

    def test_empty_input(self):
        """Test empty input yields no buckets."""
        assert group_by_strike([]) == []

    def test_does_not_modify_input(self, sample_chain):
        """Test the input list keeps its order."""
        before = list(sample_chain)
        group_by_strike(sample_chain)

        assert sample_chain == before

    def test_empty_bucket_rejected(self):
        """Test an empty strike bucket cannot be built."""
        with pytest.raises(ValueError, match="cannot be empty"):
            StrikeBucket(strike=100, contracts=())


class TestGroupByExpiration:
    """Test expiration bucketing."""

    def test_ascending_by_date(self):
        """Test buckets come out ascending by expiration."""
        contracts = [
            make_contract(100, "C", APR),
            make_contract(100, "C", FEB),
            make_contract(100, "P", MAR),
            make_contract(100, "P", FEB),
        ]

        buckets = group_by_expiration(contracts)

        assert [b.expiration for b in buckets] == [FEB, MAR, APR]
        assert [len(b.contracts) for b in buckets] == [2, 1, 1]

    def test_undated_contracts_last(self):
        """Test contracts without expiration form the last bucket."""
        contracts = [make_contract(100, "C", None), make_contract(100, "C", FEB)]

        buckets = group_by_expiration(contracts)

        assert [b.expiration for b in buckets] == [FEB, None]


class TestSplitGroups:
    """Test the combine/split grouping policy."""

    def test_combine_returns_single_group(self, sample_chain):
        """Test combine=True keeps every contract under the caption."""
        groups = split_groups(sample_chain, combine=True, caption="1 : SPY")

        assert list(groups) == ["1 : SPY"]
        assert groups["1 : SPY"] == sample_chain

    def test_split_by_expiration(self, sample_chain):
        """Test combine=False yields one group per expiration in ascending order."""
        groups = split_groups(sample_chain, combine=False, caption="ignored")

        assert list(groups) == ["2026-02-20", "2026-03-20"]
        assert all(c.expiration == FEB for c in groups["2026-02-20"])
        assert all(c.expiration == MAR for c in groups["2026-03-20"])
        assert sum(len(v) for v in groups.values()) == len(sample_chain)

    def test_split_is_deterministic(self, sample_chain):
        """Test repeated calls give the same keys in the same order."""
        first = split_groups(sample_chain, combine=False, caption="x")
        second = split_groups(list(reversed(sample_chain)), combine=False, caption="x")

        assert list(first) == list(second)

    def test_undated_group_caption(self):
        """Test undated contracts get their own caption, after dated groups."""
        contracts = [make_contract(100, "C", None), make_contract(100, "C", date(2026, 1, 16))]

        groups = split_groups(contracts, combine=False, caption="x")

        assert list(groups) == ["2026-01-16", NO_EXPIRATION_CAPTION]

    def test_split_empty_input(self):
        """Test splitting nothing yields no groups."""
        assert split_groups([], combine=False, caption="x") == {}
