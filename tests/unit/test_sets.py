"""Unit tests for infinite sets and constraint sets."""

import math

import pytest
from scipy import stats

from infopt import (
    CollectionSet,
    DimensionMismatchError,
    Interval,
    IntervalSet,
    InvalidBoundsError,
    MultiDistributionSet,
    UniDistributionSet,
)


class TestIntervalSet:
    @pytest.mark.unit
    def test_bounds_and_membership(self):
        interval = IntervalSet(0, 1)

        assert interval.bounds() == (0.0, 1.0)
        assert interval.contains(0)
        assert interval.contains(1)
        assert not interval.contains(1.5)

    @pytest.mark.unit
    def test_degenerate_interval_is_allowed(self):
        assert IntervalSet(2, 2).contains(2)

    @pytest.mark.unit
    def test_reversed_bounds_raise(self):
        with pytest.raises(InvalidBoundsError, match="greater than upper bound"):
            IntervalSet(1, 0)

    @pytest.mark.unit
    def test_nan_bounds_raise(self):
        with pytest.raises(InvalidBoundsError):
            IntervalSet(math.nan, 1)

    @pytest.mark.unit
    def test_infinite_bounds_are_allowed(self):
        interval = IntervalSet(-math.inf, math.inf)

        assert interval.contains(1e300)

    @pytest.mark.unit
    def test_intersect_keeps_tighter_interval(self):
        assert IntervalSet(0, 5).intersect(IntervalSet(2, 10)) == IntervalSet(2, 5)

    @pytest.mark.unit
    def test_disjoint_intersection_raises(self):
        with pytest.raises(InvalidBoundsError):
            IntervalSet(0, 1).intersect(IntervalSet(2, 3))

    @pytest.mark.unit
    def test_is_subset(self):
        assert IntervalSet(1, 2).is_subset(IntervalSet(0, 3))
        assert not IntervalSet(1, 4).is_subset(IntervalSet(0, 3))


@pytest.mark.unit
def test_distribution_set_bounds_follow_support():
    """UniDistributionSet reports the support of its distribution"""
    uniform = UniDistributionSet(stats.uniform(loc=2, scale=3))
    normal = UniDistributionSet(stats.norm())

    assert uniform.bounds() == (2.0, 5.0)
    assert normal.bounds() == (-math.inf, math.inf)
    assert normal.contains(100.0)


@pytest.mark.unit
def test_distribution_set_rejects_non_distributions():
    with pytest.raises(TypeError):
        UniDistributionSet([0, 1])


@pytest.mark.unit
def test_multivariate_distribution_dimension():
    joint = MultiDistributionSet(stats.multivariate_normal(mean=[0, 0, 0]))

    assert joint.dimension() == 3
    assert joint.contains([1.0, 2.0, 3.0])
    assert not joint.contains([1.0, 2.0])


class TestCollectionSet:
    @pytest.mark.unit
    def test_dimension_and_membership(self):
        collection = CollectionSet([IntervalSet(0, 1), IntervalSet(-1, 0)])

        assert collection.dimension() == 2
        assert collection.contains([0.5, -0.5])
        assert not collection.contains([0.5, 0.5])

    @pytest.mark.unit
    def test_empty_collection_raises(self):
        with pytest.raises(DimensionMismatchError):
            CollectionSet([])

    @pytest.mark.unit
    def test_members_must_be_scalar_sets(self):
        with pytest.raises(TypeError):
            CollectionSet([(0, 1)])


@pytest.mark.unit
def test_constraint_interval_validates_bounds():
    assert Interval(0, 1).upper == 1
    with pytest.raises(InvalidBoundsError):
        Interval(2, 1)
