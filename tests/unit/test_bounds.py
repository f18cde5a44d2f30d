"""Unit tests for ParameterBounds construction and merging."""

import pytest

from infopt import (
    EmptyIntersectionError,
    IntervalSet,
    InvalidBoundsError,
    ParameterBounds,
)


@pytest.fixture
def params(model):
    t = model.add_parameter(IntervalSet(0, 10), name="t")
    x1, x2 = model.add_parameters([IntervalSet(0, 1), IntervalSet(0, 1)], names="x")
    return t, x1, x2


@pytest.mark.unit
def test_pairs_are_converted_to_intervals(params):
    t, _, _ = params

    bounds = ParameterBounds({t: (0, 5)})

    assert bounds[t] == IntervalSet(0, 5)
    assert t in bounds
    assert len(bounds) == 1


@pytest.mark.unit
def test_vector_keys_are_expanded(params):
    """A tuple key gives one entry per parameter"""
    t, x1, x2 = params

    bounds = ParameterBounds({t: IntervalSet(0, 1), (x1, x2): IntervalSet(0, 0.5)})

    assert len(bounds) == 3
    assert bounds[x1] == bounds[x2] == IntervalSet(0, 0.5)


@pytest.mark.unit
def test_non_parameter_keys_are_rejected(model):
    z = model.add_variable(name="z")

    with pytest.raises(InvalidBoundsError):
        ParameterBounds({z: (0, 1)})


@pytest.mark.unit
def test_finite_parameter_keys_are_rejected(model):
    p = model.add_finite_parameter(3.0, "p")

    with pytest.raises(InvalidBoundsError):
        ParameterBounds({p: (0, 1)})


@pytest.mark.unit
def test_malformed_interval_is_rejected(params):
    t, _, _ = params

    with pytest.raises(InvalidBoundsError):
        ParameterBounds({t: (0, 1, 2)})
    with pytest.raises(InvalidBoundsError):
        ParameterBounds({t: (2, 1)})


class TestMerge:
    @pytest.mark.unit
    def test_shared_keys_intersect_and_others_pass_through(self, params):
        t, x1, _ = params
        left = ParameterBounds({t: (0, 5)})
        right = ParameterBounds({t: (2, 8), x1: (0, 0.5)})

        merged = left.merge(right)

        assert merged == {t: IntervalSet(2, 5), x1: IntervalSet(0, 0.5)}
        assert left == {t: IntervalSet(0, 5)}

    @pytest.mark.unit
    def test_empty_intersection_raises(self, params):
        t, _, _ = params

        with pytest.raises(EmptyIntersectionError):
            ParameterBounds({t: (0, 1)}).merge(ParameterBounds({t: (2, 3)}))

    @pytest.mark.unit
    def test_merging_empty_bounds_is_identity(self, params):
        t, _, _ = params
        bounds = ParameterBounds({t: (1, 2)})

        assert bounds.merge(ParameterBounds()) == bounds
        assert ParameterBounds().merge(bounds) == bounds
        assert not ParameterBounds()


@pytest.mark.unit
def test_without_removes_one_key(params):
    t, x1, _ = params
    bounds = ParameterBounds({t: (0, 1), x1: (0, 1)})

    assert list(bounds.without(t).refs()) == [x1]
    assert len(bounds) == 2

    @pytest.mark.unit
    def test_concrete_and_general_references_share_a_key(self, model, params):
        """A resolved reference bounds the same parameter as its general one"""
        t, _, _ = params
        resolved = model.resolve(t)

        bounds = ParameterBounds({resolved: (0, 5)})

        assert list(bounds.refs()) == [t]
        assert bounds[resolved] == bounds[t] == IntervalSet(0, 5)
        assert bounds.merge(ParameterBounds({t: (2, 8)})) == {t: IntervalSet(2, 5)}
        with pytest.raises(EmptyIntersectionError):
            bounds.merge(ParameterBounds({t: (6, 8)}))
        with pytest.raises(EmptyIntersectionError):
            ParameterBounds({t: (6, 8)}).merge(bounds)
