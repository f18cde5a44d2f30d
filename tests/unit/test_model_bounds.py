"""Unit tests for parameter bounds on hold variables and constraints."""

import pytest

from infopt import (
    BoundedScalarConstraint,
    EmptyIntersectionError,
    FiniteConstraintRef,
    InfiniteConstraintRef,
    IntervalSet,
    LessThan,
    OutOfDomainError,
    ParameterBounds,
)


@pytest.mark.unit
def test_hold_variable_bounds_must_fit_domain(model, time_param):
    with pytest.raises(OutOfDomainError):
        model.add_variable(name="h", parameter_bounds={time_param: (5, 20)})
    assert model.num_variables() == 0


@pytest.mark.unit
def test_constraint_inherits_hold_variable_bounds(model, time_param):
    h = model.add_variable(name="h", parameter_bounds={time_param: (0, 5)})
    x = model.add_variable((time_param,), name="x")

    con = model.add_constraint(
        x + h, LessThan(1), name="c", parameter_bounds={time_param: (2, 8)}
    )

    assert model.parameter_bounds(con) == {time_param: IntervalSet(2, 5)}
    assert model.original_parameter_bounds(con) == {time_param: IntervalSet(2, 8)}
    assert isinstance(con.constraint_object(), BoundedScalarConstraint)
    assert con.has_parameter_bounds()


@pytest.mark.unit
def test_disjoint_hold_bounds_raise(model, time_param):
    h = model.add_variable(name="h", parameter_bounds={time_param: (0, 1)})

    with pytest.raises(EmptyIntersectionError):
        model.add_constraint(h, LessThan(1), parameter_bounds={time_param: (5, 6)})
    assert model.num_constraints() == 0


@pytest.mark.unit
def test_unbounded_constraint_has_empty_bounds(populated, model):
    con = populated["c1"]

    assert model.parameter_bounds(con) == ParameterBounds()
    assert not con.has_parameter_bounds()


@pytest.mark.unit
def test_merge_bounds_on_hold_variable_tightens_its_constraints(model, time_param):
    h = model.add_variable(name="h", parameter_bounds={time_param: (0, 8)})
    con = model.add_constraint(h, LessThan(1), name="c")

    merged = model.merge_bounds(h, {time_param: (2, 10)})

    assert merged == {time_param: IntervalSet(2, 8)}
    assert model.parameter_bounds(h) == merged
    assert model.parameter_bounds(con) == {time_param: IntervalSet(2, 8)}


@pytest.mark.unit
def test_merge_bounds_on_constraint(model, time_param):
    z = model.add_variable(name="z")
    con = model.add_constraint(z, LessThan(1), name="c")

    model.merge_bounds(con, {time_param: (1, 3)})

    assert model.parameter_bounds(con) == {time_param: IntervalSet(1, 3)}
    assert model.used_by_constraint(time_param)
    with pytest.raises(EmptyIntersectionError):
        model.merge_bounds(con, {time_param: (4, 5)})
    assert model.parameter_bounds(con) == {time_param: IntervalSet(1, 3)}


@pytest.mark.unit
def test_constraint_reference_type_follows_expression(populated, model):
    z = populated["z"]

    finite = model.add_constraint(2 * z, LessThan(3))

    assert isinstance(populated["c1"], InfiniteConstraintRef)
    assert isinstance(finite, FiniteConstraintRef)
    assert not finite.is_info_constraint()
