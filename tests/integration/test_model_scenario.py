"""Integration tests for end-to-end modeling workflows on InfiniteModel."""

import pytest
from scipy import stats

from infopt import (
    USER_DEFINED,
    AffExpr,
    DeletionPolicy,
    DimensionMismatchError,
    GreaterThan,
    IndependentParameter,
    InfiniteModel,
    IntervalSet,
    NotFiniteError,
    ObjectInUseError,
    ObjectiveSense,
    ObjectNotFoundError,
    OutOfDomainError,
    create_model,
)
from infopt.indices import ObjectKind


@pytest.mark.integration
def test_point_objective_deletion_order():
    """A used parameter is blocked until its variables are deleted bottom-up"""
    # Arrange
    model = InfiniteModel()
    t = model.add_parameter(
        IntervalSet(0, 1), supports=[0.0, 1.0], name="t", label=USER_DEFINED
    )
    x = model.add_variable((t,), name="x")
    x_half = model.add_point_variable(x, (0.5,))
    model.set_objective(ObjectiveSense.MIN, x_half)

    # Act & Assert
    with pytest.raises(ObjectInUseError) as excinfo:
        model.delete(t)
    assert ObjectKind.INFINITE_VARIABLE in excinfo.value.blockers

    model.delete(x_half)
    assert model.objective_function() == AffExpr()

    model.delete(x)
    model.delete(t)

    for ref in (t, x, x_half):
        with pytest.raises(ObjectNotFoundError):
            model.resolve(ref)
    assert model.num_parameters() == model.num_variables() == 0


@pytest.mark.integration
def test_inserted_objects_resolve_to_their_content():
    model = InfiniteModel()
    parameter = IndependentParameter(IntervalSet(0, 2))
    parameter.add_supports([0, 1, 2])

    t = model.insert_parameter(parameter, "t")

    assert model.resolve(t).core_object() is parameter
    assert model.resolve(t).parameter_set() == IntervalSet(0, 2)


@pytest.mark.integration
def test_deleting_one_object_does_not_disturb_others():
    model = InfiniteModel()
    t = model.add_parameter(IntervalSet(0, 1), supports=[0, 1], name="t")
    a = model.add_variable((t,), name="a")
    b = model.add_variable((t,), name="b")
    c = model.add_constraint(a + b, GreaterThan(0), name="c")

    model.delete(c)
    model.delete(a)

    assert model.resolve(b).parameter_refs() == (t,)
    assert model.dependents_of(t) == [b.index]
    assert model.variable_by_name("b") == b
    with pytest.raises(ObjectNotFoundError):
        model.name(a)


@pytest.mark.integration
def test_dependent_group_supports_are_shared():
    model = InfiniteModel()
    group = model.add_parameters([IntervalSet(0, 1)] * 3, names="xi")

    with pytest.raises(DimensionMismatchError):
        model.add_supports(group[0], [0.1, 0.2])
    model.add_supports(group[1], [0.1, 0.2, 0.3])

    assert [model.num_supports(ref) for ref in group] == [1, 1, 1]
    assert [ref.name() for ref in group] == ["xi[1]", "xi[2]", "xi[3]"]


@pytest.mark.integration
def test_stochastic_model_with_expectation_objective():
    """Random parameter, recourse variable and an expectation in the objective"""
    model = create_model(seed=True)
    xi = model.add_parameter(stats.norm(loc=1, scale=0.1), num_supports=20, name="xi")
    first = model.add_variable(name="first", lower_bound=0)
    recourse = model.add_variable((xi,), name="recourse", lower_bound=0)
    model.add_constraint(first + recourse - 2 * xi, GreaterThan(0), name="demand")
    expectation = model.support_sum(recourse, xi, name="E[recourse]")

    with pytest.raises(NotFiniteError):
        model.set_objective(ObjectiveSense.MIN, first + recourse)
    model.set_objective(ObjectiveSense.MIN, first + 0.05 * expectation)

    assert model.is_finite(expectation)
    assert model.used_by_objective(expectation)
    assert model.num_supports(xi) == 20
    assert model.num_constraints() == 3
    with pytest.raises(ObjectInUseError):
        model.delete_supports(xi)


@pytest.mark.integration
def test_cascade_policy_clears_model_and_objective():
    model = create_model(deletion_policy=DeletionPolicy.CASCADE)
    t = model.add_parameter(IntervalSet(0, 1), supports=[0, 0.5, 1], name="t")
    x = model.add_variable((t,), name="x", upper_bound=4)
    x_end = model.add_point_variable(x, (1,))
    total = model.support_sum(x, t)
    z = model.add_variable(name="z")
    model.add_constraint(total + z, GreaterThan(1), name="link")
    model.set_objective(ObjectiveSense.MAX, 2 * x_end + z)

    model.delete(t)

    assert model.num_parameters() == 0
    assert model.num_measures() == 0
    assert model.all_variables() == [z]
    assert model.num_constraints() == 0
    assert model.objective_function() == AffExpr(0.0, {z: 1.0})
    assert not model.used_by_constraint(z)
    assert model.used_by_objective(z)


@pytest.mark.integration
def test_supports_outside_interval_are_rejected_without_side_effects():
    model = InfiniteModel()
    t = model.add_parameter(IntervalSet(0, 1), supports=[0, 1], name="t")

    with pytest.raises(OutOfDomainError):
        model.add_supports(t, [0.5, 1.5])

    assert list(model.supports(t)) == [0.0, 1.0]
    assert model.add_supports(t, [1.0], "mc_sample") == 0
    assert model.num_supports(t) == 2
    assert model.support_labels(t) == {USER_DEFINED, "mc_sample"}
