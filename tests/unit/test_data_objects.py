"""Unit tests for stored data objects and their dependent sets."""

import pytest

from infopt import (
    CollectionSet,
    DependentParameters,
    DimensionMismatchError,
    IntervalSet,
)
from infopt.data_objects import (
    DependentSet,
    Dependents,
    MultiParameterData,
    PARAMETER_DEPENDENT_KINDS,
    VariableData,
)
from infopt.indices import ObjectIndex, ObjectKind


def _index(kind, value):
    return ObjectIndex(kind, value)


@pytest.mark.unit
def test_dependent_set_ignores_duplicates_and_absent_removals():
    dependents = DependentSet()
    index = _index(ObjectKind.CONSTRAINT, 1)

    assert dependents.add(index)
    assert not dependents.add(index)
    assert len(dependents) == 1
    assert dependents.discard(index)
    assert not dependents.discard(index)


@pytest.mark.unit
def test_dependent_set_keeps_insertion_order():
    dependents = DependentSet()
    indices = [_index(ObjectKind.MEASURE, value) for value in (3, 1, 2)]
    for index in indices:
        dependents.add(index)

    assert list(dependents) == indices


@pytest.mark.unit
def test_dependents_are_partitioned_by_kind():
    dependents = Dependents(PARAMETER_DEPENDENT_KINDS)
    variable = _index(ObjectKind.INFINITE_VARIABLE, 1)
    constraint = _index(ObjectKind.CONSTRAINT, 4)
    dependents.add(variable)
    dependents.add(constraint)

    assert dependents.of(ObjectKind.INFINITE_VARIABLE) == [variable]
    assert dependents.of(ObjectKind.POINT_VARIABLE) == []
    assert dependents.counts() == {
        ObjectKind.INFINITE_VARIABLE: 1,
        ObjectKind.CONSTRAINT: 1,
    }
    assert constraint in dependents
    assert len(dependents) == 2


@pytest.mark.unit
def test_dependents_reject_kinds_that_cannot_depend():
    dependents = Dependents(PARAMETER_DEPENDENT_KINDS)

    with pytest.raises(AssertionError):
        dependents.add(_index(ObjectKind.POINT_VARIABLE, 1))


@pytest.mark.unit
def test_only_infinite_variables_accept_point_variable_dependents():
    finite = VariableData(object(), "z")
    infinite = VariableData(object(), "x", infinite=True)

    assert infinite.dependents.add(_index(ObjectKind.POINT_VARIABLE, 1))
    with pytest.raises(AssertionError):
        finite.dependents.add(_index(ObjectKind.POINT_VARIABLE, 1))


@pytest.mark.unit
def test_variable_data_lists_owned_info_constraints():
    data = VariableData(object(), "x")
    data.lower_bound_index = _index(ObjectKind.CONSTRAINT, 2)
    data.fix_index = _index(ObjectKind.CONSTRAINT, 5)

    assert data.info_constraints() == [
        _index(ObjectKind.CONSTRAINT, 2),
        _index(ObjectKind.CONSTRAINT, 5),
    ]


class TestMultiParameterData:
    @pytest.fixture
    def parameters(self):
        return DependentParameters(CollectionSet([IntervalSet(0, 1)] * 3))

    @pytest.mark.unit
    def test_names_and_dependents_per_parameter(self, parameters):
        data = MultiParameterData(parameters, ["a", "b", "c"])

        data.param_dependents[0].add(_index(ObjectKind.INFINITE_VARIABLE, 1))
        data.param_dependents[2].add(_index(ObjectKind.INFINITE_VARIABLE, 1))
        data.param_dependents[2].add(_index(ObjectKind.MEASURE, 1))

        assert data.names == ["a", "b", "c"]
        assert data.num_dependents() == {
            ObjectKind.INFINITE_VARIABLE: 2,
            ObjectKind.MEASURE: 1,
        }

    @pytest.mark.unit
    def test_name_count_must_match(self, parameters):
        with pytest.raises(DimensionMismatchError):
            MultiParameterData(parameters, ["a", "b"])
