"""Unit tests for dependency tracking and deletion policies of InfiniteModel."""

import pytest

from infopt import (
    AmbiguousNameError,
    DeletionPolicy,
    GreaterThan,
    InfiniteModel,
    IntervalSet,
    LessThan,
    ObjectInUseError,
    ObjectNotFoundError,
    create_model,
)
from infopt.indices import ObjectKind


class TestDependencyRecording:
    @pytest.mark.unit
    @pytest.mark.deletion
    def test_parameter_records_variable_and_measure(self, populated, model):
        refs = populated

        assert model.dependents_of(refs["t"], ObjectKind.INFINITE_VARIABLE) == [
            refs["x"].index
        ]
        assert model.used_by_measure(refs["t"])
        assert not model.used_by_constraint(refs["t"])

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_variable_records_point_measure_and_constraint(self, populated, model):
        refs = populated

        assert model.dependents_of(refs["x"], ObjectKind.POINT_VARIABLE) == [
            refs["x0"].index
        ]
        assert model.used_by_measure(refs["x"])
        assert model.used_by_constraint(refs["x"])
        assert model.used_by_constraint(refs["z"])
        assert model.is_used(refs["z"])

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_info_constraints_are_not_dependents(self, model):
        z = model.add_variable(name="z", lower_bound=0, upper_bound=1)

        assert model.num_constraints() == 2
        assert model.dependents_of(z) == []
        assert not model.is_used(z)

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_replacing_constraint_function_moves_registrations(self, populated, model):
        refs = populated
        w = model.add_variable(name="w")

        model.set_constraint_function(refs["c1"], 2 * w)

        assert not model.used_by_constraint(refs["x"])
        assert not model.used_by_constraint(refs["z"])
        assert model.used_by_constraint(w)

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_dependent_parameter_records_per_parameter(self, model):
        x1, x2 = model.add_parameters([IntervalSet(0, 1), IntervalSet(0, 1)], names="x")
        y = model.add_variable(((x1, x2),), name="y")
        c = model.add_constraint(x1, GreaterThan(0))

        assert model.dependents_of(x1) == [y.index, c.index]
        assert model.dependents_of(x2) == [y.index]


class TestBlockPolicy:
    @pytest.mark.unit
    @pytest.mark.deletion
    def test_used_parameter_cannot_be_deleted(self, populated, model):
        refs = populated

        with pytest.raises(ObjectInUseError) as excinfo:
            model.delete(refs["t"])

        assert excinfo.value.blockers == {
            ObjectKind.INFINITE_VARIABLE: 1,
            ObjectKind.MEASURE: 1,
        }
        assert model.is_valid(refs["t"])

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_blocked_delete_leaves_model_unchanged(self, populated, model):
        refs = populated

        def counts():
            return (
                model.num_parameters(),
                model.num_variables(),
                model.num_constraints(),
            )

        before = counts()

        with pytest.raises(ObjectInUseError):
            model.delete(refs["x"])

        assert counts() == before

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_deleting_constraint_unblocks_its_references(self, populated, model):
        refs = populated

        model.delete(refs["c1"])

        assert not refs["c1"].is_valid()
        assert not model.used_by_constraint(refs["z"])
        model.delete(refs["z"])
        assert not model.is_valid(refs["z"])

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_variable_deletion_removes_info_constraints(self, model):
        z = model.add_variable(name="z", lower_bound=0, upper_bound=1)
        info = model.resolve(z).info_constraints()

        model.delete(z)

        assert model.num_constraints() == 0
        for index in info:
            with pytest.raises(ObjectNotFoundError):
                model.data_object(index)

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_deleting_info_constraint_clears_variable_info(self, model):
        z = model.add_variable(name="z", lower_bound=0, upper_bound=1)
        lower_index = model.resolve(z).info_constraints()[0]

        model.delete(model.constraint_by_index(lower_index))

        assert model.variable_info(z).lower_bound is None
        assert model.variable_info(z).upper_bound == 1
        assert model.num_constraints() == 1

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_deleted_object_raises_on_second_delete(self, model):
        z = model.add_variable(name="z")
        model.delete(z)

        with pytest.raises(ObjectNotFoundError):
            model.delete(z)


class TestCascadePolicy:
    @pytest.mark.unit
    @pytest.mark.deletion
    def test_cascade_deletes_every_dependent(self, time_param):
        model = time_param.model
        model.deletion_policy = DeletionPolicy.CASCADE
        x = model.add_variable((time_param,), name="x")
        x0 = model.add_point_variable(x, (5,))
        c = model.add_constraint(x0 + x, LessThan(1), name="c")
        z = model.add_variable(name="z")

        model.delete(time_param)

        for ref in (time_param, x, x0):
            assert not ref.is_valid()
        assert not c.is_valid()
        assert z.is_valid()
        assert model.num_variables() == 1

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_cascade_removes_hold_variable_bounded_by_parameter(self):
        model = create_model(deletion_policy=DeletionPolicy.CASCADE)
        t = model.add_parameter(IntervalSet(0, 1), name="t")
        h = model.add_variable(name="h", parameter_bounds={t: (0, 0.5)})
        assert model.has_hold_bounds

        model.delete(t)

        assert not h.is_valid()
        assert not model.has_hold_bounds

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_deleting_one_dependent_parameter_removes_group(self):
        model = create_model(deletion_policy="cascade")
        x1, x2 = model.add_parameters([IntervalSet(0, 1), IntervalSet(0, 1)], names="x")
        y = model.add_variable(((x1, x2),), name="y")

        model.delete(x2)

        assert not x1.is_valid()
        assert not x2.is_valid()
        assert not y.is_valid()
        assert model.num_parameters() == 0


class TestNames:
    @pytest.mark.unit
    def test_lookup_by_name(self, populated, model):
        refs = populated

        assert model.parameter_by_name("t") == refs["t"]
        assert model.variable_by_name("x") == refs["x"]
        assert model.variable_by_name("x(0)") == refs["x0"]
        assert model.constraint_by_name("c1") == refs["c1"]

    @pytest.mark.unit
    def test_renaming_refreshes_lookup(self, populated, model):
        refs = populated
        model.variable_by_name("z")

        refs["z"].set_name("hold")

        assert model.variable_by_name("hold") == refs["z"]
        with pytest.raises(ObjectNotFoundError):
            model.variable_by_name("z")

    @pytest.mark.unit
    def test_duplicate_names_are_ambiguous(self, model):
        model.add_variable(name="dup")
        model.add_variable(name="dup")

        with pytest.raises(AmbiguousNameError):
            model.variable_by_name("dup")

    @pytest.mark.unit
    def test_deleted_objects_leave_lookup(self, model):
        z = model.add_variable(name="z")
        model.variable_by_name("z")
        model.delete(z)

        with pytest.raises(ObjectNotFoundError):
            model.variable_by_name("z")

    @pytest.mark.unit
    def test_object_dictionary_rejects_duplicates(self):
        model = InfiniteModel()
        z = model.add_variable(name="z")
        model["z"] = z

        assert model["z"] == z
        assert "z" in model
        with pytest.raises(ValueError):
            model["z"] = z
        with pytest.raises(ObjectNotFoundError):
            model["missing"]
