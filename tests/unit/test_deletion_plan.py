"""
Tests for DeletionPlan cascade ordering.
"""

import pytest

from infopt.indices import ObjectIndex, ObjectKind
from infopt.util.deletion_plan import DeletionPlan


class TestDeletionPlan:
    """Test suite for DeletionPlan."""

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_plan_with_only_root(self):
        plan = DeletionPlan("t")

        assert len(plan) == 1
        assert "t" in plan
        assert plan.order() == ["t"]

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_chain_is_deleted_leaves_first(self):
        """parameter <- variable <- constraint goes constraint first"""
        # Arrange
        plan = DeletionPlan("param")

        # Act
        plan.add_dependent("param", "variable")
        plan.add_dependent("variable", "constraint")
        plan.add_dependent("param", "constraint")

        # Assert
        assert plan.order() == ["constraint", "variable", "param"]

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_repeated_link_is_recorded_once(self):
        plan = DeletionPlan("a")

        assert plan.add_dependent("a", "b")
        assert not plan.add_dependent("a", "b")

        assert plan.dependents["a"] == {"b"}
        assert plan.dependencies["b"] == {"a"}
        assert "links=1" in repr(plan)

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_loops_are_rejected(self):
        plan = DeletionPlan("a")
        plan.add_dependent("a", "b")
        plan.add_dependent("b", "c")

        with pytest.raises(ValueError, match="Dependency loop"):
            plan.add_dependent("c", "a")
        with pytest.raises(ValueError, match="Dependency loop"):
            plan.add_dependent("b", "b")
        assert plan.order() == ["c", "b", "a"]

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_sort_key_orders_siblings(self):
        """Siblings ready together go largest key first"""
        root = ObjectIndex(ObjectKind.INDEPENDENT_PARAMETER, 1)
        x = ObjectIndex(ObjectKind.INFINITE_VARIABLE, 1)
        y = ObjectIndex(ObjectKind.INFINITE_VARIABLE, 2)
        measure = ObjectIndex(ObjectKind.MEASURE, 1)
        plan = DeletionPlan(root)
        for dependent in (x, measure, y):
            plan.add_dependent(root, dependent)

        position = {kind: i for i, kind in enumerate(ObjectKind)}

        order = plan.order(sort_key=lambda index: (position[index.kind], index.value))

        assert order == [measure, y, x, root]

    @pytest.mark.unit
    @pytest.mark.deletion
    def test_shared_dependent_precedes_every_target(self):
        plan = DeletionPlan("t")
        plan.add_dependent("t", "x")
        plan.add_dependent("t", "s_measure")
        plan.add_dependent("x", "s_measure")
        plan.add_dependent("s_measure", "link")

        order = plan.order(sort_key=str)

        assert order.index("link") < order.index("s_measure")
        assert order.index("s_measure") < order.index("x")
        assert order.index("x") < order.index("t")
