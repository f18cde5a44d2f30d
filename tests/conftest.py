"""
Shared pytest fixtures and configuration for InfOpt tests.
"""

import numpy as np
import pytest

from infopt import InfiniteModel, IntervalSet, LessThan


@pytest.fixture(autouse=True)
def seeded_random():
    """Seed numpy's global generator so sampled supports are reproducible."""
    np.random.seed(0)


@pytest.fixture
def model():
    """Provide a fresh InfiniteModel for tests that need it."""
    return InfiniteModel()


@pytest.fixture
def time_param(model):
    """Independent parameter ``t`` on [0, 10] with supports 0, 5 and 10."""
    return model.add_parameter(IntervalSet(0, 10), supports=[0, 5, 10], name="t")


@pytest.fixture
def populated(model, time_param):
    """
    Model with an infinite variable, a point variable, a hold variable, a
    measure and a constraint, returned as a dict of references.
    """
    x = model.add_variable((time_param,), name="x", lower_bound=0)
    x0 = model.add_point_variable(x, (0,))
    z = model.add_variable(name="z")
    measure = model.support_sum(x, time_param)
    con = model.add_constraint(x + z, LessThan(5), name="c1")
    return {"t": time_param, "x": x, "x0": x0, "z": z, "measure": measure, "c1": con}
