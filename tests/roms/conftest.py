# roms/conftest.py
"""Fixtures for testing the roms submodule."""

import pytest
import numpy as np

import ssmfit


@pytest.fixture
def linear_system():
    """Two masses with stiffness-proportional damping."""
    K = np.array([[2.0, -1.0], [-1.0, 2.0]])
    return ssmfit.systems.MechanicalSystem(np.eye(2), 0.02 * K, K)


@pytest.fixture
def slow_mode_trajectories(linear_system):
    """Full-state decays along the slowest mode, trajectory 2 reserved for
    testing.
    """
    X0 = linear_system.modal_initial_conditions([0.1, 0.08, 0.05],
                                                phases=[0, 1, 2])
    return ssmfit.systems.integrate_trajectories(
        linear_system.rhs, lambda x: x, 50, 1001, X0, test_indices=[2],
        rtol=1e-11, atol=1e-13,
    )
