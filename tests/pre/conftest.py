# pre/conftest.py
"""Fixtures for testing the pre submodule."""

import pytest
import numpy as np

import ssmfit


@pytest.fixture
def scalar_trajectories():
    """Three damped oscillations of a scalar observable, trajectory 1 is
    reserved for testing.
    """
    t = np.linspace(0, 10, 101)
    trajectories = [
        ssmfit.pre.Trajectory(
            t, a * np.exp(-0.1 * t) * np.cos(2 * t + a), i
        )
        for i, a in enumerate([1.0, 0.5, -0.8])
    ]
    return ssmfit.pre.TrajectorySet(trajectories, test_indices=[1])
