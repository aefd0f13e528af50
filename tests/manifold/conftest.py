# manifold/conftest.py
"""Fixtures for testing the manifold submodule."""

import pytest
import numpy as np

import ssmfit


def graph(eta):
    """Quadratic graph over the first two coordinates of R^3."""
    return np.vstack([
        eta[0],
        eta[1],
        0.5 * eta[0] ** 2 - 0.3 * eta[0] * eta[1] + 0.2 * eta[1] ** 2,
    ])


def _trajectories(grid, rotation):
    e1, e2 = np.meshgrid(grid, grid)
    eta = np.vstack([e1.ravel(), e2.ravel()])
    Y = rotation @ graph(eta)
    half = eta.shape[1] // 2
    t = np.arange(eta.shape[1], dtype=float)
    return ssmfit.pre.TrajectorySet.from_arrays(
        [t[:half], t[half:]], [Y[:, :half], Y[:, half:]]
    )


@pytest.fixture
def rotation():
    Q, _ = np.linalg.qr(np.array([[1.0, 0.2, 0.1],
                                  [0.3, 1.0, -0.2],
                                  [0.1, -0.4, 1.0]]))
    return Q


@pytest.fixture
def symmetric_manifold_data(rotation):
    """Samples of a rotated quadratic graph on a grid symmetric about 0."""
    return _trajectories(np.linspace(-0.5, 0.5, 11), rotation)


@pytest.fixture
def skewed_manifold_data(rotation):
    """Samples of a rotated quadratic graph on a one-sided grid, for which
    the leading singular vectors are not tangent to the manifold.
    """
    return _trajectories(np.linspace(0, 1, 15), rotation)
