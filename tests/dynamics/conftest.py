# dynamics/conftest.py
"""Fixtures for testing the dynamics submodule."""

import pytest
import numpy as np
import scipy.linalg as la

import ssmfit


# Linear part of a lightly damped Duffing oscillator in (x, v).
A_DUFFING = np.array([[0.0, 1.0], [-1.0, -0.04]])
DT = 0.1


def _with_nonlinear_terms(A, quadratic, cubic):
    basis = ssmfit.polynomial.monomial_basis(2, 3)
    C = np.zeros((2, len(basis)))
    C[:, basis.degree_slice(1)] = A
    C[1, basis.index((2, 0))] = quadratic
    C[1, basis.index((3, 0))] = cubic
    return ssmfit.polynomial.PolynomialMap(C, basis)


@pytest.fixture
def duffing_flow():
    """Velocity of x'' + 0.04x' + x + 0.5x^2 + x^3 = 0."""
    return _with_nonlinear_terms(A_DUFFING, -0.5, -1.0)


@pytest.fixture
def duffing_map():
    """Cubic map whose linear part is the exact time-DT flow map of the
    linearized Duffing oscillator.
    """
    return _with_nonlinear_terms(la.expm(DT * A_DUFFING), -0.05, -0.1)


@pytest.fixture
def map_trajectories(duffing_map):
    """Iterates of the Duffing map from three initial conditions."""
    t = DT * np.arange(150)
    datas = []
    for theta in (0.0, 2.0, 4.0):
        X = np.empty((2, t.size))
        X[:, 0] = 0.3 * np.array([np.cos(theta), np.sin(theta)])
        for k in range(t.size - 1):
            X[:, k + 1] = duffing_map(X[:, k])
        datas.append(X)
    return ssmfit.pre.TrajectorySet.from_arrays([t] * 3, datas)


@pytest.fixture
def linear_flow_trajectories():
    """Exact solutions of the linearized Duffing oscillator."""
    t = np.linspace(0, 20, 401)
    datas = []
    for x0 in ([1.0, 0.0], [0.0, 0.5]):
        X = np.column_stack([la.expm(tj * A_DUFFING) @ x0 for tj in t])
        datas.append(X)
    return ssmfit.pre.TrajectorySet.from_arrays([t, t], datas)
