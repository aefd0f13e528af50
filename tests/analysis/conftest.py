# analysis/conftest.py
"""Fixtures for testing the analysis submodule."""

import pytest
import numpy as np

import ssmfit


@pytest.fixture
def duffing_normal_form():
    """Normal form of x'' + 0.04x' + x + 0.5x^2 + x^3 = 0."""
    basis = ssmfit.polynomial.monomial_basis(2, 3)
    C = np.zeros((2, len(basis)))
    C[:, basis.degree_slice(1)] = [[0.0, 1.0], [-1.0, -0.04]]
    C[1, basis.index((2, 0))] = -0.5
    C[1, basis.index((3, 0))] = -1.0
    R = ssmfit.polynomial.PolynomialMap(C, basis)
    return ssmfit.dynamics.compute_normal_form(R, "flow")


@pytest.fixture
def hardening():
    r"""Constant growth rate -0.01 and frequency 1 + 0.1 rho^2."""
    return ssmfit.analysis.PolarNormalForm([-0.01 + 1j, 0.1j])
