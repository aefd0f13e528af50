# polynomial/conftest.py
"""Fixtures for testing the polynomial submodule."""

import pytest
import numpy as np

import ssmfit


@pytest.fixture
def quadratic_maps():
    """Two random degree-two maps from R^2 to R^2."""
    basis = ssmfit.polynomial.monomial_basis(2, 2)
    F = ssmfit.polynomial.PolynomialMap(
        np.random.standard_normal((2, len(basis))), basis
    )
    G = ssmfit.polynomial.PolynomialMap(
        np.random.standard_normal((2, len(basis))), basis
    )
    return F, G
