# dynamics/test_model.py
"""Tests for dynamics._model."""

import os
import pytest
import numpy as np
import scipy.linalg as la

import ssmfit


A = np.array([[-0.05, 1.0], [-1.0, -0.05]])


class TestReducedDynamics:
    """Test dynamics.ReducedDynamics."""

    Dynamics = ssmfit.dynamics.ReducedDynamics

    def test_init(self, duffing_flow):
        """Test __init__() validation and properties."""
        with pytest.raises(ValueError) as ex:
            self.Dynamics("ode", duffing_flow)
        assert ex.value.args[0] == "invalid kind 'ode', options: map, flow"

        with pytest.raises(ValueError) as ex:
            self.Dynamics("map", duffing_flow)
        assert ex.value.args[0] == "maps require a positive time step dt"

        with pytest.raises(TypeError) as ex:
            self.Dynamics("flow", A)
        assert ex.value.args[0] == "R must be a PolynomialMap"

        with pytest.raises(ValueError) as ex:
            self.Dynamics("flow", duffing_flow, style="normalform")
        assert ex.value.args[0] == "style 'normalform' requires a normal form"

        dynamics = self.Dynamics("flow", duffing_flow, dt=0.1)
        assert dynamics.dt is None
        assert dynamics.dimension == 2
        assert dynamics.max_degree == 3
        assert dynamics.style == "poly"
        assert np.isclose(dynamics.eigenvalues[0],
                          -0.02 + 1j * np.sqrt(0.9996))
        assert str(dynamics).startswith("ReducedDynamics (flow, poly)")

    def test_predict_map(self):
        """Iterating a linear map gives matrix powers."""
        R = ssmfit.polynomial.PolynomialMap.from_linear(la.expm(0.1 * A), 2)
        dynamics = self.Dynamics("map", R, dt=0.1)
        x0 = np.array([1.0, -0.5])
        t = 0.1 * np.arange(30)
        states = dynamics.predict(x0, t)
        assert states.shape == (2, 30)
        assert np.allclose(states[:, -1], la.expm(2.9 * A) @ x0)
        assert np.allclose(dynamics.eigenvalues[0], -0.05 + 1j)

        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            dynamics.predict(np.ones(3), t)
        assert ex.value.args[0] == "initial condition not aligned with " \
            "model (state0.shape = (3,) != (2,))"

        with pytest.raises(ValueError) as ex:
            dynamics.predict(x0, [])
        assert ex.value.args[0] == \
            "t must be a nonempty one-dimensional array"

    def test_predict_flow(self):
        """Integrating a linear flow gives the matrix exponential."""
        R = ssmfit.polynomial.PolynomialMap.from_linear(A)
        dynamics = self.Dynamics("flow", R)
        x0 = np.array([1.0, -0.5])
        t = np.linspace(0, 5, 51)
        states = dynamics.predict(x0, t, rtol=1e-10, atol=1e-12)
        assert dynamics.predict_result_.success
        assert np.allclose(states[:, -1], la.expm(5 * A) @ x0)

        # Implicit methods use the Jacobian.
        states = dynamics.predict(x0, t, method="BDF", rtol=1e-10,
                                  atol=1e-12)
        assert np.allclose(states[:, -1], la.expm(5 * A) @ x0, atol=1e-6)

        assert dynamics.predict(x0, [0.0]).shape == (2, 1)

    def test_predict_normalform(self, duffing_map):
        """Normal form predictions stay close to the original map."""
        nf = ssmfit.dynamics.compute_normal_form(duffing_map, "map", 0.1)
        dynamics = self.Dynamics("map", duffing_map, 0.1, "normalform", nf)
        poly = self.Dynamics("map", duffing_map, 0.1)
        x0 = np.array([1e-3, 0.0])
        t = 0.1 * np.arange(20)
        assert np.allclose(dynamics.predict(x0, t), poly.predict(x0, t),
                           atol=1e-10)
        assert np.allclose(dynamics.eigenvalues, nf.continuous_eigenvalues)

    def test_saveload(self, duffing_flow, target="_dynamicstest.h5"):
        """Test save() and load()."""
        if os.path.isfile(target):  # pragma: no cover
            os.remove(target)

        nf = ssmfit.dynamics.compute_normal_form(duffing_flow, "flow")
        dynamics = self.Dynamics("flow", duffing_flow, style="normalform",
                                 normal_form=nf)
        dynamics.save(target)
        loaded = self.Dynamics.load(target)
        assert loaded.kind == "flow"
        assert loaded.dt is None
        assert loaded.style == "normalform"
        assert loaded.R == duffing_flow
        assert loaded.normal_form.N == nf.N
        assert loaded.normal_form.T_inverse == nf.T_inverse
        assert np.array_equal(loaded.normal_form.retained, nf.retained)
        os.remove(target)

        poly = self.Dynamics("map", duffing_flow, dt=0.25)
        poly.save(target)
        loaded = self.Dynamics.load(target)
        assert loaded.dt == 0.25
        assert loaded.normal_form is None
        os.remove(target)
