# dynamics/test_dynamics_fit.py
"""Tests for dynamics._fit."""

import pytest
import numpy as np
import scipy.linalg as la

import ssmfit


A_DUFFING = np.array([[0.0, 1.0], [-1.0, -0.04]])


class TestReducedDynamicsFitter:
    """Test dynamics.ReducedDynamicsFitter."""

    Fitter = ssmfit.dynamics.ReducedDynamicsFitter

    def test_init(self):
        """Test __init__() validation."""
        with pytest.raises(ValueError) as ex:
            self.Fitter("ode")
        assert ex.value.args[0] == "invalid kind 'ode', options: map, flow"

        with pytest.raises(ValueError) as ex:
            self.Fitter(style="full")
        assert ex.value.args[0] == \
            "invalid style 'full', options: poly, modal, normalform"

        with pytest.raises(ValueError) as ex:
            self.Fitter(max_degree=0)
        assert ex.value.args[0] == "max_degree must be a positive integer"

        with pytest.raises(ValueError) as ex:
            self.Fitter(resonance_tolerance=-1)
        assert ex.value.args[0] == "tolerances must be nonnegative"

        assert "ReducedDynamicsFitter" in str(self.Fitter())
        assert self.Fitter().solver_ is None

    def test_stack_trajectories(self, map_trajectories,
                                linear_flow_trajectories):
        """Maps pair successive samples, flows pair samples with their
        time derivative estimates.
        """
        states, targets, weights, dt = self.Fitter(
            "map", c1=1, c2=2
        ).stack_trajectories(map_trajectories)
        assert states.shape == targets.shape == (2, 3 * 149)
        assert np.isclose(dt, 0.1)
        first = map_trajectories[0].data
        assert np.array_equal(states[:, :149], first[:, :-1])
        assert np.array_equal(targets[:, :149], first[:, 1:])
        assert weights.shape == (3 * 149,)
        assert np.isclose(weights[0], 0.5)
        assert np.all(np.diff(weights[:149]) > 0)

        states, targets, weights, dt = self.Fitter(
            "flow"
        ).stack_trajectories(linear_flow_trajectories)
        assert dt is None
        assert states.shape == targets.shape == (2, 2 * 401)
        assert np.all(weights == 1)
        assert np.allclose(targets[:, 200], A_DUFFING @ states[:, 200],
                           atol=1e-3)

    def test_fit_map(self, duffing_map, map_trajectories):
        """Polynomial maps are recovered from their iterates."""
        dynamics = self.Fitter("map", 3).fit(map_trajectories)
        assert dynamics.kind == "map"
        assert np.isclose(dynamics.dt, 0.1)
        assert np.allclose(dynamics.R.coefficients, duffing_map.coefficients,
                           atol=1e-8)
        traj = map_trajectories[1]
        assert np.allclose(dynamics.predict(traj.data[:, 0], traj.time),
                           traj.data, atol=1e-8)

    def test_weighting(self):
        """Time weighting discards an initial transient that does not
        follow the dynamics.
        """
        A = la.expm(0.1 * A_DUFFING)
        t = 0.1 * np.arange(150)
        X = np.empty((2, t.size))
        X[:, 0] = [0.3, 0.0]
        for k in range(t.size - 1):
            X[:, k + 1] = A @ X[:, k]
        X[0] += 0.3 * np.exp(-3 * t)
        data = ssmfit.pre.TrajectorySet.from_arrays([t], [X])

        uniform = self.Fitter("map", 1).fit(data)
        weighted = self.Fitter("map", 1, c1=1e8, c2=8).fit(data)
        assert np.linalg.norm(uniform.linear_part - A) > 5e-3
        assert np.linalg.norm(weighted.linear_part - A) < 1e-3

    def test_fit_map_normalform(self, map_trajectories):
        """Normal form style fits carry the transformation."""
        fitter = self.Fitter("map", 3, style="normalform")
        dynamics = fitter.fit(map_trajectories)
        assert fitter.solver_ is not None
        assert dynamics.normal_form is not None
        assert np.allclose(dynamics.eigenvalues[0],
                           -0.02 + 1j * np.sqrt(0.9996))

    def test_fit_flow(self, linear_flow_trajectories):
        """Linear flows are recovered from finite differences."""
        dynamics = self.Fitter("flow", 1, ddt_order=6).fit(
            linear_flow_trajectories
        )
        assert dynamics.dt is None
        assert np.allclose(dynamics.linear_part, A_DUFFING, atol=1e-6)

        # Regularization shrinks the coefficients.
        ridge = self.Fitter("flow", 1, ddt_order=6, regularizer=10).fit(
            linear_flow_trajectories
        )
        assert np.linalg.norm(ridge.linear_part) < \
            np.linalg.norm(dynamics.linear_part)

    def test_fit_errors(self, map_trajectories):
        """Invalid training data."""
        with pytest.raises(TypeError) as ex:
            self.Fitter().fit([np.ones((2, 10))])
        assert ex.value.args[0] == "trajectories must be a TrajectorySet"

        Trajectory = ssmfit.pre.Trajectory
        X = np.random.standard_normal((2, 5))
        short = ssmfit.pre.TrajectorySet([Trajectory(np.arange(5.0), X)])
        with pytest.raises(ssmfit.errors.InsufficientDataError) as ex:
            self.Fitter("map", 3).fit(short)
        assert ex.value.args[0] == "4 distinct samples, at least 9 needed " \
            "for order 3 dynamics in dimension 2"

        warped = ssmfit.pre.TrajectorySet(
            [Trajectory(np.arange(5.0) ** 2, X)]
        )
        with pytest.raises(ValueError) as ex:
            self.Fitter("map", 1).fit(warped)
        assert ex.value.args[0] == \
            "map fitting requires uniformly sampled trajectories"

        mixed = ssmfit.pre.TrajectorySet([
            Trajectory(np.arange(5.0), X, 0),
            Trajectory(2 * np.arange(5.0), X, 1),
        ])
        with pytest.raises(ValueError) as ex:
            self.Fitter("map", 1).fit(mixed)
        assert ex.value.args[0] == \
            "map fitting requires a common time step for all trajectories"
