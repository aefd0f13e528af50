# systems/_integrate.py
"""Sample trajectories of a full-order system."""

__all__ = [
    "integrate_trajectories",
    "points_on_hypersphere",
]

import warnings
import numpy as np
import scipy.integrate as spintegrate

from ..pre import Trajectory, TrajectorySet


def integrate_trajectories(
    rhs,
    observable,
    duration: float,
    sample_count: int,
    initial_conditions,
    method: str = "DOP853",
    train_indices=None,
    test_indices=None,
    **options,
) -> TrajectorySet:
    """Integrate a full-order system from several initial conditions and
    record an observable at uniformly spaced times in ``[0, duration]``.

    Parameters
    ----------
    rhs : callable
        Right-hand side ``rhs(t, x)`` of the full-order system.
    observable : callable
        Map from states ``(n, k)`` to observables ``(p, k)`` or ``(k,)``.
    duration : float
        Final time.
    sample_count : int
        Number of samples per trajectory, including ``t = 0``.
    initial_conditions : (n,) or (n, n_traj) ndarray
        One initial condition per column.
    method : str
        Integrator of :func:`scipy.integrate.solve_ivp()`.
    train_indices, test_indices : iterables of ints or None
        Partition of the result (see :class:`ssmfit.pre.TrajectorySet`).
    options
        Other arguments for :func:`scipy.integrate.solve_ivp()`.

    Returns
    -------
    ssmfit.pre.TrajectorySet
        Trajectory ``i`` starts from column ``i`` of
        ``initial_conditions``. Integrations that fail early are truncated
        and trigger a :class:`scipy.integrate.IntegrationWarning`.
    """
    if duration <= 0:
        raise ValueError("duration must be positive")
    if sample_count < 2:
        raise ValueError("sample_count must be at least 2")
    initial_conditions = np.asarray(initial_conditions, dtype=float)
    if initial_conditions.ndim == 1:
        initial_conditions = initial_conditions.reshape((-1, 1))

    t = np.linspace(0, duration, sample_count)
    trajectories = []
    for i, x0 in enumerate(initial_conditions.T):
        out = spintegrate.solve_ivp(
            rhs, [0, duration], x0, method=method, t_eval=t, **options
        )
        if not out.success:
            warnings.warn(
                f"trajectory {i}: {out.message}",
                spintegrate.IntegrationWarning,
            )
        trajectories.append(Trajectory(out.t, observable(out.y), i))
    return TrajectorySet(trajectories, train_indices, test_indices)


def points_on_hypersphere(count, dimension, radius=1.0, random_state=None):
    """Random points on the sphere of the given radius, one per column.

    Parameters
    ----------
    count : int
        Number of points.
    dimension : int
        Ambient dimension.
    radius : float
        Sphere radius.
    random_state : int, numpy.random.Generator, or None
        Seed or generator.

    Returns
    -------
    (dimension, count) ndarray
    """
    rng = np.random.default_rng(random_state)
    points = rng.standard_normal((dimension, count))
    return radius * points / np.linalg.norm(points, axis=0)
