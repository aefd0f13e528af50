# ddt/_finite_difference.py
"""Finite-difference schemes for estimating trajectory time derivatives."""

__all__ = [
    "ddt_uniform",
    "ddt_nonuniform",
    "ddt",
]

import numpy as np

from .. import errors


# Central stencils (interior) and one-sided stencils (boundary rows), in units
# of 1/dt. Row i of a boundary table is the stencil for the i-th sample.
_CENTRAL = {
    2: np.array([-1, 0, 1]) / 2,
    4: np.array([1, -8, 0, 8, -1]) / 12,
    6: np.array([-1, 9, -45, 0, 45, -9, 1]) / 60,
}
_FORWARD = {
    2: np.array([[-3, 4, -1]]) / 2,
    4: np.array([
        [-25, 48, -36, 16, -3],
        [-3, -10, 18, -6, 1],
    ]) / 12,
    6: np.array([
        [-147, 360, -450, 400, -225, 72, -10],
        [-10, -77, 150, -100, 50, -15, 2],
        [2, -24, -35, 80, -30, 8, -1],
    ]) / 60,
}


def ddt_uniform(states, dt, order=2):
    """Forward, central, and backward differences for estimating the first
    derivative of uniformly sampled data.

    Parameters
    ----------
    states : (r, k) ndarray
        Samples: ``states[:, j]`` is the state at time :math:`t_j`.
    dt : float
        Time step between samples.
    order : int {2, 4, 6}
        The order of the derivative approximation.

    Returns
    -------
    ddts : (r, k) ndarray
        Time derivative estimates corresponding to the samples.
    """
    if states.ndim != 2:
        raise errors.DimensionMismatchError("states must be two-dimensional")
    if not np.isscalar(dt):
        raise TypeError("time step dt must be a scalar (e.g., float)")
    if order not in _CENTRAL:
        raise NotImplementedError(
            f"invalid order '{order}'; valid options: {{2, 4, 6}}"
        )
    k = states.shape[1]
    width = order + 1
    if k < width:
        raise errors.InsufficientLengthError(
            f"at least {width} samples required for order {order} "
            f"differences (got {k})"
        )

    ddts = np.zeros(states.shape, dtype=np.result_type(states, float))
    margin = order // 2

    # Central differences on the interior.
    for j, coeff in enumerate(_CENTRAL[order]):
        if coeff != 0:
            stop = k - width + 1 + j
            ddts[:, margin:k - margin] += coeff * states[:, j:stop]

    # One-sided differences on the ends.
    for i, coeffs in enumerate(_FORWARD[order]):
        ddts[:, i] = states[:, :width] @ coeffs
        ddts[:, k - 1 - i] = states[:, k - width:] @ -coeffs[::-1]

    return ddts / dt


def ddt_nonuniform(states, t):
    """Second-order finite differences for estimating the first derivative.

    Parameters
    ----------
    states : (r, k) ndarray
        Samples: ``states[:, j]`` is the state at time :math:`t_j`.
    t : (k,) ndarray
        Sample times, which may or may not be uniformly spaced.

    Returns
    -------
    ddts : (r, k) ndarray
        Time derivative estimates corresponding to the samples.
    """
    if states.ndim != 2:
        raise errors.DimensionMismatchError("states must be two-dimensional")
    if t.ndim != 1:
        raise errors.DimensionMismatchError("time t must be one-dimensional")
    if states.shape[-1] != t.shape[0]:
        raise errors.DimensionMismatchError("states not aligned with time t")
    if t.size < 3:
        raise errors.InsufficientLengthError(
            f"at least 3 samples required (got {t.size})"
        )
    return np.gradient(states, t, edge_order=2, axis=-1)


def ddt(trajectory, order=2):
    """Estimate the time derivative of a :class:`ssmfit.pre.Trajectory`,
    using :func:`ddt_uniform()` if it is uniformly sampled and
    :func:`ddt_nonuniform()` otherwise.

    Parameters
    ----------
    trajectory : ssmfit.pre.Trajectory
        Samples to differentiate.
    order : int {2, 4, 6}
        Order of the uniform scheme (non-uniform data always use order 2).

    Returns
    -------
    ddts : (r, k) ndarray
        Time derivative estimates corresponding to ``trajectory.data``.
    """
    if (dt := trajectory.dt) is not None:
        return ddt_uniform(trajectory.data, dt, order)
    return ddt_nonuniform(trajectory.data, trajectory.time)
