# analysis/_eigenvalues.py
"""Continuous-time eigenvalues of fitted maps and flows."""

__all__ = [
    "eigenvalues_map",
    "eigenvalues_flow",
]

import numpy as np

from ..dynamics import ReducedDynamics, continuous_eigenvalues, \
    modal_decomposition


def _linear_part(dynamics, kind):
    if isinstance(dynamics, ReducedDynamics):
        if dynamics.kind != kind:
            raise ValueError(f"expected a {kind}, got a {dynamics.kind}")
        return dynamics.linear_part, dynamics.dt
    A = np.atleast_2d(dynamics)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError("linear part must be a square matrix")
    return A, None


def eigenvalues_map(dynamics, dt=None) -> np.ndarray:
    r"""Continuous-time eigenvalues :math:`\log(\lambda_i)/\delta t` of a
    fitted map, where :math:`\lambda_i` are the eigenvalues of its linear
    part (equivalently, the eigenvalues of the principal matrix logarithm
    divided by :math:`\delta t`).

    Parameters
    ----------
    dynamics : ssmfit.dynamics.ReducedDynamics or (m, m) ndarray
        Fitted map or the matrix of its linear part.
    dt : float or None
        Time step; taken from ``dynamics`` if not given.

    Returns
    -------
    (m,) complex ndarray
        Eigenvalues, slowest oscillation first.
    """
    A, model_dt = _linear_part(dynamics, "map")
    dt = model_dt if dt is None else dt
    if dt is None:
        raise ValueError("time step dt required")
    lam, _ = modal_decomposition(A, "map", dt)
    return continuous_eigenvalues(lam, "map", dt)


def eigenvalues_flow(dynamics) -> np.ndarray:
    """Eigenvalues of the linear part of a fitted flow (or of a matrix),
    slowest oscillation first.
    """
    A, _ = _linear_part(dynamics, "flow")
    return modal_decomposition(A, "flow")[0]
