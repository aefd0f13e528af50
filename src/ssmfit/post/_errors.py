# post/_errors.py
"""Tools for accuracy and error evaluation."""

__all__ = [
    "normalized_rms_error",
    "frobenius_error",
    "lp_error",
]

import numpy as np
import scipy.linalg as la

from .. import errors


def _check_aligned(Ytrue, Yapprox):
    if Ytrue.shape != Yapprox.shape:
        raise errors.DimensionMismatchError(
            f"true data {Ytrue.shape} and approximation {Yapprox.shape} "
            "not aligned"
        )
    if Ytrue.ndim not in (1, 2):
        raise ValueError("data must be one- or two-dimensional")


def normalized_rms_error(Ytrue, Yapprox):
    r"""Root-mean-square error normalized by the data amplitude,

    .. math::
       \frac{\sqrt{\frac{1}{k}\sum_{j}\|\y_j - \tilde{\y}_j\|_2^2}}
       {\max_j \|\y_j\|_2},

    where :math:`\y_j` is column :math:`j` of ``Ytrue``.

    Parameters
    ----------
    Ytrue : (n, k) or (k,) ndarray
        "True" samples, one per column. One-dimensional arrays are scalar
        time series.
    Yapprox : (n, k) or (k,) ndarray
        Approximation of ``Ytrue``.

    Returns
    -------
    float
        Normalized RMS error.
    """
    _check_aligned(Ytrue, Yapprox)
    if Ytrue.ndim == 1:
        Ytrue, Yapprox = Ytrue.reshape((1, -1)), Yapprox.reshape((1, -1))
    amplitude = np.max(la.norm(Ytrue, axis=0))
    if amplitude == 0:
        raise ValueError("true data is identically zero")
    residual = np.sum(np.abs(Ytrue - Yapprox) ** 2, axis=0)
    return float(np.sqrt(np.mean(residual)) / amplitude)


def frobenius_error(Ytrue, Yapprox):
    """Compute the absolute and relative Frobenius-norm errors between the
    sample sets Ytrue and Yapprox:

        absolute_error = ||Ytrue - Yapprox||_F,
        relative_error = ||Ytrue - Yapprox||_F / ||Ytrue||_F.

    Returns
    -------
    abs_err : float
    rel_err : float
    """
    _check_aligned(Ytrue, Yapprox)
    absolute_error = la.norm(Ytrue - Yapprox)
    return absolute_error, absolute_error / la.norm(Ytrue)


def lp_error(Ytrue, Yapprox, p=2, normalize=False):
    """Compute the absolute and relative lp-norm errors of each sample,

        absolute_error_j = ||Ytrue_j - Yapprox_j||_p,
        relative_error_j = ||Ytrue_j - Yapprox_j||_p / ||Ytrue_j||_p.

    Parameters
    ----------
    Ytrue : (n, k) or (n,) ndarray
        "True" samples, one per column.
    Yapprox : (n, k) or (n,) ndarray
        Approximation of ``Ytrue``.
    p : float
        Order of the lp norm (default p=2 is the Euclidean norm).
    normalize : bool
        If ``True``, divide by the largest sample norm
        ``max_k ||Ytrue_k||_p`` instead of each sample's own norm.

    Returns
    -------
    abs_err : (k,) ndarray or float
    rel_err : (k,) ndarray or float
    """
    if not np.isscalar(p) or p <= 0:
        raise ValueError("norm order p must be positive (np.inf ok)")
    _check_aligned(Ytrue, Yapprox)

    norm_of_data = la.norm(Ytrue, ord=p, axis=0)
    if normalize:
        norm_of_data = norm_of_data.max()
    absolute_error = la.norm(Ytrue - Yapprox, ord=p, axis=0)
    return absolute_error, absolute_error / norm_of_data
