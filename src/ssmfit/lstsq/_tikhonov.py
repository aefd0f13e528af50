# lstsq/_tikhonov.py
"""Weighted least squares with L2 (Tikhonov) regularization."""

__all__ = [
    "L2Solver",
]

import numpy as np
import scipy.linalg as la

from .. import utils
from ._base import SolverTemplate


_require_trained = utils.requires(
    "data_matrix",
    "solver not trained, call fit()",
)


class L2Solver(SolverTemplate):
    r"""Solve the weighted least-squares problem with :math:`L_2`
    regularization,

    .. math::
        \argmin_{\C}\sum_j w_j\|\z_j - \C\d_j\|_2^2 + \lambda^2\|\C\|_F^2.

    The solution is computed from the singular value decomposition
    :math:`\W^{1/2}\D = \bfPhi\bfSigma\bfPsi\trp` as
    :math:`\C = \Z\W^{1/2}\bfPhi\bfSigma^{*}\bfPsi\trp` with
    :math:`\Sigma_{i,i}^{*} = \Sigma_{i,i}/(\Sigma_{i,i}^{2} + \lambda^2)`.

    Parameters
    ----------
    regularizer : float
        Scalar :math:`L_2` regularization constant :math:`\lambda \ge 0`.
    lapack_driver : str
        LAPACK routine for computing the singular value decomposition.
        See :func:`scipy.linalg.svd()`.
    """

    def __init__(self, regularizer=0, lapack_driver: str = "gesdd"):
        SolverTemplate.__init__(self)
        self.regularizer = regularizer
        self.__options = dict(full_matrices=False,
                              lapack_driver=lapack_driver)

    @property
    def regularizer(self):
        r"""Scalar :math:`L_2` regularization constant :math:`\lambda`."""
        return self.__reg

    @regularizer.setter
    def regularizer(self, reg):
        if not np.isscalar(reg):
            raise TypeError("regularization constant must be a scalar")
        if reg < 0:
            raise ValueError("regularization constant must be nonnegative")
        self.__reg = reg

    @property
    def options(self):
        """Keyword arguments for :func:`scipy.linalg.svd()`."""
        return self.__options

    def __str__(self):
        return "\n  ".join(
            [
                SolverTemplate.__str__(self),
                f"regularizer:     {self.regularizer:.4e}",
            ]
        )

    def fit(self, data_matrix, lhs_matrix, weights=None):
        """Verify dimensions and compute the singular value decomposition
        of the weighted data matrix.
        """
        SolverTemplate.fit(self, data_matrix, lhs_matrix, weights)
        D, Z = self._weighted()
        Phi, svals, PsiT = la.svd(D, **self.options)
        self._svals = svals
        self._ZPhi = Z @ Phi
        self._PsiT = PsiT
        return self

    @_require_trained
    def solve(self) -> np.ndarray:
        """Solve the regularized regression."""
        svals = self._svals.reshape((-1, 1))
        svals_inv = svals / (svals**2 + self.regularizer**2)
        return (self._ZPhi * svals_inv.T) @ self._PsiT
