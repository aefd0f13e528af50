# lstsq/_base.py
"""Base class for solvers of the weighted coefficient regression."""

__all__ = [
    "SolverTemplate",
    "PlainSolver",
]

import abc
import copy
import warnings
import numpy as np
import scipy.linalg as la

from .. import errors, utils


_require_trained = utils.requires(
    "data_matrix",
    "solver not trained, call fit()",
)


class SolverTemplate(abc.ABC):
    r"""Template for solvers for the weighted regression
    :math:`\Z \approx \C\D\trp` for the coefficient matrix :math:`\C`.

    Each row :math:`j` of the data matrix :math:`\D` (the monomials of
    sample :math:`j`) and each column of :math:`\Z` (the target of sample
    :math:`j`) are scaled by :math:`\sqrt{w_j}` before solving, so the
    solver minimizes :math:`\sum_j w_j\|\z_j - \C\d_j\|^2`.
    Hyperparameters are set in the constructor.
    """

    def __init__(self):
        self.__D = None
        self.__Z = None
        self.__w = None

    # Properties: matrices ----------------------------------------------------
    @property
    def data_matrix(self) -> np.ndarray:
        r""":math:`k \times d` data matrix :math:`\D` (unweighted)."""
        return self.__D

    @property
    def lhs_matrix(self) -> np.ndarray:
        r""":math:`r \times k` left-hand side data :math:`\Z` (unweighted)."""
        return self.__Z

    @property
    def weights(self) -> np.ndarray:
        r""":math:`k` sample weights (``None`` for uniform weights)."""
        return self.__w

    # Properties: matrix dimensions -------------------------------------------
    @property
    def k(self) -> int:
        """Number of equations (samples) in the least-squares problem."""
        return D.shape[0] if (D := self.data_matrix) is not None else None

    @property
    def d(self) -> int:
        """Number of unknowns in each row of the coefficient matrix."""
        return D.shape[1] if (D := self.data_matrix) is not None else None

    @property
    def r(self) -> int:
        """Number of coefficient matrix rows to learn."""
        return Z.shape[0] if (Z := self.lhs_matrix) is not None else None

    def __str__(self) -> str:
        """String representation: class name + dimensions."""
        out = [self.__class__.__name__]
        if self.data_matrix is not None:
            out.append(f"  Data matrix:        {self.data_matrix.shape}")
            out.append(f"  LHS matrix:         {self.lhs_matrix.shape}")
            out.append(f"  Coefficient matrix: {self.r, self.d}")
            out.append(f"  Weighted:           {self.weights is not None}")
        else:
            out[0] += " (not trained)"
        return "\n".join(out)

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Main methods ------------------------------------------------------------
    def fit(self, data_matrix, lhs_matrix, weights=None):
        r"""Verify dimensions and save the data matrices.

        Parameters
        ----------
        data_matrix : (k, d) ndarray
            Data matrix :math:`\D`.
        lhs_matrix : (r, k) or (k,) ndarray
            "Left-hand side" data matrix :math:`\Z` (not its transpose!).
            If one-dimensional, assume :math:`r = 1`.
        weights : (k,) ndarray or None
            Nonnegative sample weights. ``None`` means uniform weights.
        """
        if data_matrix.ndim != 2:
            raise ValueError("data_matrix must be two-dimensional")
        if lhs_matrix.ndim == 1:
            lhs_matrix = lhs_matrix.reshape((1, -1))
        if lhs_matrix.ndim != 2:
            raise ValueError("lhs_matrix must be one- or two-dimensional")
        if (k1 := lhs_matrix.shape[1]) != (k2 := data_matrix.shape[0]):
            raise errors.DimensionMismatchError(
                "data_matrix and lhs_matrix not aligned "
                f"(lhs_matrix.shape[-1] = {k1} != {k2} = data_matrix.shape[0])"
            )
        if weights is not None:
            weights = np.asarray(weights, dtype=float)
            if weights.shape != (k2,):
                raise errors.DimensionMismatchError(
                    f"weights must have shape ({k2},)"
                )
            if np.any(weights < 0):
                raise ValueError("weights must be nonnegative")

        self.__D = data_matrix
        self.__Z = lhs_matrix
        self.__w = weights
        return self

    def _weighted(self):
        """Data and left-hand side matrices with rows scaled by sqrt(w)."""
        if self.weights is None:
            return self.data_matrix, self.lhs_matrix
        sqrtw = np.sqrt(self.weights)
        return self.data_matrix * sqrtw[:, None], self.lhs_matrix * sqrtw

    @abc.abstractmethod
    def solve(self) -> np.ndarray:  # pragma: no cover
        r"""Solve the regression.

        Returns
        -------
        C : (r, d) ndarray
            Coefficient matrix :math:`\C` (not its transpose!).
        """
        raise NotImplementedError

    # Post-processing ---------------------------------------------------------
    @_require_trained
    def cond(self) -> float:
        """2-norm condition number of the weighted data matrix."""
        return np.linalg.cond(self._weighted()[0])

    @_require_trained
    def residual(self, C: np.ndarray) -> np.ndarray:
        r"""Weighted squared residual :math:`\sum_j w_j(z_{ij} - \c_i\d_j)^2`
        for each row :math:`i` of the coefficient matrix.
        """
        if self.r == 1 and C.ndim == 1:
            C = C.reshape((1, -1))
        if C.shape != (shape := (self.r, self.d)):
            raise errors.DimensionMismatchError(
                f"C.shape = {C.shape} != {shape} = (r, d)"
            )
        D, Z = self._weighted()
        return np.sum(np.abs(D @ C.T - Z.T) ** 2, axis=0)

    def copy(self):
        """Make a copy of the solver."""
        return copy.deepcopy(self)


class PlainSolver(SolverTemplate):
    r"""Solve the weighted :math:`2`-norm least-squares problem without any
    regularization, via :func:`scipy.linalg.lstsq()`.

    Parameters
    ----------
    cond : float or None
        Cutoff for 'small' singular values of the data matrix.
        See :func:`scipy.linalg.lstsq()`.
    lapack_driver : str or None
        Which LAPACK driver is used to solve the least-squares problem.
        See :func:`scipy.linalg.lstsq()`.
    """

    def __init__(self, cond=None, lapack_driver=None):
        SolverTemplate.__init__(self)
        self.__options = dict(cond=cond, lapack_driver=lapack_driver)

    @property
    def options(self):
        """Keyword arguments for :func:`scipy.linalg.lstsq()`."""
        return self.__options

    def __str__(self):
        kwargs = ", ".join(f"{k}={v!r}" for k, v in self.options.items())
        start = SolverTemplate.__str__(self)
        return start + f"\n  solver: scipy.linalg.lstsq({kwargs})"

    def fit(self, data_matrix, lhs_matrix, weights=None):
        SolverTemplate.fit(self, data_matrix, lhs_matrix, weights)
        if self.k < self.d:
            warnings.warn(
                "least-squares system is underdetermined",
                errors.SSMWarning,
                stacklevel=2,
            )
        return self

    @_require_trained
    def solve(self):
        """Solve the regression via :func:`scipy.linalg.lstsq()`."""
        D, Z = self._weighted()
        return la.lstsq(D, Z.T, **self.options)[0].T
