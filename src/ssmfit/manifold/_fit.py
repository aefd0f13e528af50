# manifold/_fit.py
"""Weighted least-squares fit of a graph-style manifold parametrization."""

__all__ = [
    "ManifoldFitter",
]

import numpy as np
import scipy.linalg as la
import scipy.optimize as opt
import sklearn.utils.extmath as sklmath

from .. import errors, utils
from ..lstsq import PlainSolver
from ..polynomial import monomial_basis
from ..pre import TimeWeighting, TrajectorySet
from ._parametrization import ManifoldParametrization, rrms_error


class ManifoldFitter:
    r"""Fit a manifold parametrization to observable trajectories.

    The fitter minimizes the weighted reconstruction cost

    .. math::
       C(\V, \H) = \sum_k w_k \left\|
       \y_k - \V\V\trp\y_k - \H\boldsymbol{\phi}_{2..M}(\V\trp\y_k)
       \right\|_2^2

    subject to :math:`\V\trp\V = \I` and :math:`\V\trp\H = \0`.
    For a fixed :math:`\V` the optimal :math:`\H` solves a linear weighted
    least-squares problem on the projected-out data
    :math:`(\I - \V\V\trp)\y_k`, so it automatically satisfies
    :math:`\V\trp\H = \0`. The cost only depends on the span of :math:`\V`,
    which is optimized (variable projection) over the chart

    .. math::
       \V(\X) = \operatorname{polar}(\V_0 + \V_0^{\perp}\X)

    with :func:`scipy.optimize.least_squares()`. The initial
    :math:`\V_0` holds the leading left singular vectors of the weighted
    data. Sample weights :math:`w_k` come from
    :class:`ssmfit.pre.TimeWeighting`.

    Parameters
    ----------
    dimension : int
        Manifold dimension :math:`m`.
    max_degree : int
        Polynomial order :math:`M` of the parametrization.
    c1, c2 : float
        Time weighting parameters, see :class:`ssmfit.pre.TimeWeighting`.
    max_iterations : int
        Budget of cost function evaluations for the tangent space
        optimization.
    tolerance : float
        ``ftol``, ``xtol``, and ``gtol`` of
        :func:`scipy.optimize.least_squares()`.
    optimize_tangent : bool
        If ``False``, keep the singular value tangent space :math:`\V_0`.
    svdsolver : str
        * ``"dense"``: :func:`scipy.linalg.svd()`.
        * ``"randomized"``: :func:`sklearn.utils.extmath.randomized_svd()`.
    verbose : bool
        If ``True``, print timing messages.
    """

    _SVDSOLVERS = ("dense", "randomized")

    def __init__(
        self,
        dimension: int,
        max_degree: int,
        c1: float = 0,
        c2: float = 0,
        max_iterations: int = 200,
        tolerance: float = 1e-10,
        optimize_tangent: bool = True,
        svdsolver: str = "dense",
        verbose: bool = False,
    ):
        if dimension < 1:
            raise ValueError("dimension must be a positive integer")
        if max_degree < 1:
            raise ValueError("max_degree must be a positive integer")
        if max_iterations < 1:
            raise ValueError("max_iterations must be a positive integer")
        if svdsolver not in self._SVDSOLVERS:
            raise ValueError(
                f"invalid svdsolver '{svdsolver}', "
                f"options: {', '.join(self._SVDSOLVERS)}"
            )
        self.dimension = int(dimension)
        self.max_degree = int(max_degree)
        self.weighting = TimeWeighting(c1, c2)
        self.max_iterations = int(max_iterations)
        self.tolerance = tolerance
        self.optimize_tangent = bool(optimize_tangent)
        self.svdsolver = svdsolver
        self.verbose = verbose
        self.optimize_result_ = None

    def __str__(self) -> str:
        return "\n  ".join(
            [
                "ManifoldFitter",
                f"dimension:      {self.dimension}",
                f"order:          {self.max_degree}",
                f"weighting:      {self.weighting}",
                f"max iterations: {self.max_iterations}",
                f"SVD solver:     {self.svdsolver}",
            ]
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Helpers -----------------------------------------------------------------
    def _initial_tangent(self, Yw):
        if self.svdsolver == "randomized":
            U = sklmath.randomized_svd(Yw, self.dimension, random_state=0)[0]
        else:
            U = la.svd(Yw, full_matrices=False)[0]
        return U[:, : self.dimension]

    def _nonlinear_coefficients(self, V, Y, weights):
        """Optimal H for fixed V and the residual it leaves."""
        eta = V.T @ Y
        R = Y - V @ eta
        if self.max_degree == 1:
            return np.zeros((Y.shape[0], 0)), R
        Phi = monomial_basis(self.dimension, self.max_degree, 2).evaluate(eta)
        H = PlainSolver().fit(Phi.T, R, weights).solve()
        return H, R - H @ Phi

    @staticmethod
    def _polar(A):
        U, _, Wt = la.svd(A, full_matrices=False)
        return U @ Wt

    # Main routine ------------------------------------------------------------
    def fit(self, trajectories) -> ManifoldParametrization:
        """Fit the manifold to the training trajectories.

        Parameters
        ----------
        trajectories : ssmfit.pre.TrajectorySet
            Observable (embedded) trajectories. Only the training
            trajectories are used.

        Returns
        -------
        ManifoldParametrization

        Raises
        ------
        DimensionMismatchError
            If the observable dimension is smaller than the manifold
            dimension or the trajectories have different dimensions.
        InsufficientDataError
            If there are fewer distinct samples than free coefficients.
        FitDivergenceError
            If the tangent space optimization exhausts its budget.
        """
        if not isinstance(trajectories, TrajectorySet):
            raise TypeError("trajectories must be a TrajectorySet")
        training = trajectories.train()
        if len(training) == 0:
            raise errors.InsufficientDataError("no training trajectories")
        D = training.dimension
        m = self.dimension
        if D < m:
            raise errors.DimensionMismatchError(
                f"observable dimension {D} < manifold dimension {m}"
            )

        Y = training.stack()
        weights = self.weighting.trajectory_weights(training)
        n_nl = len(monomial_basis(m, self.max_degree, 2)) \
            if self.max_degree > 1 else 0
        n_distinct = np.unique(Y, axis=1).shape[1]
        if n_distinct < m + n_nl:
            raise errors.InsufficientDataError(
                f"{n_distinct} distinct samples, at least {m + n_nl} needed "
                f"for a dimension {m}, order {self.max_degree} manifold"
            )

        with utils.TimedBlock(
            f"Fitting {m}-dimensional manifold of order {self.max_degree}",
            verbose=self.verbose,
        ) as block:
            sqrtw = np.sqrt(weights)
            V0 = self._initial_tangent(Y * sqrtw)
            V = V0

            if self.optimize_tangent and self.max_degree > 1 and D > m:
                V = self._optimize(V0, Y, weights, sqrtw)

            H, _ = self._nonlinear_coefficients(V, Y, weights)
            manifold = ManifoldParametrization(V, H, self.max_degree)
            manifold.rrms = rrms_error(training, manifold)
            block.note(f"rrms {manifold.rrms:.2e}")

        return manifold

    def _optimize(self, V0, Y, weights, sqrtw):
        """Variable projection over the span of the tangent space."""
        D, m = V0.shape
        V0perp = la.null_space(V0.T)

        def _tangent(x):
            return self._polar(V0 + V0perp @ x.reshape((D - m, m)))

        def _residual(x):
            _, R = self._nonlinear_coefficients(_tangent(x), Y, weights)
            return (R * sqrtw).ravel()

        result = opt.least_squares(
            _residual,
            np.zeros((D - m) * m),
            method="trf",
            ftol=self.tolerance,
            xtol=self.tolerance,
            gtol=self.tolerance,
            max_nfev=self.max_iterations,
        )
        self.optimize_result_ = result
        V = _tangent(result.x)
        if result.status == 0:
            H, R = self._nonlinear_coefficients(V, Y, weights)
            raise errors.FitDivergenceError(
                f"manifold optimization did not converge in "
                f"{self.max_iterations} evaluations",
                best=(V, H),
                residual=float(np.linalg.norm(R * sqrtw)),
            )
        return V
