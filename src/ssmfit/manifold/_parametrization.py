# manifold/_parametrization.py
"""Graph-style polynomial parametrization of an invariant manifold."""

__all__ = [
    "ManifoldParametrization",
    "project_trajectories",
    "lift_trajectories",
    "rrms_error",
]

import warnings
import numpy as np

from .. import errors, utils
from ..polynomial import PolynomialMap, monomial_basis
from ..post import normalized_rms_error


class ManifoldParametrization:
    r"""Polynomial parametrization of an :math:`m`-dimensional manifold in
    a :math:`D`-dimensional observable space,

    .. math::
       \y = \W(\boldsymbol{\eta})
       = \V\boldsymbol{\eta} + \H\boldsymbol{\phi}_{2..M}(\boldsymbol{\eta}),
       \qquad
       \boldsymbol{\eta} = \V\trp\y,

    where :math:`\V \in \RR^{D \times m}` has orthonormal columns (the
    tangent space), :math:`\V\trp\H = \0`, and
    :math:`\boldsymbol{\phi}_{2..M}` are the monomials of degree 2 to
    :math:`M` of the reduced coordinates :math:`\boldsymbol{\eta}`.
    Because of the second constraint, projecting a lifted point recovers
    the reduced coordinates exactly.

    Parameters
    ----------
    tangent : (D, m) ndarray
        Tangent space basis :math:`\V`.
    nonlinear : (D, n_nl) ndarray or None
        Coefficients :math:`\H` of the degree 2 to :math:`M` monomials.
        Must be ``None`` or have no columns if ``max_degree == 1``.
    max_degree : int
        Polynomial order :math:`M` of the parametrization.
    rrms : float or None
        Training reconstruction error (diagnostic only).
    check_tolerance : float
        Tolerance for the orthonormality and orthogonality checks; a
        :class:`ssmfit.errors.SSMWarning` is issued if they fail.
    """

    def __init__(
        self,
        tangent,
        nonlinear=None,
        max_degree: int = 1,
        rrms: float = None,
        check_tolerance: float = 1e-6,
    ):
        V = np.array(tangent, dtype=float)
        if V.ndim != 2:
            raise errors.DimensionMismatchError(
                "tangent must be two-dimensional"
            )
        D, m = V.shape
        if m > D:
            raise errors.DimensionMismatchError(
                f"manifold dimension {m} exceeds observable dimension {D}"
            )
        if max_degree < 1:
            raise ValueError("max_degree must be a positive integer")

        n_nl = len(monomial_basis(m, max_degree, 2)) if max_degree > 1 else 0
        H = np.zeros((D, 0)) if nonlinear is None else \
            np.array(nonlinear, dtype=float)
        if H.shape != (D, n_nl):
            raise errors.DimensionMismatchError(
                f"nonlinear coefficients must have shape {(D, n_nl)} "
                f"(got {H.shape})"
            )

        V.flags.writeable = False
        H.flags.writeable = False
        self.__V = V
        self.__H = H
        self.__M = int(max_degree)
        self.__map = PolynomialMap(
            np.hstack([V, H]), monomial_basis(m, self.__M, 1)
        )
        self.rrms = rrms

        orth, perp = self.invariant_errors()
        if orth > check_tolerance or perp > check_tolerance:
            warnings.warn(
                "manifold invariants violated "
                f"(||V^T V - I|| = {orth:.2e}, ||V^T H|| = {perp:.2e})",
                errors.SSMWarning,
                stacklevel=2,
            )

    # Properties --------------------------------------------------------------
    @property
    def tangent(self) -> np.ndarray:
        """(D, m) orthonormal tangent space basis."""
        return self.__V

    @property
    def nonlinear(self) -> np.ndarray:
        """(D, n_nl) coefficients of the degree 2+ monomials."""
        return self.__H

    @property
    def max_degree(self) -> int:
        return self.__M

    @property
    def dimension(self) -> int:
        """Manifold dimension :math:`m`."""
        return self.__V.shape[1]

    @property
    def observable_dimension(self) -> int:
        """Observable (embedding) dimension :math:`D`."""
        return self.__V.shape[0]

    @property
    def polynomial(self) -> PolynomialMap:
        """The parametrization as a :class:`PolynomialMap`."""
        return self.__map

    def __str__(self) -> str:
        out = [
            "ManifoldParametrization",
            f"  dimension:            {self.dimension}",
            f"  observable dimension: {self.observable_dimension}",
            f"  polynomial order:     {self.max_degree}",
        ]
        if self.rrms is not None:
            out.append(f"  training RRMS:        {self.rrms:.4e}")
        return "\n".join(out)

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def invariant_errors(self):
        """Norms ``||V^T V - I||`` and ``||V^T H||``."""
        V, H = self.__V, self.__H
        orth = np.linalg.norm(V.T @ V - np.eye(V.shape[1]))
        perp = np.linalg.norm(V.T @ H) if H.size else 0.0
        return float(orth), float(perp)

    # Main methods ------------------------------------------------------------
    def project(self, states) -> np.ndarray:
        """Reduced coordinates ``V^T y`` of observable point(s) ``(D,)`` or
        ``(D, k)``.
        """
        states = np.asarray(states)
        if states.shape[0] != self.observable_dimension:
            raise errors.DimensionMismatchError(
                f"states have {states.shape[0]} rows, "
                f"manifold lives in dimension {self.observable_dimension}"
            )
        return self.__V.T @ states

    def lift(self, reduced) -> np.ndarray:
        """Observable point(s) on the manifold for reduced coordinates
        ``(m,)`` or ``(m, k)``.
        """
        reduced = np.asarray(reduced)
        if reduced.shape[0] != self.dimension:
            raise errors.DimensionMismatchError(
                f"reduced coordinates have {reduced.shape[0]} rows, "
                f"manifold dimension is {self.dimension}"
            )
        return self.__map(reduced)

    __call__ = lift

    # Persistence -------------------------------------------------------------
    def save(self, savefile, overwrite=False):
        """Save the parametrization to an HDF5 file."""
        with utils.hdf5_savehandle(
            savefile, overwrite, "ManifoldParametrization"
        ) as hf:
            utils.save_options(
                hf, dict(max_degree=self.max_degree, rrms=self.rrms)
            )
            hf.create_dataset("tangent", data=self.__V)
            hf.create_dataset("nonlinear", data=self.__H)

    @classmethod
    def load(cls, loadfile):
        """Load a parametrization saved with :meth:`save()`."""
        with utils.hdf5_loadhandle(
            loadfile, "ManifoldParametrization"
        ) as hf:
            meta = utils.load_options(hf)
            return cls(
                hf["tangent"][:],
                hf["nonlinear"][:],
                int(meta["max_degree"]),
                rrms=meta["rrms"],
            )


def _tangent_of(manifold):
    if isinstance(manifold, ManifoldParametrization):
        return manifold.tangent
    V = np.asarray(manifold)
    if V.ndim != 2:
        raise errors.DimensionMismatchError("tangent must be two-dimensional")
    return V


def project_trajectories(trajectories, manifold):
    """Reduced-coordinate trajectories ``eta_k = V^T y_k``.

    Parameters
    ----------
    trajectories : ssmfit.pre.TrajectorySet
        Observable (embedded) trajectories.
    manifold : ManifoldParametrization or (D, m) ndarray
        Manifold, or just its tangent space basis.
    """
    V = _tangent_of(manifold)

    def _project(traj):
        if traj.dimension != V.shape[0]:
            raise errors.DimensionMismatchError(
                f"trajectory {traj.index} has dimension {traj.dimension}, "
                f"projection expects {V.shape[0]}"
            )
        return traj.replace(data=V.T @ traj.data)

    return trajectories.map(_project)


def lift_trajectories(reduced, manifold: ManifoldParametrization):
    """Observable trajectories ``y_k = W(eta_k)`` on the manifold."""
    return reduced.map(lambda traj: traj.replace(data=manifold.lift(
        traj.data)))


def rrms_error(trajectories, manifold: ManifoldParametrization) -> float:
    """Mean over trajectories of the normalized RMS error between each
    trajectory and its reconstruction ``W(V^T y)``.
    """
    errs = [
        normalized_rms_error(
            traj.data, manifold.lift(manifold.project(traj.data))
        )
        for traj in trajectories
    ]
    return float(np.mean(errs))
