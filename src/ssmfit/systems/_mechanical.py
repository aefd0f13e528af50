# systems/_mechanical.py
"""Second-order mechanical systems with polynomial internal forces."""

__all__ = [
    "PolynomialForce",
    "MechanicalSystem",
    "oscillator_chain",
]

import numpy as np
import scipy.linalg as la

from .. import errors, utils
from ..dynamics import modal_decomposition
from ..polynomial import PolynomialMap


class PolynomialForce:
    r"""Sparse polynomial force :math:`\mathbf{f}(\q, \dot{\q})` acting on
    :math:`n` degrees of freedom.

    Terms are given as ``{(row, exponent): coefficient}``, where
    ``exponent`` has :math:`2n` entries: the powers of
    :math:`q_1, \ldots, q_n` followed by those of
    :math:`\dot{q}_1, \ldots, \dot{q}_n`.

    Parameters
    ----------
    dof : int
        Number of mechanical degrees of freedom :math:`n`.
    terms : dict
        Nonzero coefficients.
    """

    def __init__(self, dof: int, terms=None):
        if dof < 1:
            raise ValueError("dof must be a positive integer")
        self.dof = int(dof)
        self.terms = {}
        for (row, exponent), value in (terms or {}).items():
            self.add_term(row, exponent, value)

    def add_term(self, row, exponent, coefficient):
        """Add ``coefficient`` to the term ``exponent`` of force ``row``."""
        exponent = tuple(int(e) for e in exponent)
        if len(exponent) != 2 * self.dof:
            raise errors.DimensionMismatchError(
                f"exponent {exponent} does not have {2 * self.dof} entries"
            )
        if not 0 <= row < self.dof:
            raise ValueError(f"row {row} out of range for {self.dof} dofs")
        if sum(exponent) < 2:
            raise ValueError("polynomial forces must be nonlinear")
        key = (int(row), exponent)
        self.terms[key] = self.terms.get(key, 0) + coefficient

    @property
    def max_degree(self) -> int:
        return max([sum(exponent) for _, exponent in self.terms] + [2])

    def __len__(self) -> int:
        return len(self.terms)

    def __str__(self) -> str:
        return (
            f"PolynomialForce: {len(self)} terms on {self.dof} dofs, "
            f"order {self.max_degree}"
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def to_polynomial(self) -> PolynomialMap:
        """The force as a map of the first-order state
        :math:`(\\q, \\dot{\\q})`.
        """
        return PolynomialMap.from_terms(
            self.terms, self.dof, 2 * self.dof, self.max_degree
        )

    def __call__(self, q, qdot):
        return self.to_polynomial()(np.concatenate([q, qdot]))


class MechanicalSystem:
    r"""Mechanical system
    :math:`\M\ddot{\q} + \C\dot{\q} + \K\q + \mathbf{f}(\q, \dot{\q}) = \0`
    in first-order form :math:`\dot{\x} = \A\x + \mathbf{g}(\x)` with
    :math:`\x = (\q, \dot{\q})`.

    Parameters
    ----------
    M, C, K : (n, n) ndarray
        Mass, damping, and stiffness matrices.
    force : PolynomialForce or None
        Nonlinear internal force.
    """

    def __init__(self, M, C, K, force=None):
        M, C, K = (np.atleast_2d(np.asarray(A, dtype=float))
                   for A in (M, C, K))
        n = M.shape[0]
        for label, A in zip("MCK", (M, C, K)):
            if A.shape != (n, n):
                raise errors.DimensionMismatchError(
                    f"{label} must have shape ({n}, {n}), got {A.shape}"
                )
        if force is None:
            force = PolynomialForce(n)
        if force.dof != n:
            raise errors.DimensionMismatchError(
                f"force acts on {force.dof} dofs, system has {n}"
            )
        self.M, self.C, self.K = M, C, K
        self.force = force
        self.__Minv = la.inv(M)
        self.__fnl = force.to_polynomial()

    @property
    def dof(self) -> int:
        return self.M.shape[0]

    @property
    def state_dimension(self) -> int:
        return 2 * self.dof

    @property
    def linear_matrix(self) -> np.ndarray:
        """First-order system matrix ``[[0, I], [-M^-1 K, -M^-1 C]]``."""
        n = self.dof
        return np.block([
            [np.zeros((n, n)), np.eye(n)],
            [-self.__Minv @ self.K, -self.__Minv @ self.C],
        ])

    def __str__(self) -> str:
        return f"MechanicalSystem: {self.dof} dofs, {self.force}"

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def rhs(self, t, state):
        """First-order right-hand side at ``state`` ``(2n,)`` or
        ``(2n, k)``.
        """
        state = np.asarray(state)
        out = self.linear_matrix @ state
        if len(self.force):
            out[self.dof:] -= self.__Minv @ self.__fnl(state)
        return out

    def eigenvalues(self, count=None) -> np.ndarray:
        """Eigenvalues of the linear part, slowest oscillation first."""
        vals = modal_decomposition(self.linear_matrix, "flow")[0]
        return vals if count is None else vals[:count]

    def modal_initial_conditions(self, amplitudes, mode: int = 0,
                                 phases=None) -> np.ndarray:
        r"""Initial states :math:`2\operatorname{Re}(a e^{i\phi}\mathbf{v})`
        along the eigenvector :math:`\mathbf{v}` (unit norm) of one
        oscillating mode, one per column. Close to the slow spectral
        submanifold for small amplitudes.
        """
        amplitudes = np.atleast_1d(np.asarray(amplitudes, dtype=float))
        phases = np.zeros_like(amplitudes) if phases is None \
            else np.broadcast_to(phases, amplitudes.shape)
        _, vecs = modal_decomposition(self.linear_matrix, "flow")
        v = vecs[:, 2 * mode]
        v = v / np.linalg.norm(v)
        return 2 * np.real(np.outer(v, amplitudes * np.exp(1j * phases)))

    def as_tuple(self):
        """``(M, C, K, fnl)`` with ``fnl`` the force as a
        :class:`ssmfit.polynomial.PolynomialMap` of :math:`(\\q, \\dot{\\q})`.
        """
        return self.M, self.C, self.K, self.__fnl


def oscillator_chain(
    n: int,
    mass: float = 1.0,
    stiffness: float = 1.0,
    damping: float = 0.006,
) -> MechanicalSystem:
    r"""Chain of :math:`n` masses connected by springs and dampers, with
    quadratic and cubic forces on the first mass,

    .. math::
       f_1 = 0.33\dot{q}_1^2 + 2q_1^3 + 0.3q_1^2\dot{q}_1
       + 0.5\dot{q}_1^3.

    Damping is proportional to the stiffness matrix, with stronger end
    dampers (4 and 3 instead of 2 times the stiffness on the diagonal).
    """
    if n < 2:
        raise ValueError("oscillator chain needs at least 2 masses")
    M = mass * np.eye(n)
    K = stiffness * (
        2 * np.eye(n) - np.eye(n, k=-1) - np.eye(n, k=1)
    )
    C = K.copy()
    C[0, 0], C[-1, -1] = 4 * stiffness, 3 * stiffness
    C = damping * C

    def _exponent(q1=0, qdot1=0):
        exponent = [0] * (2 * n)
        exponent[0], exponent[n] = q1, qdot1
        return tuple(exponent)

    force = PolynomialForce(n, {
        (0, _exponent(qdot1=2)): 0.33,
        (0, _exponent(q1=3)): 2.0,
        (0, _exponent(q1=2, qdot1=1)): 0.3,
        (0, _exponent(qdot1=3)): 0.5,
    })
    return MechanicalSystem(M, C, K, force)
