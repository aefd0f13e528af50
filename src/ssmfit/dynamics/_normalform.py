# dynamics/_normalform.py
"""Modal coordinates and order-by-order normal form transformations."""

__all__ = [
    "continuous_eigenvalues",
    "modal_decomposition",
    "NormalForm",
    "compute_normal_form",
]

import numpy as np
import scipy.linalg as la

from .. import errors, utils
from ..polynomial import PolynomialMap, monomial_basis


_KINDS = ("map", "flow")


def _check_kind(kind, dt):
    if kind not in _KINDS:
        raise ValueError(f"invalid kind '{kind}', options: map, flow")
    if kind == "map" and (dt is None or dt <= 0):
        raise ValueError("maps require a positive time step dt")


def continuous_eigenvalues(eigenvalues, kind, dt=None):
    """Continuous-time eigenvalues: unchanged for flows, ``log(lambda)/dt``
    for the multipliers of a map.
    """
    _check_kind(kind, dt)
    eigenvalues = np.asarray(eigenvalues, dtype=complex)
    if kind == "flow":
        return eigenvalues
    if np.any(eigenvalues == 0):
        raise ArithmeticError("map has a zero multiplier")
    return np.log(eigenvalues) / dt


def _principal_frequency(omega, dt):
    """Angular frequency of a map shifted into ``(-pi/dt, pi/dt]``."""
    half = np.pi / dt
    return half - np.mod(half - omega, 2 * half)


def modal_decomposition(A, kind="flow", dt=None, tol=1e-10):
    r"""Eigendecomposition :math:`\A = \bfPhi\bfLambda\bfPhi^{-1}` with a
    reproducible ordering.

    Eigenvalues are sorted by the magnitude of the imaginary part of the
    continuous-time eigenvalue (slowest oscillation first), then by the real
    part. The member of each complex conjugate pair with positive imaginary
    part comes first, directly followed by its conjugate, also when several
    pairs share a frequency.
    Eigenvectors of a conjugate pair are exact conjugates of each other.

    Parameters
    ----------
    A : (m, m) ndarray
        Real matrix, the linear part of a map or flow.
    kind : str
        ``"map"`` or ``"flow"``.
    dt : float or None
        Time step (maps only).

    Returns
    -------
    eigenvalues : (m,) complex ndarray
        Eigenvalues of ``A`` (multipliers for maps).
    modes : (m, m) complex ndarray
        Eigenvectors, one per column.
    """
    vals, vecs = la.eig(A)
    mu = continuous_eigenvalues(vals, kind, dt)
    order = np.lexsort(
        (-mu.imag, np.round(mu.real, 10), np.round(np.abs(mu.imag), 10))
    )
    vals, vecs = vals[order], vecs[:, order].astype(complex)
    scale = max(np.max(np.abs(vals)), 1)

    j = 0
    while j < vals.size:
        if abs(vals[j].imag) > tol * scale and j + 1 < vals.size:
            # Move the conjugate partner next to its eigenvalue.
            gaps = np.abs(vals[j + 1:] - np.conj(vals[j]))
            partner = j + 1 + int(np.argmin(gaps))
            if partner != j + 1:
                swap = [j + 1, partner]
                vals[swap] = vals[swap[::-1]]
                vecs[:, swap] = vecs[:, swap[::-1]]
            vals[j + 1] = np.conj(vals[j])
            vecs[:, j + 1] = np.conj(vecs[:, j])
            j += 2
        else:
            vals[j] = vals[j].real
            vecs[:, j] = vecs[:, j].real
            j += 1
    return vals, vecs


class NormalForm:
    r"""Normal form of a polynomial map or flow.

    With modal matrix :math:`\bfPhi` and the near-identity transformation
    :math:`\mathbf{w}(\z) = \z + \mathbf{t}(\z)`, the reduced coordinates
    are :math:`\boldsymbol{\eta} = \mathbf{T}(\z) = \bfPhi\mathbf{w}(\z)`
    and the dynamics in :math:`\z` are :math:`\mathbf{N}(\z)` (the next
    iterate for maps, the velocity for flows).

    Attributes
    ----------
    kind : str
        ``"map"`` or ``"flow"``.
    dt : float or None
        Time step (maps only).
    eigenvalues : (m,) complex ndarray
        Eigenvalues of the linear part (multipliers for maps).
    modes : (m, m) complex ndarray
        Modal matrix :math:`\bfPhi`.
    N : PolynomialMap
        Dynamics in normal form coordinates.
    T : PolynomialMap
        Normal form coordinates to reduced coordinates.
    T_inverse : PolynomialMap
        Reduced coordinates to normal form coordinates.
    retained : (m, n_terms) bool ndarray
        Terms of ``N`` kept as (near-)resonant.
    """

    def __init__(self, kind, dt, eigenvalues, modes, N, T, T_inverse,
                 retained):
        _check_kind(kind, dt)
        self.kind = kind
        self.dt = dt
        self.eigenvalues = np.asarray(eigenvalues, dtype=complex)
        self.modes = np.asarray(modes, dtype=complex)
        self.N = N
        self.T = T
        self.T_inverse = T_inverse
        self.retained = np.asarray(retained, dtype=bool)
        for arr in self.eigenvalues, self.modes, self.retained:
            arr.flags.writeable = False

    @property
    def dimension(self) -> int:
        return self.N.dimension

    @property
    def continuous_eigenvalues(self) -> np.ndarray:
        return continuous_eigenvalues(self.eigenvalues, self.kind, self.dt)

    def __str__(self) -> str:
        n_kept = int(self.retained[:, self.N.basis.degrees > 1].sum())
        return "\n  ".join(
            [
                f"NormalForm ({self.kind})",
                f"dimension: {self.dimension}",
                f"order:     {self.N.max_degree}",
                f"retained nonlinear terms: {n_kept}",
            ]
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def to_normal(self, reduced):
        """Normal form coordinates of reduced coordinates."""
        return self.T_inverse(np.asarray(reduced, dtype=complex))

    def to_reduced(self, normal):
        """Real reduced coordinates of normal form coordinates."""
        return self.T(normal).real

    def save(self, group):
        """Store the normal form in an open HDF5 group."""
        with utils.hdf5_savehandle(group, False, "NormalForm") as hf:
            utils.save_options(hf, dict(kind=self.kind, dt=self.dt))
            hf.create_dataset("eigenvalues", data=self.eigenvalues)
            hf.create_dataset("modes", data=self.modes)
            hf.create_dataset("retained", data=self.retained)
            for label in ("N", "T", "T_inverse"):
                getattr(self, label).save(hf.create_group(label))

    @classmethod
    def load(cls, group):
        """Inverse of :meth:`save()`."""
        with utils.hdf5_loadhandle(group, "NormalForm") as hf:
            meta = utils.load_options(hf)
            return cls(
                meta["kind"],
                meta["dt"],
                hf["eigenvalues"][:],
                hf["modes"][:],
                PolynomialMap.load(hf["N"]),
                PolynomialMap.load(hf["T"]),
                PolynomialMap.load(hf["T_inverse"]),
                hf["retained"][:],
            )


def compute_normal_form(
    R: PolynomialMap,
    kind: str,
    dt: float = None,
    style: str = "normalform",
    resonance_tolerance: float = 0.1,
    singularity_tolerance: float = 1e-8,
    resonance_rule: str = "frequency",
) -> NormalForm:
    r"""Transform a fitted polynomial map or flow to modal or normal form
    coordinates.

    Starting from the modal form
    :math:`\tilde{\mathbf{R}}(\z) = \bfPhi^{-1}\mathbf{R}(\bfPhi\z)`, the
    near-identity transformation
    :math:`\mathbf{w}(\z) = \z + \mathbf{t}(\z)` and the normal form
    :math:`\mathbf{N}(\z) = \bfLambda\z + \mathbf{n}(\z)` are determined
    degree by degree from the invariance equation
    (:math:`D\mathbf{w}\,\mathbf{N} = \tilde{\mathbf{R}}\circ\mathbf{w}` for
    flows, :math:`\mathbf{w}\circ\mathbf{N} = \tilde{\mathbf{R}}\circ
    \mathbf{w}` for maps). At degree :math:`k`, the coefficients of the
    monomial :math:`\z^{\alpha}` in component :math:`j` satisfy

    .. math::
       d_{j,\alpha}t_{j,\alpha} + n_{j,\alpha} = f_{j,\alpha} - g_{j,\alpha},

    with :math:`d_{j,\alpha} = \alpha\cdot\lambda - \lambda_j` (flows) or
    :math:`\lambda^{\alpha} - \lambda_j` (maps), where :math:`f` and
    :math:`g` only depend on lower degree terms. Near-resonant terms are
    kept in :math:`\mathbf{n}`, all others are removed by :math:`\mathbf{t}`.
    A term is near-resonant if, with continuous-time eigenvalues
    :math:`\mu`, :math:`|\operatorname{Im}(\alpha\cdot\mu - \mu_j)|`
    (``resonance_rule="frequency"``) or :math:`|\alpha\cdot\mu - \mu_j|`
    (``resonance_rule="exact"``) is below ``resonance_tolerance`` times
    :math:`\max|\mu|`.

    Parameters
    ----------
    R : PolynomialMap
        Real polynomial map (next iterate) or flow (velocity) without a
        constant term.
    kind : str
        ``"map"`` or ``"flow"``.
    dt : float or None
        Time step (maps only).
    style : str
        ``"modal"`` (diagonalize the linear part only) or ``"normalform"``.
    resonance_tolerance : float
        Relative threshold for near-resonance.
    singularity_tolerance : float
        Relative threshold below which the denominator of a non-resonant
        term is considered zero.
    resonance_rule : str
        ``"frequency"`` or ``"exact"``.

    Raises
    ------
    ResonanceSingularityError
        If a non-resonant term has a vanishing denominator.
    """
    _check_kind(kind, dt)
    if style not in ("modal", "normalform"):
        raise ValueError(f"invalid style '{style}', options: modal, "
                         "normalform")
    if resonance_rule not in ("frequency", "exact"):
        raise ValueError(f"invalid resonance_rule '{resonance_rule}', "
                         "options: frequency, exact")
    if R.output_dimension != R.dimension:
        raise errors.DimensionMismatchError(
            "dynamics must map the reduced space to itself"
        )
    if R.basis.min_degree == 0 and np.any(R.degree_part(0).coefficients):
        raise ValueError("dynamics must not have a constant term")

    m, M = R.dimension, R.max_degree
    basis = monomial_basis(m, M, 1)
    lam, Phi = modal_decomposition(R.linear_part, kind, dt)
    Phi_inv = la.inv(Phi)

    # Modal form.
    Rt = Phi_inv @ R.compose(PolynomialMap.from_linear(Phi, M))
    Rt = Rt.to_basis(basis)

    identity = PolynomialMap.identity(m, M).coefficients.astype(complex)
    if style == "modal":
        retained = np.ones((m, len(basis)), dtype=bool)
        return NormalForm(
            kind, dt, lam, Phi,
            N=Rt,
            T=PolynomialMap.from_linear(Phi, M),
            T_inverse=PolynomialMap.from_linear(Phi_inv, M),
            retained=retained,
        )

    mu = continuous_eigenvalues(lam, kind, dt)
    mu_scale = max(np.max(np.abs(mu)), np.finfo(float).tiny)
    d_scale = max(np.max(np.abs(lam)), np.finfo(float).tiny)

    n = np.zeros((m, len(basis)), dtype=complex)
    n[:, basis.degree_slice(1)] = np.diag(lam)
    t = np.zeros((m, len(basis)), dtype=complex)
    retained = np.zeros((m, len(basis)), dtype=bool)
    retained[:, basis.degree_slice(1)] = np.eye(m, dtype=bool)

    for k in range(2, M + 1):
        W = PolynomialMap(identity + t, basis)
        N = PolynomialMap(n, basis)
        F = Rt.compose(W, max_degree=k).degree_part(k).to_basis(basis)
        if kind == "flow":
            G = W.derivative_product(N, max_degree=k)
        else:
            G = W.compose(N, max_degree=k)
        G = G.degree_part(k).to_basis(basis)
        rhs = F.coefficients - G.coefficients

        s = basis.degree_slice(k)
        for i in range(s.start, s.stop):
            alpha = basis.exponents[i]
            for j in range(m):
                delta = alpha @ mu - mu[j]
                if kind == "map":
                    # Multipliers only see the frequency modulo 2 pi / dt.
                    delta = delta.real + 1j * _principal_frequency(
                        delta.imag, dt
                    )
                if resonance_rule == "frequency":
                    measure = abs(delta.imag)
                else:
                    measure = abs(delta)
                if measure < resonance_tolerance * mu_scale:
                    n[j, i] = rhs[j, i]
                    retained[j, i] = True
                    continue
                if kind == "flow":
                    denominator = alpha @ lam - lam[j]
                else:
                    denominator = np.prod(lam ** alpha) - lam[j]
                if abs(denominator) <= singularity_tolerance * d_scale:
                    raise errors.ResonanceSingularityError(
                        j, alpha, k, denominator
                    )
                t[j, i] = rhs[j, i] / denominator

    # Formal inverse s of w = id + t, from (id + s)(w(z)) = z.
    W = PolynomialMap(identity + t, basis)
    s = np.zeros_like(t)
    for k in range(2, M + 1):
        lower = PolynomialMap(s, basis)
        composed = lower.compose(W, max_degree=k).degree_part(k)
        sl = basis.degree_slice(k)
        s[:, sl] = -t[:, sl] - composed.to_basis(basis).coefficients[:, sl]
    S = PolynomialMap(identity + s, basis)
    T_inverse = S.compose(PolynomialMap.from_linear(Phi_inv, M))

    return NormalForm(
        kind, dt, lam, Phi,
        N=PolynomialMap(n, basis),
        T=Phi @ W,
        T_inverse=T_inverse.to_basis(basis),
        retained=retained,
    )
