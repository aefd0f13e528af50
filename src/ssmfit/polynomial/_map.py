# polynomial/_map.py
"""Vector-valued polynomial maps with truncated algebra."""

__all__ = [
    "PolynomialMap",
]

import functools
import numpy as np

from .. import errors, utils
from ._basis import MonomialBasis, monomial_basis


class PolynomialMap:
    r"""Polynomial map :math:`\x \mapsto \C\boldsymbol{\phi}(\x)`, where
    :math:`\boldsymbol{\phi}` is a vector of monomials
    (see :class:`MonomialBasis`) and :math:`\C` is a real or complex
    coefficient matrix with one row per output component.

    Products, compositions, and derivative products are truncated at the
    largest degree of the result's basis.

    Parameters
    ----------
    coefficients : (n_out, n_terms) ndarray
        Coefficient matrix :math:`\C`.
    basis : MonomialBasis
        Monomials the columns of ``coefficients`` refer to.
    """

    # Let numpy arrays defer to __rmatmul__ and __rmul__.
    __array_ufunc__ = None

    def __init__(self, coefficients, basis: MonomialBasis):
        if not isinstance(basis, MonomialBasis):
            raise TypeError("basis must be a MonomialBasis")
        coefficients = np.array(coefficients)
        if coefficients.ndim == 1:
            coefficients = coefficients.reshape((1, -1))
        if coefficients.ndim != 2:
            raise ValueError("coefficients must be two-dimensional")
        if coefficients.shape[1] != len(basis):
            raise errors.DimensionMismatchError(
                f"coefficients have {coefficients.shape[1]} columns, "
                f"basis has {len(basis)} terms"
            )
        if not np.iscomplexobj(coefficients):
            coefficients = coefficients.astype(float)
        coefficients.flags.writeable = False
        self.__C = coefficients
        self.__basis = basis

    # Constructors ------------------------------------------------------------
    @classmethod
    def zeros(cls, n_out, dimension, max_degree, min_degree=1, dtype=float):
        """Polynomial map with all coefficients equal to zero."""
        basis = monomial_basis(dimension, max_degree, min_degree)
        return cls(np.zeros((n_out, len(basis)), dtype=dtype), basis)

    @classmethod
    def from_linear(cls, A, max_degree=1, min_degree=1):
        """Linear map :math:`\\x \\mapsto \\A\\x` in a basis of degree
        ``max_degree``.
        """
        A = np.atleast_2d(A)
        out = cls.zeros(
            A.shape[0], A.shape[1], max_degree, min_degree, dtype=A.dtype
        )
        C = out.coefficients.copy()
        C[:, out.basis.degree_slice(1)] = A
        return cls(C, out.basis)

    @classmethod
    def identity(cls, dimension, max_degree=1, min_degree=1):
        """Identity map on ``dimension`` variables."""
        return cls.from_linear(np.eye(dimension), max_degree, min_degree)

    @classmethod
    def from_terms(cls, terms: dict, n_out, dimension, max_degree=None):
        """Build a map from a sparse ``{(row, exponent): coefficient}``
        dictionary.
        """
        if max_degree is None:
            max_degree = max(
                [sum(exponent) for _, exponent in terms] + [1]
            )
        dtype = complex if any(np.iscomplexobj(c) for c in terms.values()) \
            else float
        out = cls.zeros(n_out, dimension, max_degree, min_degree=0,
                        dtype=dtype)
        C = out.coefficients.copy()
        for (row, exponent), value in terms.items():
            if len(exponent) != dimension:
                raise errors.DimensionMismatchError(
                    f"exponent {tuple(exponent)} does not have "
                    f"{dimension} entries"
                )
            C[row, out.basis.index(exponent)] += value
        return cls(C, out.basis)

    # Properties --------------------------------------------------------------
    @property
    def coefficients(self) -> np.ndarray:
        """(n_out, n_terms) read-only coefficient matrix."""
        return self.__C

    @property
    def basis(self) -> MonomialBasis:
        """Monomial basis of the coefficient columns."""
        return self.__basis

    @property
    def dimension(self) -> int:
        """Number of input variables."""
        return self.__basis.dimension

    @property
    def output_dimension(self) -> int:
        """Number of output components."""
        return self.__C.shape[0]

    @property
    def max_degree(self) -> int:
        """Truncation degree."""
        return self.__basis.max_degree

    @property
    def shape(self) -> tuple:
        return self.__C.shape

    @property
    def real(self):
        """Map with the real parts of the coefficients."""
        return self.__class__(self.__C.real, self.__basis)

    @property
    def linear_part(self) -> np.ndarray:
        """(n_out, dimension) coefficients of the degree-one terms."""
        if self.__basis.min_degree > 1:
            return np.zeros(
                (self.output_dimension, self.dimension), dtype=self.__C.dtype
            )
        return self.__C[:, self.__basis.degree_slice(1)].copy()

    def coefficient(self, row: int, exponent) -> complex:
        """Coefficient of the monomial with the given exponent in one row."""
        if exponent not in self.__basis:
            return 0
        return self.__C[row, self.__basis.index(exponent)]

    def __str__(self) -> str:
        kind = "complex" if np.iscomplexobj(self.__C) else "real"
        return (
            f"PolynomialMap: R^{self.dimension} -> R^{self.output_dimension}"
            f", {kind}, degrees {self.__basis.min_degree}-{self.max_degree}"
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PolynomialMap):
            return False
        return self.basis == other.basis and np.array_equal(
            self.coefficients, other.coefficients
        )

    # Evaluation --------------------------------------------------------------
    def __call__(self, x):
        """Evaluate the map at a point ``(dimension,)`` or at points
        ``(dimension, k)``.
        """
        return self.__C @ self.__basis.evaluate(x)

    def jacobian(self, x) -> np.ndarray:
        """(n_out, dimension) Jacobian matrix at a single point ``x``."""
        x = np.asarray(x)
        if x.shape != (self.dimension,):
            raise ValueError(f"x must have shape ({self.dimension},)")
        return np.column_stack(
            [self.derivative(i)(x) for i in range(self.dimension)]
        )

    # Re-expression in other bases --------------------------------------------
    def to_basis(self, basis: MonomialBasis):
        """Re-express the map in another basis of the same dimension.

        Terms that are not in ``basis`` are dropped (truncation).
        """
        if basis.dimension != self.dimension:
            raise errors.DimensionMismatchError(
                "bases have different numbers of variables"
            )
        if basis == self.__basis:
            return self
        C = np.zeros((self.output_dimension, len(basis)), dtype=self.__C.dtype)
        for j, exponent in enumerate(self.__basis.exponents):
            if exponent in basis:
                C[:, basis.index(exponent)] = self.__C[:, j]
        return self.__class__(C, basis)

    def truncate(self, max_degree: int):
        """Drop all terms of degree larger than ``max_degree``."""
        dmin = min(self.__basis.min_degree, max_degree)
        return self.to_basis(
            monomial_basis(self.dimension, max_degree, dmin)
        )

    def degree_part(self, degree: int):
        """Map keeping only the terms of the given degree."""
        C = np.zeros_like(self.__C)
        s = self.__basis.degree_slice(degree)
        C[:, s] = self.__C[:, s]
        return self.__class__(C, self.__basis)

    def below(self, degree: int):
        """Map keeping only the terms of degree less than ``degree``."""
        C = self.__C.copy()
        C[:, self.__basis.degrees >= degree] = 0
        return self.__class__(C, self.__basis)

    # Arithmetic --------------------------------------------------------------
    def _common(self, other):
        if not isinstance(other, PolynomialMap):
            return NotImplemented
        if other.dimension != self.dimension:
            raise errors.DimensionMismatchError(
                "polynomial maps have different input dimensions"
            )
        if other.output_dimension != self.output_dimension:
            raise errors.DimensionMismatchError(
                "polynomial maps have different output dimensions"
            )
        basis = monomial_basis(
            self.dimension,
            max(self.max_degree, other.max_degree),
            min(self.basis.min_degree, other.basis.min_degree),
        )
        return self.to_basis(basis), other.to_basis(basis)

    def __add__(self, other):
        pair = self._common(other)
        if pair is NotImplemented:
            return NotImplemented
        a, b = pair
        return self.__class__(a.coefficients + b.coefficients, a.basis)

    def __sub__(self, other):
        pair = self._common(other)
        if pair is NotImplemented:
            return NotImplemented
        a, b = pair
        return self.__class__(a.coefficients - b.coefficients, a.basis)

    def __neg__(self):
        return self.__class__(-self.__C, self.__basis)

    def __mul__(self, scalar):
        if not np.isscalar(scalar):
            return NotImplemented
        return self.__class__(scalar * self.__C, self.__basis)

    __rmul__ = __mul__

    def __rmatmul__(self, A):
        """Left-multiply the outputs by a matrix: ``A @ pmap``."""
        A = np.atleast_2d(A)
        if A.shape[1] != self.output_dimension:
            raise errors.DimensionMismatchError(
                f"matrix with {A.shape[1]} columns cannot act on "
                f"{self.output_dimension} outputs"
            )
        return self.__class__(A @ self.__C, self.__basis)

    # Calculus ----------------------------------------------------------------
    def derivative(self, variable: int):
        """Partial derivative with respect to one input variable."""
        basis = self.__basis
        dmin = max(basis.min_degree - 1, 0)
        target = monomial_basis(self.dimension, max(basis.max_degree - 1, 0),
                                dmin)
        scales, sources, targets = _derivative_table(basis, target, variable)
        C = np.zeros(
            (self.output_dimension, len(target)), dtype=self.__C.dtype
        )
        C[:, targets] = self.__C[:, sources] * scales
        return self.__class__(C, target)

    def derivative_product(self, field, max_degree=None):
        r"""Truncated product :math:`D\mathbf{F}(\x)\,\mathbf{G}(\x)` of the
        Jacobian of this map with the vector field :math:`\mathbf{G}`.

        Parameters
        ----------
        field : PolynomialMap
            Vector field with ``dimension`` outputs on the same variables.
        max_degree : int or None
            Truncation degree; defaults to ``self.max_degree``.
        """
        if field.output_dimension != self.dimension:
            raise errors.DimensionMismatchError(
                "vector field must have one output per input variable"
            )
        if field.dimension != self.dimension:
            raise errors.DimensionMismatchError(
                "vector field must act on the same variables"
            )
        if max_degree is None:
            max_degree = self.max_degree
        basis = monomial_basis(self.dimension, max_degree, 0)
        total = np.zeros(
            (self.output_dimension, len(basis)),
            dtype=np.result_type(self.__C, field.coefficients),
        )
        for i in range(self.dimension):
            dF = self.derivative(i).to_basis(basis).coefficients
            Gi = field.to_basis(basis).coefficients[i]
            total += _product(dF, Gi[np.newaxis, :], basis)
        return self.__class__(total, basis)

    def compose(self, inner, max_degree=None):
        r"""Truncated composition :math:`\mathbf{F}(\mathbf{G}(\x))`.

        Parameters
        ----------
        inner : PolynomialMap
            Inner map :math:`\mathbf{G}` with ``self.dimension`` outputs.
        max_degree : int or None
            Truncation degree of the result; defaults to the larger of the
            two maps' degrees.
        """
        if inner.output_dimension != self.dimension:
            raise errors.DimensionMismatchError(
                f"inner map has {inner.output_dimension} outputs, "
                f"outer map expects {self.dimension} inputs"
            )
        if max_degree is None:
            max_degree = max(self.max_degree, inner.max_degree)
        basis = monomial_basis(inner.dimension, max_degree, 0)
        G = inner.to_basis(basis).coefficients
        dtype = np.result_type(self.__C, G)

        one = np.zeros(len(basis), dtype=dtype)
        one[basis.index([0] * inner.dimension)] = 1
        powers = {(0,) * self.dimension: one}

        result = np.zeros((self.output_dimension, len(basis)), dtype=dtype)
        for j, exponent in enumerate(self.__basis.exponents):
            key = tuple(int(e) for e in exponent)
            if key not in powers:
                powers[key] = _power(powers, key, G, basis)
            column = self.__C[:, j]
            if np.any(column):
                result += np.outer(column, powers[key])
        return self.__class__(result, basis)

    # Persistence -------------------------------------------------------------
    def save(self, savefile, overwrite=False):
        """Save the map to an HDF5 file (or group)."""
        with utils.hdf5_savehandle(savefile, overwrite, "PolynomialMap") as hf:
            utils.save_options(
                hf,
                dict(
                    dimension=self.dimension,
                    max_degree=self.max_degree,
                    min_degree=self.basis.min_degree,
                ),
            )
            hf.create_dataset("coefficients", data=self.__C)

    @classmethod
    def load(cls, loadfile):
        """Load a map saved with :meth:`save()`."""
        with utils.hdf5_loadhandle(loadfile, "PolynomialMap") as hf:
            meta = utils.load_options(hf)
            basis = monomial_basis(
                int(meta["dimension"]),
                int(meta["max_degree"]),
                int(meta["min_degree"]),
            )
            return cls(hf["coefficients"][:], basis)


# Helper functions ============================================================
@functools.lru_cache(maxsize=None)
def _product_table(basis: MonomialBasis):
    """Index triples ``(i, j, k)`` with ``phi_i * phi_j = phi_k`` in ``basis``
    (pairs whose product exceeds the largest degree are omitted).
    """
    left, right, target = [], [], []
    E = basis.exponents
    for i, ei in enumerate(E):
        for j, ej in enumerate(E):
            e = ei + ej
            if e in basis:
                left.append(i)
                right.append(j)
                target.append(basis.index(e))
    return np.array(left, int), np.array(right, int), np.array(target, int)


def _product(a, b, basis):
    """Truncated product of polynomials ``a`` and ``b`` row by row;
    ``a`` and ``b`` are (r, n_terms) coefficient arrays in ``basis``
    (broadcasting over rows).
    """
    left, right, target = _product_table(basis)
    contributions = a[:, left] * b[:, right]
    out = np.zeros(
        (contributions.shape[0], len(basis)), dtype=contributions.dtype
    )
    np.add.at(out.T, target, contributions.T)
    return out


def _power(powers, exponent, G, basis):
    """Compute ``G**exponent`` from a memoized lower power times one more
    factor, filling ``powers`` with any missing lower powers.
    """
    var = int(np.flatnonzero(exponent)[-1])
    parent = list(exponent)
    parent[var] -= 1
    parent = tuple(parent)
    if parent not in powers:
        powers[parent] = _power(powers, parent, G, basis)
    return _product(
        powers[parent][np.newaxis, :], G[var][np.newaxis, :], basis
    )[0]


@functools.lru_cache(maxsize=None)
def _derivative_table(source, target, variable):
    """Scale factors and column indices for one partial derivative."""
    scales, sources, targets = [], [], []
    for j, exponent in enumerate(source.exponents):
        if exponent[variable] == 0:
            continue
        reduced = exponent.copy()
        reduced[variable] -= 1
        if reduced in target:
            scales.append(exponent[variable])
            sources.append(j)
            targets.append(target.index(reduced))
    return (
        np.array(scales, dtype=float),
        np.array(sources, dtype=int),
        np.array(targets, dtype=int),
    )
