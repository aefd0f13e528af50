# polynomial/_basis.py
"""Monomial bases with a fixed, memoized term ordering."""

__all__ = [
    "MonomialBasis",
    "monomial_basis",
]

import functools
import itertools
import numpy as np


class MonomialBasis:
    r"""All monomials in :math:`m` variables with total degree in
    :math:`[d_{\min}, d_{\max}]`.

    Terms are ordered by total degree and, within a degree, in the order
    generated by :func:`itertools.combinations_with_replacement`, which is
    lexicographically descending in the exponent of the first variable.
    For :math:`m = 2` and degrees :math:`2` to :math:`3` the terms are

    .. math::
       q_1^2,\; q_1q_2,\; q_2^2,\; q_1^3,\; q_1^2q_2,\; q_1q_2^2,\; q_2^3.

    This is the ordering of :class:`sklearn.preprocessing.PolynomialFeatures`.
    Use :func:`monomial_basis()` to get a shared (memoized) instance.

    Parameters
    ----------
    dimension : int
        Number of variables :math:`m`.
    max_degree : int
        Largest total degree :math:`d_{\max}`.
    min_degree : int
        Smallest total degree :math:`d_{\min}` (default 1).
    """

    def __init__(self, dimension: int, max_degree: int, min_degree: int = 1):
        if dimension < 1:
            raise ValueError("dimension must be a positive integer")
        if min_degree < 0:
            raise ValueError("min_degree must be nonnegative")
        if max_degree < min_degree:
            raise ValueError("max_degree must be at least min_degree")

        self.__m = int(dimension)
        self.__dmin = int(min_degree)
        self.__dmax = int(max_degree)

        rows, starts = [], {}
        for d in range(self.__dmin, self.__dmax + 1):
            starts[d] = len(rows)
            for combo in itertools.combinations_with_replacement(
                range(self.__m), d
            ):
                rows.append(np.bincount(combo, minlength=self.__m))
        exponents = np.array(rows, dtype=int).reshape((-1, self.__m))
        exponents.flags.writeable = False
        self.__exponents = exponents
        self.__degrees = exponents.sum(axis=1)
        self.__degrees.flags.writeable = False
        self.__starts = starts
        self.__lookup = {tuple(e): i for i, e in enumerate(exponents)}

    # Properties --------------------------------------------------------------
    @property
    def dimension(self) -> int:
        """Number of variables."""
        return self.__m

    @property
    def min_degree(self) -> int:
        """Smallest total degree in the basis."""
        return self.__dmin

    @property
    def max_degree(self) -> int:
        """Largest total degree in the basis."""
        return self.__dmax

    @property
    def exponents(self) -> np.ndarray:
        """(n_terms, dimension) read-only array of monomial exponents."""
        return self.__exponents

    @property
    def degrees(self) -> np.ndarray:
        """(n_terms,) total degree of each monomial."""
        return self.__degrees

    def __len__(self) -> int:
        return self.__exponents.shape[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, MonomialBasis):
            return False
        return (
            self.dimension == other.dimension
            and self.min_degree == other.min_degree
            and self.max_degree == other.max_degree
        )

    def __hash__(self):
        return hash((self.dimension, self.min_degree, self.max_degree))

    def __contains__(self, exponent) -> bool:
        return tuple(int(e) for e in exponent) in self.__lookup

    def __str__(self) -> str:
        return (
            f"MonomialBasis: {self.dimension} variables, "
            f"degrees {self.min_degree}-{self.max_degree} "
            f"({len(self)} terms)"
        )

    def __repr__(self) -> str:
        return (
            f"MonomialBasis({self.dimension}, {self.max_degree}, "
            f"min_degree={self.min_degree})"
        )

    # Lookup ------------------------------------------------------------------
    def index(self, exponent) -> int:
        """Position of the monomial with the given exponent."""
        key = tuple(int(e) for e in exponent)
        try:
            return self.__lookup[key]
        except KeyError:
            raise KeyError(f"exponent {key} not in {self}") from None

    def degree_slice(self, degree: int) -> slice:
        """Slice selecting all monomials of the given total degree."""
        if not self.min_degree <= degree <= self.max_degree:
            return slice(0, 0)
        start = self.__starts[degree]
        stop = self.__starts.get(degree + 1, len(self))
        return slice(start, stop)

    # Evaluation --------------------------------------------------------------
    def evaluate(self, x: np.ndarray) -> np.ndarray:
        """Evaluate every monomial at the given point(s).

        Parameters
        ----------
        x : (dimension,) or (dimension, k) ndarray
            Point or points (one per column), real or complex.

        Returns
        -------
        (n_terms,) or (n_terms, k) ndarray
            Monomial values, ``phi[i, j]`` is term ``i`` at point ``j``.
        """
        x = np.asarray(x)
        one_point = x.ndim == 1
        if one_point:
            x = x.reshape((-1, 1))
        if x.ndim != 2 or x.shape[0] != self.dimension:
            raise ValueError(
                f"x must have {self.dimension} rows (got shape {x.shape})"
            )

        # Build the monomials degree by degree: each term is a parent term
        # of one degree lower times a single variable.
        values = np.empty((len(self), x.shape[1]), dtype=x.dtype)
        if np.issubdtype(values.dtype, np.integer):
            values = values.astype(float)
        for i, (parent, var) in enumerate(_parents(self)):
            if parent is None:
                values[i] = np.prod(x ** self.exponents[i][:, None], axis=0)
            else:
                values[i] = values[parent] * x[var]
        return values[:, 0] if one_point else values


@functools.lru_cache(maxsize=None)
def monomial_basis(
    dimension: int,
    max_degree: int,
    min_degree: int = 1,
) -> MonomialBasis:
    """Return the shared :class:`MonomialBasis` for these parameters."""
    return MonomialBasis(dimension, max_degree, min_degree)


@functools.lru_cache(maxsize=None)
def _parents(basis: MonomialBasis) -> tuple:
    """For each term, the index of a term in the same basis that divides it
    by a single variable, and that variable (``(None, None)`` if the
    quotient is not in the basis).
    """
    out = []
    for exponent in basis.exponents:
        nonzero = np.flatnonzero(exponent)
        if nonzero.size == 0:
            out.append((None, None))
            continue
        var = int(nonzero[-1])
        quotient = exponent.copy()
        quotient[var] -= 1
        if quotient in basis:
            out.append((basis.index(quotient), var))
        else:
            out.append((None, None))
    return tuple(out)
