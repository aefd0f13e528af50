# errors.py
"""Custom exception classes."""


class DimensionMismatchError(ValueError):  # pragma: no cover
    """Dimension of data not aligned with previous pipeline information."""

    pass


class InsufficientLengthError(ValueError):  # pragma: no cover
    """Trajectory too short for the requested delay embedding."""

    pass


class InsufficientDataError(ValueError):  # pragma: no cover
    """Fewer distinct samples than free coefficients in a regression."""

    pass


class FitDivergenceError(RuntimeError):
    """Optimizer exhausted its iteration budget without converging.

    Parameters
    ----------
    message : str
        Description of the failure.
    best : object
        Last-best iterate of the optimizer (for example, a tuple of
        coefficient matrices).
    residual : float
        Norm of the residual at ``best``.
    """

    def __init__(self, message, best=None, residual=None):
        RuntimeError.__init__(self, message)
        self.best = best
        self.residual = residual


class ResonanceSingularityError(ArithmeticError):
    """Normal form denominator vanishes for a term classified non-resonant.

    Parameters
    ----------
    component : int
        Index of the normal form coordinate.
    exponent : tuple of ints
        Exponent of the offending monomial.
    degree : int
        Degree currently being solved.
    denominator : complex
        Value of the (nearly) vanishing denominator.
    """

    def __init__(self, component, exponent, degree, denominator):
        self.component = component
        self.exponent = tuple(int(e) for e in exponent)
        self.degree = degree
        self.denominator = denominator
        ArithmeticError.__init__(
            self,
            f"near-singular denominator |{abs(denominator):.2e}| for "
            f"non-resonant term {self.exponent} in component {component} "
            f"at degree {degree}",
        )


class LoadfileFormatError(Exception):  # pragma: no cover
    """File format inconsistent with a loading routine."""

    pass


class SSMWarning(UserWarning):  # pragma: no cover
    """Generic warning for package usage."""

    pass
