# analysis/_backbone.py
"""Polar amplitude equations and backbone curves of two-dimensional normal
forms.
"""

__all__ = [
    "PolarNormalForm",
    "polar_normal_form",
    "BackboneCurves",
    "backbone_curves",
]

import numpy as np
import numpy.polynomial.polynomial as nppoly
import matplotlib.pyplot as plt

from .. import errors, utils
from ..dynamics import NormalForm, ReducedDynamics


class PolarNormalForm:
    r"""Amplitude-dependent growth rate and frequency of a one-mode normal
    form.

    In polar coordinates :math:`z = \rho e^{i\theta}` the leading-order
    amplitude equations read
    :math:`\dot{\rho} = \alpha(\rho)\rho`,
    :math:`\dot{\theta} = \omega(\rho)`, with

    .. math::
       \alpha(\rho) + i\omega(\rho) = \sum_{k=0}^{K} c_k \rho^{2k}.

    Parameters
    ----------
    coefficients : (K + 1,) complex ndarray
        Coefficients :math:`c_k` of the complex rate as a polynomial in
        :math:`u = \rho^2`.
    normal_form : ssmfit.dynamics.NormalForm or None
        Normal form the coefficients were extracted from. Required for
        physical amplitudes.
    """

    def __init__(self, coefficients, normal_form=None):
        coefficients = np.atleast_1d(np.asarray(coefficients, dtype=complex))
        if coefficients.ndim != 1:
            raise ValueError("coefficients must be one-dimensional")
        self.__c = coefficients
        self.__c.flags.writeable = False
        self.normal_form = normal_form

    @property
    def coefficients(self) -> np.ndarray:
        return self.__c

    @property
    def growth_coefficients(self) -> np.ndarray:
        """Real coefficients of :math:`\\alpha` in powers of
        :math:`\\rho^2`.
        """
        return self.__c.real

    @property
    def frequency_coefficients(self) -> np.ndarray:
        """Real coefficients of :math:`\\omega` in powers of
        :math:`\\rho^2`.
        """
        return self.__c.imag

    def __str__(self) -> str:
        terms = " + ".join(
            f"({c:.4g})rho^{2 * k}" for k, c in enumerate(self.__c)
        )
        return f"PolarNormalForm: alpha + i omega = {terms}"

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Amplitude functions -----------------------------------------------------
    def growth_rate(self, amplitude):
        r"""Instantaneous growth rate :math:`\alpha(\rho)`."""
        u = np.asarray(amplitude, dtype=float) ** 2
        return nppoly.polyval(u, self.growth_coefficients)

    def frequency(self, amplitude):
        r"""Instantaneous frequency :math:`\omega(\rho)`."""
        u = np.asarray(amplitude, dtype=float) ** 2
        return nppoly.polyval(u, self.frequency_coefficients)

    def damping(self, amplitude):
        r"""Instantaneous damping :math:`-\alpha(\rho)`."""
        return -self.growth_rate(amplitude)

    def damping_ratio(self, amplitude):
        r"""Instantaneous damping ratio :math:`-\alpha(\rho)/\omega(\rho)`."""
        return self.damping(amplitude) / self.frequency(amplitude)

    def growth_rate_derivative(self, amplitude):
        r""":math:`d\alpha/d\rho`."""
        rho = np.asarray(amplitude, dtype=float)
        der = nppoly.polyder(self.growth_coefficients)
        return 2 * rho * nppoly.polyval(rho**2, der)

    def frequency_derivative(self, amplitude):
        r""":math:`d\omega/d\rho`."""
        rho = np.asarray(amplitude, dtype=float)
        der = nppoly.polyder(self.frequency_coefficients)
        return 2 * rho * nppoly.polyval(rho**2, der)

    def physical_amplitude(self, manifold, amplitude, output_index=0,
                           num_phases=128):
        r"""Largest magnitude of one observable over the periodic orbit of
        normal form amplitude :math:`\rho`,
        :math:`\max_{\theta}|\mathbf{e}^{\mathsf{T}}\mathbf{W}(
        \operatorname{Re}\mathbf{T}(\rho e^{i\theta}, \rho e^{-i\theta}))|`.
        """
        if self.normal_form is None:
            raise AttributeError("normal_form not set")
        if not 0 <= output_index < manifold.observable_dimension:
            raise errors.DimensionMismatchError(
                f"output_index {output_index} out of range for observable "
                f"dimension {manifold.observable_dimension}"
            )
        theta = np.linspace(0, 2 * np.pi, num_phases, endpoint=False)
        phase = np.exp(1j * theta)
        amplitude = np.atleast_1d(np.asarray(amplitude, dtype=float))
        out = np.empty(amplitude.shape)
        for i, rho in enumerate(amplitude.flat):
            z = np.vstack([rho * phase, rho * np.conj(phase)])
            reduced = self.normal_form.to_reduced(z)
            out.flat[i] = np.max(np.abs(manifold.lift(reduced)[output_index]))
        return out


def _log_series(lam, gamma, dt):
    """Truncated series of log(lam + sum_k gamma_k u^k) / dt in u."""
    K = len(gamma)
    p = np.concatenate([[0], np.asarray(gamma, dtype=complex) / lam])
    series = np.zeros(K + 1, dtype=complex)
    series[0] = np.log(lam)
    for n in range(1, K + 1):
        term = nppoly.polypow(p, n)[: K + 1]
        series[: term.size] += (-1) ** (n + 1) * term / n
    return series / dt


def polar_normal_form(dynamics) -> PolarNormalForm:
    r"""Polar amplitude equation of a fitted two-dimensional normal form.

    The first normal form component :math:`\dot{z} = \lambda z +
    \sum_k \gamma_k z^{k+1}\bar{z}^k` (flows) gives :math:`c_0 = \lambda`,
    :math:`c_k = \gamma_k`. For maps, :math:`z \mapsto z(\lambda +
    \sum_k\gamma_k\rho^{2k})` per time step, so the continuous rate is the
    truncated series of :math:`\log(\lambda + \sum_k\gamma_k u^k)/\delta t`.

    Parameters
    ----------
    dynamics : ssmfit.dynamics.ReducedDynamics or ssmfit.dynamics.NormalForm
        Dynamics fitted with ``style="normalform"``, or its normal form.

    Raises
    ------
    DimensionMismatchError
        If the normal form is not two-dimensional.
    """
    if isinstance(dynamics, ReducedDynamics):
        if dynamics.style != "normalform":
            raise ValueError(
                "polar normal form requires dynamics with style='normalform'"
            )
        nf = dynamics.normal_form
    elif isinstance(dynamics, NormalForm):
        nf = dynamics
    else:
        raise TypeError("dynamics must be ReducedDynamics or NormalForm")

    if nf.dimension != 2:
        raise errors.DimensionMismatchError(
            "polar normal form requires one conjugate pair of eigenvalues, "
            f"got dimension {nf.dimension}"
        )
    lam = nf.eigenvalues[0]
    if lam.imag <= 0 or not np.isclose(nf.eigenvalues[1], np.conj(lam)):
        raise errors.DimensionMismatchError(
            "polar normal form requires one conjugate pair of eigenvalues"
        )

    K = (nf.N.max_degree - 1) // 2
    gamma = [nf.N.coefficient(0, (k + 1, k)) for k in range(1, K + 1)]
    if nf.kind == "flow":
        coefficients = np.concatenate([[lam], gamma])
    else:
        coefficients = _log_series(lam, gamma, nf.dt)
    return PolarNormalForm(coefficients, nf)


class BackboneCurves:
    """Sampled backbone curves.

    Attributes
    ----------
    amplitude : (n,) ndarray
        Normal form amplitudes.
    frequency : (n,) ndarray
        Instantaneous frequency (rad per unit time).
    damping : (n,) ndarray
        Instantaneous damping (negative growth rate).
    damping_ratio : (n,) ndarray
        Damping divided by frequency.
    physical_amplitude : (n,) ndarray or None
        Observable amplitude of the corresponding periodic orbits.
    """

    def __init__(self, amplitude, frequency, damping,
                 physical_amplitude=None):
        self.amplitude = np.asarray(amplitude)
        self.frequency = np.asarray(frequency)
        self.damping = np.asarray(damping)
        self.damping_ratio = self.damping / self.frequency
        self.physical_amplitude = physical_amplitude

    def __len__(self) -> int:
        return self.amplitude.size

    def plot(self, ax=None, physical=True, **kwargs):
        """Plot the frequency backbone against amplitude.

        Parameters
        ----------
        ax : plt.Axes or None
            Matplotlib Axes to plot on. If ``None``, a new figure is created.
        physical : bool
            If ``True`` and physical amplitudes are available, use them on
            the vertical axis.
        kwargs : dict
            Other keyword arguments to pass to ``plt.plot()``.

        Returns
        -------
        ax : plt.Axes
            Matplotlib Axes for the plot.
        """
        if ax is None:
            ax = plt.figure().add_subplot(111)
        amplitude = self.amplitude
        if physical and self.physical_amplitude is not None:
            amplitude = self.physical_amplitude
        ax.plot(self.frequency, amplitude, **kwargs)
        ax.set_xlabel("Frequency")
        ax.set_ylabel("Amplitude")
        return ax


def backbone_curves(
    dynamics,
    manifold=None,
    amplitudes=None,
    output_index: int = 0,
    num_phases: int = 128,
) -> BackboneCurves:
    """Sample the backbone curves of fitted dynamics.

    Parameters
    ----------
    dynamics : ReducedDynamics, NormalForm, or PolarNormalForm
        Two-dimensional normal form dynamics.
    manifold : ssmfit.manifold.ManifoldParametrization or None
        If given, also compute physical amplitudes of ``output_index``.
    amplitudes : (n,) ndarray
        Normal form amplitudes at which to sample.
    output_index : int
        Observable whose amplitude is reported.
    num_phases : int
        Number of phase samples per periodic orbit.
    """
    if amplitudes is None:
        raise ValueError("amplitudes required")
    amplitudes = np.asarray(amplitudes, dtype=float)
    if amplitudes.ndim != 1 or np.any(amplitudes < 0):
        raise ValueError("amplitudes must be a nonnegative 1D array")
    polar = dynamics
    if not isinstance(dynamics, PolarNormalForm):
        polar = polar_normal_form(dynamics)

    physical = None
    if manifold is not None:
        physical = polar.physical_amplitude(
            manifold, amplitudes, output_index, num_phases
        )
    return BackboneCurves(
        amplitudes,
        polar.frequency(amplitudes),
        polar.damping(amplitudes),
        physical,
    )
