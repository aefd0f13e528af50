# analysis/_forced.py
"""Forced response curves from the polar normal form."""

__all__ = [
    "ForcedResponse",
    "forced_response",
    "calibrate_forcing",
]

import numpy as np
import numpy.polynomial.polynomial as nppoly
import matplotlib.pyplot as plt

from .. import utils
from ._backbone import PolarNormalForm, polar_normal_form


class ForcedResponse:
    """Steady states of the harmonically forced normal form at one forcing
    amplitude. Each entry is one steady state; frequencies repeat where the
    response curve folds over.

    Attributes
    ----------
    forcing : float
        Normal form forcing amplitude.
    frequency : (n,) ndarray
        Forcing frequencies.
    amplitude : (n,) ndarray
        Normal form response amplitudes.
    phase : (n,) ndarray
        Phase lag of the response behind the forcing.
    stable : (n,) bool ndarray
        Linear stability of each steady state.
    physical_amplitude : (n,) ndarray or None
        Observable amplitude of each steady state.
    """

    def __init__(self, forcing, frequency, amplitude, phase, stable,
                 physical_amplitude=None):
        self.forcing = float(forcing)
        self.frequency = np.asarray(frequency, dtype=float)
        self.amplitude = np.asarray(amplitude, dtype=float)
        self.phase = np.asarray(phase, dtype=float)
        self.stable = np.asarray(stable, dtype=bool)
        self.physical_amplitude = physical_amplitude

    def __len__(self) -> int:
        return self.frequency.size

    def __str__(self) -> str:
        return (
            f"ForcedResponse (forcing {self.forcing:.4e}): "
            f"{len(self)} steady states, {np.count_nonzero(~self.stable)} "
            "unstable"
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def plot(self, ax=None, physical=True, **kwargs):
        """Plot stable (dots) and unstable (crosses) steady states.

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
        kwargs.setdefault("color", "C0")
        ax.plot(self.frequency[self.stable], amplitude[self.stable], ".",
                **kwargs)
        ax.plot(self.frequency[~self.stable], amplitude[~self.stable], "x",
                **kwargs)
        ax.set_xlabel("Forcing frequency")
        ax.set_ylabel("Amplitude")
        return ax


def _polar(dynamics):
    if isinstance(dynamics, PolarNormalForm):
        return dynamics
    return polar_normal_form(dynamics)


def _steady_states(polar, forcing, Omega, max_amplitude):
    r"""Positive roots of
    :math:`u(a(u)^2 + (\Omega - w(u))^2) - f^2` with :math:`u = \rho^2`.
    """
    a = polar.growth_coefficients
    d = -polar.frequency_coefficients
    d[0] += Omega
    poly = nppoly.polymulx(
        nppoly.polyadd(nppoly.polymul(a, a), nppoly.polymul(d, d))
    )
    poly = nppoly.polysub(poly, [forcing**2])
    roots = nppoly.polyroots(poly)
    keep = (np.abs(roots.imag) <= 1e-8 * (1 + np.abs(roots))) \
        & (roots.real > 0)
    rho = np.sort(np.sqrt(roots[keep].real))
    if max_amplitude is not None:
        rho = rho[rho <= max_amplitude]
    return rho


def _stability(polar, rho, Omega, forcing):
    r"""Phase lag and stability of steady states of

    .. math::
       \dot{\rho} = \alpha(\rho)\rho + f\cos\psi, \qquad
       \dot{\psi} = \omega(\rho) - \Omega - \frac{f}{\rho}\sin\psi.
    """
    alpha = polar.growth_rate(rho)
    detune = polar.frequency(rho) - Omega
    psi = np.arctan2(detune * rho / forcing, -alpha * rho / forcing)
    dalpha = polar.growth_rate_derivative(rho)
    domega = polar.frequency_derivative(rho)
    j11 = alpha + rho * dalpha
    j12 = -detune * rho
    j21 = domega + detune / rho
    j22 = alpha
    trace = j11 + j22
    det = j11 * j22 - j12 * j21
    return psi, (trace < 0) & (det > 0)


def forced_response(
    dynamics,
    forcing_amplitudes,
    frequency_span,
    num_frequencies: int = 400,
    manifold=None,
    output_index: int = 0,
    max_amplitude: float = None,
    num_phases: int = 128,
    verbose: bool = False,
) -> list:
    r"""Forced response curves of the normal form forced at one frequency,

    .. math::
       \dot{z} = (\alpha(|z|) + i\omega(|z|))z + f e^{i\Omega t}.

    Steady states :math:`z = \rho e^{i(\Omega t - \psi)}` satisfy
    :math:`\rho^2[\alpha(\rho)^2 + (\Omega - \omega(\rho))^2] = f^2`, a
    polynomial equation in :math:`\rho^2` that is solved at each forcing
    frequency. Stability follows from the Jacobian of the polar amplitude
    and phase equations: a steady state is stable if the trace is negative
    and the determinant is positive. The determinant changes sign exactly
    at the folds of the response curve.

    Parameters
    ----------
    dynamics : ReducedDynamics, NormalForm, or PolarNormalForm
        Two-dimensional normal form dynamics.
    forcing_amplitudes : float or (n_f,) ndarray
        Normal form forcing amplitudes :math:`f`.
    frequency_span : (2,) tuple
        Lower and upper forcing frequency.
    num_frequencies : int
        Number of forcing frequencies in the sweep.
    manifold : ssmfit.manifold.ManifoldParametrization or None
        If given, also compute physical amplitudes of ``output_index``.
    output_index : int
        Observable whose amplitude is reported.
    max_amplitude : float or None
        Discard steady states with larger normal form amplitude (outside
        the domain of validity of the truncated model).
    num_phases : int
        Number of phase samples per periodic orbit for physical amplitudes.
    verbose : bool
        If ``True``, print timing messages.

    Returns
    -------
    list of ForcedResponse
        One result per forcing amplitude.
    """
    lower, upper = frequency_span
    if not lower < upper:
        raise ValueError("frequency_span must be increasing")
    if num_frequencies < 2:
        raise ValueError("num_frequencies must be at least 2")
    forcings = np.atleast_1d(np.asarray(forcing_amplitudes, dtype=float))
    if forcings.ndim != 1 or np.any(forcings <= 0):
        raise ValueError("forcing amplitudes must be positive")
    polar = _polar(dynamics)
    frequencies = np.linspace(lower, upper, num_frequencies)

    results = []
    with utils.TimedBlock(
        f"Computing {forcings.size} forced response curve(s) over "
        f"{num_frequencies} frequencies",
        verbose=verbose,
    ):
        for f in forcings:
            freq, rho = [], []
            for Omega in frequencies:
                roots = _steady_states(polar, f, Omega, max_amplitude)
                freq.append(np.full(roots.size, Omega))
                rho.append(roots)
            freq, rho = np.concatenate(freq), np.concatenate(rho)
            psi, stable = _stability(polar, rho, freq, f)
            physical = None
            if manifold is not None:
                physical = polar.physical_amplitude(
                    manifold, rho, output_index, num_phases
                )
            results.append(ForcedResponse(f, freq, rho, psi, stable,
                                          physical))
    return results


def calibrate_forcing(dynamics, frequency, amplitude) -> float:
    r"""Normal form forcing amplitude :math:`f` for which the forced
    response passes through a given (frequency, normal form amplitude)
    point, :math:`f = \rho\sqrt{\alpha(\rho)^2 + (\Omega-\omega(\rho))^2}`.
    """
    if amplitude <= 0:
        raise ValueError("amplitude must be positive")
    polar = _polar(dynamics)
    alpha = polar.growth_rate(amplitude)
    detune = frequency - polar.frequency(amplitude)
    return float(amplitude * np.sqrt(alpha**2 + detune**2))
