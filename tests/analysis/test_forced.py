# analysis/test_forced.py
"""Tests for analysis._forced."""

import pytest
import numpy as np
import matplotlib.pyplot as plt

import ssmfit


def test_forced_response_validation(hardening):
    """Invalid sweep parameters."""
    with pytest.raises(ValueError) as ex:
        ssmfit.analysis.forced_response(hardening, 0.01, (1.1, 0.9))
    assert ex.value.args[0] == "frequency_span must be increasing"

    with pytest.raises(ValueError) as ex:
        ssmfit.analysis.forced_response(hardening, 0.01, (0.9, 1.1), 1)
    assert ex.value.args[0] == "num_frequencies must be at least 2"

    with pytest.raises(ValueError) as ex:
        ssmfit.analysis.forced_response(hardening, [0.01, 0], (0.9, 1.1))
    assert ex.value.args[0] == "forcing amplitudes must be positive"


def test_forced_response_linear():
    """A linear oscillator has one stable steady state per frequency."""
    polar = ssmfit.analysis.PolarNormalForm([-0.01 + 1j])
    f = 1e-3
    results = ssmfit.analysis.forced_response(polar, [f, 2 * f], (0.9, 1.1),
                                              201)
    assert len(results) == 2
    frc = results[0]
    assert frc.forcing == f
    assert len(frc) == 201
    assert frc.stable.all()
    assert frc.physical_amplitude is None
    expected = f / np.sqrt(0.01**2 + (frc.frequency - 1)**2)
    assert np.allclose(frc.amplitude, expected)
    assert np.allclose(results[1].amplitude, 2 * expected)

    # Zero phase at resonance, opposite signs on either side.
    mid = np.argmin(np.abs(frc.frequency - 1))
    assert np.isclose(frc.phase[mid], 0, atol=1e-8)
    assert np.all(frc.phase[frc.frequency > 1.001] < 0)
    assert np.all(frc.phase[frc.frequency < 0.999] > 0)


def test_forced_response_folds(hardening):
    """A hardening response curve bends over and the middle branch between
    the folds is unstable.
    """
    f = 0.005
    # Upper branch of the response curve, parametrized by amplitude.
    rho = np.linspace(0.05, 0.4999, 20000)
    upper = hardening.frequency(rho) + np.sqrt(f**2 / rho**2 - 0.01**2)
    interior = (np.diff(np.sign(np.diff(upper))) != 0).nonzero()[0] + 1
    assert interior.size == 2
    fold_low, fold_high = np.sort(upper[interior])

    span = (0.98, 1.05)
    num_frequencies = 2001
    step = (span[1] - span[0]) / (num_frequencies - 1)
    frc = ssmfit.analysis.forced_response(hardening, f, span,
                                          num_frequencies)[0]
    assert str(frc).startswith("ForcedResponse (forcing 5.0000e-03): ")

    unstable = frc.frequency[~frc.stable]
    assert unstable.size > 0
    assert np.all(unstable > fold_low - step)
    assert np.all(unstable < fold_high + step)
    # At most one unstable state per frequency.
    assert np.unique(unstable).size == unstable.size
    # The unstable branch reaches both folds.
    width = fold_high - fold_low
    assert unstable.min() < fold_low + 0.1 * width
    assert unstable.max() > fold_high - 0.1 * width

    # Three coexisting states inside the fold interval, one outside.
    counts = {Omega: np.count_nonzero(frc.frequency == Omega)
              for Omega in np.unique(frc.frequency)}
    inside = (fold_low + 0.1 * width + fold_high - 0.1 * width) / 2
    nearest = min(counts, key=lambda Omega: abs(Omega - inside))
    assert counts[nearest] == 3
    assert counts[span[0]] == 1
    assert counts[span[1]] == 1

    # Every steady state satisfies the amplitude equation.
    detune = frc.frequency - hardening.frequency(frc.amplitude)
    residual = frc.amplitude**2 * (0.01**2 + detune**2) - f**2
    assert np.allclose(residual, 0, atol=1e-12)

    bounded = ssmfit.analysis.forced_response(hardening, f, span,
                                              num_frequencies,
                                              max_amplitude=0.2)[0]
    assert bounded.amplitude.max() <= 0.2
    assert len(bounded) < len(frc)

    plt.ion()
    ax = frc.plot()
    assert len(ax.lines) == 2
    assert ax.get_xlabel() == "Forcing frequency"
    plt.close("all")


def test_forced_response_physical(duffing_normal_form):
    """Physical amplitudes along the response curve."""
    manifold = ssmfit.manifold.ManifoldParametrization(np.eye(2))
    frc = ssmfit.analysis.forced_response(
        duffing_normal_form, 1e-4, (0.95, 1.05), 21, manifold=manifold,
        num_phases=32, verbose=False,
    )[0]
    assert frc.physical_amplitude.shape == frc.amplitude.shape
    assert np.all(frc.physical_amplitude > 0)

    with pytest.raises(AttributeError) as ex:
        ssmfit.analysis.forced_response(
            ssmfit.analysis.PolarNormalForm([-0.01 + 1j]), 1e-4,
            (0.95, 1.05), 21, manifold=manifold,
        )
    assert ex.value.args[0] == "normal_form not set"


def test_calibrate_forcing(hardening):
    """The calibrated response passes through the requested point."""
    with pytest.raises(ValueError) as ex:
        ssmfit.analysis.calibrate_forcing(hardening, 1.0, 0)
    assert ex.value.args[0] == "amplitude must be positive"

    f = ssmfit.analysis.calibrate_forcing(hardening, 1.0, 0.1)
    assert np.isclose(f, 0.1 * np.sqrt(0.01**2 + 0.001**2))

    frc = ssmfit.analysis.forced_response(hardening, f, (1.0, 1.01), 2)[0]
    at_target = frc.amplitude[frc.frequency == 1.0]
    assert np.any(np.isclose(at_target, 0.1))
