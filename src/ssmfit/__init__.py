# __init__.py
"""Data-driven reduced-order models on spectral submanifolds.

Fit a polynomial parametrization of a spectral submanifold to trajectory
data, fit polynomial (or normal form) reduced dynamics on it, and use the
result to reconstruct trajectories, backbone curves, and forced responses.
"""

__version__ = "0.1.0"

from . import (
    analysis,
    errors,
    ddt,
    dynamics,
    lstsq,
    manifold,
    polynomial,
    pre,
    post,
    roms,
    systems,
    utils,
)

from .roms import *
