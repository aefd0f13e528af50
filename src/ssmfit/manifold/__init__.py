# manifold/__init__.py
"""Invariant manifold parametrizations and their fitting."""

from ._parametrization import *
from ._fit import *
