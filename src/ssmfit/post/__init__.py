# post/__init__.py
"""Reconstruction of trajectories with fitted models and error metrics."""

from ._errors import *
from ._reconstruction import *
