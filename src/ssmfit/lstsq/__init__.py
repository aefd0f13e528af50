# lstsq/__init__.py
"""Solvers for the weighted polynomial regression problems."""

from ._base import *
from ._tikhonov import *
