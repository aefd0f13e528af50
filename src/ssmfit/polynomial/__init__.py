# polynomial/__init__.py
"""Monomial bases and truncated polynomial maps."""

from ._basis import *
from ._map import *
