# systems/__init__.py
"""Adapters for full-order example systems and trajectory generation."""

from ._integrate import *
from ._mechanical import *
