# roms/__init__.py
"""Complete data-driven SSM reduced-order modeling workflow."""

from ._ssmrom import *
