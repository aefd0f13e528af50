# analysis/__init__.py
"""Spectra, backbone curves, and forced responses of fitted reduced models."""

from ._eigenvalues import *
from ._backbone import *
from ._forced import *
