# ddt/__init__.py
"""Finite difference estimates of time derivatives of trajectory data."""

from ._finite_difference import *
