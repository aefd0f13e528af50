r"""Miscellaneous utility functions."""


from ._hdf5 import *
from ._repr import *
from ._requires import *
from ._timer import *
