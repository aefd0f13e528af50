# dynamics/__init__.py
"""Reduced dynamics on the manifold: polynomial maps and flows, modal and
normal form coordinates.
"""

from ._normalform import *
from ._model import *
from ._fit import *
