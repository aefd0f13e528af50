# pre/__init__.py
"""Trajectory containers and preprocessing: delay embedding, slicing,
and time weighting.
"""

from ._trajectory import *
from ._embedding import *
from ._slicing import *
from ._weighting import *
