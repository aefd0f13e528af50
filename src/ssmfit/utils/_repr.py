# utils/_repr.py
"""Canonical string representation for pipeline objects."""

__all__ = [
    "str2repr",
]


def str2repr(obj) -> str:
    """Unique ID followed by the ``__str__()`` text of ``obj``."""
    return f"<{obj.__class__.__name__} object at {hex(id(obj))}>\n{obj}"
