# utils/_requires.py
"""Guard for methods that only make sense after fitting."""

__all__ = [
    "requires",
]

import functools


def requires(attr: str, message: str = None) -> callable:
    """Wrap a method so it raises if ``attr`` is missing or ``None``.

    Parameters
    ----------
    attr : str
        Name of the required attribute.
    message : str or None
        Message of the ``AttributeError``. Defaults to
        ``"required attribute '<attr>' not set"``.
    """
    if message is None:
        message = f"required attribute '{attr}' not set"

    def _wrapper(func):
        @functools.wraps(func)
        def _decorator(self, *args, **kwargs):
            if getattr(self, attr, None) is None:
                raise AttributeError(message)
            return func(self, *args, **kwargs)

        return _decorator

    return _wrapper
