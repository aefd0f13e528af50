# utils/_timer.py
"""Timing and logging of pipeline stages."""

__all__ = [
    "TimedBlock",
]

import os
import time
import logging


logger = logging.getLogger("ssmfit")


class TimedBlock:
    """Context manager that times one stage of the pipeline.

    Each stage is logged at ``INFO`` level on the ``"ssmfit"`` logger,
    together with any results recorded through :meth:`note()`. Failures are
    logged at ``ERROR`` level and re-raised. Messages are printed to the
    screen only when ``verbose`` is ``True``.

    Parameters
    ----------
    message : str
        Name of the stage.
    verbose : bool or None
        If ``True``, print the message and the elapsed time. If ``None``
        (default), use the class attribute :attr:`TimedBlock.verbose`.

    Examples
    --------
    >>> with ssmfit.utils.TimedBlock("Fitting manifold", True) as block:
    ...     manifold = fitter.fit(trajectories)
    ...     block.note(f"rrms {manifold.rrms:.2e}")
    Fitting manifold...done in 1.38 s (rrms 3.12e-04).

    >>> ssmfit.utils.TimedBlock.add_logfile("ssm.log")
    Logging to '/path/to/current/folder/ssm.log'
    """

    verbose = False
    formatter = logging.Formatter(
        fmt="%(asctime)s  %(name)s %(levelname)s:\t%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    def __init__(self, message: str = "Running stage", verbose=None):
        self.message = message.rstrip()
        self.__verbose = self.verbose if verbose is None else bool(verbose)
        self.__elapsed = None
        self.__notes = []

    @property
    def elapsed(self):
        """Wall time (in seconds) of the completed stage, else ``None``."""
        return self.__elapsed

    @property
    def notes(self) -> list:
        """Results recorded during the stage."""
        return list(self.__notes)

    def note(self, text: str):
        """Record a result to report when the stage completes."""
        self.__notes.append(str(text))

    def __enter__(self):
        if self.__verbose:
            print(f"{self.message}...", end="", flush=True)
        logger.debug("%s started", self.message)
        self._tic = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        elapsed = time.perf_counter() - self._tic
        if exc_type:
            if self.__verbose:
                print(f"{exc_type.__name__}: {exc_value}")
            logger.error(
                "%s failed after %.6f s (%s) %s",
                self.message, elapsed, exc_type.__name__, exc_value,
            )
            raise
        suffix = f" ({', '.join(self.__notes)})" if self.__notes else ""
        if self.__verbose:
            print(f"done in {elapsed:.2f} s{suffix}.", flush=True)
        logger.info("%s...done in %.6f s%s.", self.message, elapsed, suffix)
        self.__elapsed = elapsed

    @classmethod
    def add_logfile(cls, logfile: str = "ssmfit.log") -> None:
        """Also write the ``"ssmfit"`` log to ``logfile`` (appending).

        Adding the same file twice has no effect.
        """
        logpath = os.path.abspath(logfile)
        for handler in logger.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and os.path.abspath(handler.baseFilename) == logpath
            ):
                if cls.verbose:
                    print(f"Already logging to {logpath}")
                return

        newhandler = logging.FileHandler(logpath, "a")
        newhandler.setFormatter(cls.formatter)
        newhandler.setLevel(logging.INFO)
        logger.setLevel(logging.INFO)
        logger.addHandler(newhandler)
        if cls.verbose:
            print(f"Logging to '{logpath}'")
