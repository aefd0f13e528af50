# pre/_weighting.py
"""Time weights that suppress the transient start of each trajectory."""

__all__ = [
    "TimeWeighting",
]

import numpy as np


class TimeWeighting:
    r"""Sample weights :math:`w(t) = 1 / (1 + c_1 e^{-c_2 t})`, where
    :math:`t` is the time elapsed since the start of the trajectory.

    With :math:`c_1 = 0` every sample has unit weight. Large :math:`c_1`
    suppresses the early part of each trajectory, which is typically still
    far from the slow manifold; :math:`c_2` controls how quickly the
    weights approach one.

    Parameters
    ----------
    c1 : float
        Amplitude of the suppression (nonnegative).
    c2 : float
        Decay rate of the suppression (nonnegative).
    """

    def __init__(self, c1: float = 0, c2: float = 0):
        self.c1 = c1
        self.c2 = c2

    @property
    def c1(self) -> float:
        return self.__c1

    @c1.setter
    def c1(self, value):
        if not np.isscalar(value) or value < 0:
            raise ValueError("c1 must be a nonnegative scalar")
        self.__c1 = float(value)

    @property
    def c2(self) -> float:
        return self.__c2

    @c2.setter
    def c2(self, value):
        if not np.isscalar(value) or value < 0:
            raise ValueError("c2 must be a nonnegative scalar")
        self.__c2 = float(value)

    @property
    def is_uniform(self) -> bool:
        return self.c1 == 0

    def __str__(self) -> str:
        return f"TimeWeighting(c1={self.c1:g}, c2={self.c2:g})"

    def __call__(self, elapsed) -> np.ndarray:
        """Weights for the given elapsed times."""
        elapsed = np.asarray(elapsed, dtype=float)
        if self.is_uniform:
            return np.ones_like(elapsed)
        return 1 / (1 + self.c1 * np.exp(-self.c2 * elapsed))

    def trajectory_weights(self, trajectories, drop_last=0) -> np.ndarray:
        """Concatenated weights for every sample of every trajectory.

        Parameters
        ----------
        trajectories : TrajectorySet or iterable of Trajectory
        drop_last : int
            Number of trailing samples of each trajectory to omit (for
            example, ``1`` for the successive pairs of a discrete map).
        """
        weights = []
        for traj in trajectories:
            elapsed = traj.time - traj.time[0]
            if drop_last:
                elapsed = elapsed[:-drop_last]
            weights.append(self(elapsed))
        return np.concatenate(weights)
