# pre/_slicing.py
"""Restrict trajectories to a time window or drop initial transients."""

__all__ = [
    "slice_trajectories",
    "truncate_trajectories",
]

import numpy as np


def slice_trajectories(trajectories, interval):
    """Keep the samples with ``interval[0] <= t <= interval[1]``.

    Parameters
    ----------
    trajectories : TrajectorySet
        Trajectories to slice.
    interval : (float, float)
        Closed time window, absolute times. Either end may be ``None``.

    Returns
    -------
    TrajectorySet
        Sliced trajectories with the same indices and partition.
    """
    t0, t1 = interval
    t0 = -np.inf if t0 is None else t0
    t1 = np.inf if t1 is None else t1
    if t1 < t0:
        raise ValueError("interval must satisfy interval[0] <= interval[1]")

    def _slice(traj):
        mask = (traj.time >= t0) & (traj.time <= t1)
        if not np.any(mask):
            raise ValueError(
                f"no samples of trajectory {traj.index} in [{t0}, {t1}]"
            )
        return traj.samples(mask)

    return trajectories.map(_slice)


def truncate_trajectories(trajectories, cutoff: int):
    """Drop the first ``cutoff`` samples of every trajectory.

    Parameters
    ----------
    trajectories : TrajectorySet
        Trajectories to truncate.
    cutoff : int
        Number of leading samples to discard.

    Returns
    -------
    TrajectorySet
        Truncated trajectories with the same indices and partition.
    """
    if cutoff < 0:
        raise ValueError("cutoff must be nonnegative")
    cutoff = int(cutoff)

    def _truncate(traj):
        if cutoff >= traj.num_samples:
            raise ValueError(
                f"cutoff {cutoff} removes every sample of "
                f"trajectory {traj.index}"
            )
        return traj.samples(slice(cutoff, None))

    return trajectories.map(_truncate)
