# pre/_embedding.py
"""Delay embedding of observable trajectories."""

__all__ = [
    "DelayEmbedder",
    "coordinates_embedding",
]

import warnings
import numpy as np
import scipy.interpolate as interp

from .. import errors, utils
from ._trajectory import Trajectory, TrajectorySet


class DelayEmbedder:
    r"""Stack time-shifted copies of an observable so that a
    :math:`m`-dimensional manifold can be embedded.

    By Takens' theorem, :math:`2m + 1` scalar coordinates suffice to embed
    an :math:`m`-dimensional manifold generically. For a :math:`p`-dimensional
    observable the embedding stacks

    .. math::
       n_{\text{delays}} = \lceil (2m+1)/p \rceil + n_{\text{over}}

    copies, row block :math:`i` holding :math:`\y(t_k + i s\,\delta t)`,
    where :math:`s` is the shift (in samples). Observables that already have
    at least :math:`2m + 1` components are passed through unchanged unless
    ``force_embedding=True``.

    Parameters
    ----------
    manifold_dimension : int
        Dimension :math:`m` of the manifold to embed.
    over_embedding : int
        Additional delay copies :math:`n_{\text{over}}` beyond the minimum.
    force_embedding : bool
        If ``True``, delay embed even if the observable is large enough.
    shift_steps : int
        Number of samples between consecutive delay copies.
    """

    def __init__(
        self,
        manifold_dimension: int,
        over_embedding: int = 0,
        force_embedding: bool = False,
        shift_steps: int = 1,
    ):
        if manifold_dimension < 1:
            raise ValueError("manifold_dimension must be a positive integer")
        if over_embedding < 0:
            raise ValueError("over_embedding must be nonnegative")
        if shift_steps < 1:
            raise ValueError("shift_steps must be a positive integer")
        self.manifold_dimension = int(manifold_dimension)
        self.over_embedding = int(over_embedding)
        self.force_embedding = bool(force_embedding)
        self.shift_steps = int(shift_steps)

    def __str__(self) -> str:
        return "\n  ".join(
            [
                "DelayEmbedder",
                f"manifold dimension: {self.manifold_dimension}",
                f"over embedding:     {self.over_embedding}",
                f"force embedding:    {self.force_embedding}",
                f"shift (samples):    {self.shift_steps}",
            ]
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    def num_delays(self, observable_dimension: int) -> int:
        """Number of stacked copies for an observable of this dimension."""
        target = 2 * self.manifold_dimension + 1
        if observable_dimension >= target and not self.force_embedding:
            return 1
        return -(-target // observable_dimension) + self.over_embedding

    def embedding_dimension(self, observable_dimension: int) -> int:
        """Dimension of the embedded data."""
        return observable_dimension * self.num_delays(observable_dimension)

    def embed_trajectory(self, trajectory: Trajectory) -> Trajectory:
        """Delay embed a single trajectory.

        Raises
        ------
        InsufficientLengthError
            If the trajectory has fewer samples than the embedding spans.
        """
        p = trajectory.dimension
        n_delays = self.num_delays(p)
        if n_delays == 1:
            return trajectory

        span = (n_delays - 1) * self.shift_steps
        T = trajectory.num_samples
        if T < span + 1:
            raise errors.InsufficientLengthError(
                f"trajectory {trajectory.index} has {T} samples, "
                f"delay embedding needs at least {span + 1}"
            )

        if not trajectory.is_uniform:
            warnings.warn(
                f"trajectory {trajectory.index} is not uniformly sampled, "
                "resampling onto a uniform grid",
                errors.SSMWarning,
                stacklevel=2,
            )
            time = np.linspace(trajectory.time[0], trajectory.time[-1], T)
            spline = interp.CubicSpline(trajectory.time, trajectory.data,
                                        axis=1)
            trajectory = trajectory.replace(data=spline(time), time=time)

        K = T - span
        blocks = [
            trajectory.data[:, i * self.shift_steps: i * self.shift_steps + K]
            for i in range(n_delays)
        ]
        return trajectory.replace(data=np.vstack(blocks),
                                  time=trajectory.time[:K])

    def embed(self, trajectories):
        """Delay embed a :class:`TrajectorySet` (or a single
        :class:`Trajectory`), keeping indices and the train/test partition.
        """
        if isinstance(trajectories, Trajectory):
            return self.embed_trajectory(trajectories)
        if not isinstance(trajectories, TrajectorySet):
            raise TypeError("expected Trajectory or TrajectorySet")
        return trajectories.map(self.embed_trajectory)


def coordinates_embedding(
    trajectories,
    manifold_dimension: int,
    over_embedding: int = 0,
    force_embedding: bool = False,
    shift_steps: int = 1,
):
    """Delay embed trajectories for fitting a ``manifold_dimension``
    dimensional manifold. See :class:`DelayEmbedder`.
    """
    embedder = DelayEmbedder(
        manifold_dimension,
        over_embedding=over_embedding,
        force_embedding=force_embedding,
        shift_steps=shift_steps,
    )
    return embedder.embed(trajectories)
