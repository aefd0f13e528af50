# roms/_ssmrom.py
"""Reduced-order model on a data-driven spectral submanifold."""

__all__ = [
    "SSMROM",
]

import numpy as np

from .. import errors, post, utils
from ..dynamics import ReducedDynamics, ReducedDynamicsFitter
from ..manifold import (
    ManifoldFitter,
    ManifoldParametrization,
    lift_trajectories,
    project_trajectories,
    rrms_error,
)
from ..pre import DelayEmbedder, TrajectorySet, truncate_trajectories


class SSMROM:
    """Reduced-order model on a spectral submanifold.

    This class connects the classes of the various submodules to form a
    complete workflow.

    Observable data
    -> embedded data
    -> reduced coordinates on the fitted manifold
    -> polynomial reduced dynamics.

    Parameters
    ----------
    manifold_fitter : ssmfit.manifold.ManifoldFitter
        Fits the manifold parametrization.
    dynamics_fitter : ssmfit.dynamics.ReducedDynamicsFitter
        Fits the reduced dynamics.
    embedder : ssmfit.pre.DelayEmbedder or None
        Delay embedding of the observables. If ``None``, observables are
        used as they are.
    cutoff : int
        Number of initial samples of each reduced trajectory that are
        discarded before fitting the reduced dynamics.
    """

    def __init__(
        self,
        manifold_fitter=None,
        dynamics_fitter=None,
        *,
        embedder=None,
        cutoff: int = 0,
    ):
        if not (manifold_fitter is None
                or isinstance(manifold_fitter, ManifoldFitter)):
            raise TypeError("manifold_fitter must be a ManifoldFitter")
        if not (dynamics_fitter is None
                or isinstance(dynamics_fitter, ReducedDynamicsFitter)):
            raise TypeError("dynamics_fitter must be a ReducedDynamicsFitter")
        if not (embedder is None or isinstance(embedder, DelayEmbedder)):
            raise TypeError("embedder must be a DelayEmbedder")
        if (
            manifold_fitter is not None
            and embedder is not None
            and embedder.manifold_dimension != manifold_fitter.dimension
        ):
            raise errors.DimensionMismatchError(
                "embedder and manifold fitter disagree on the manifold "
                "dimension"
            )
        if cutoff < 0:
            raise ValueError("cutoff must be nonnegative")
        self.manifold_fitter = manifold_fitter
        self.dynamics_fitter = dynamics_fitter
        self.embedder = embedder
        self.cutoff = int(cutoff)
        self.manifold = None
        self.dynamics = None

    # Printing ----------------------------------------------------------------
    def __str__(self):
        lines = []
        for label, obj in [
            ("embedder", self.embedder),
            ("manifold", self.manifold),
            ("dynamics", self.dynamics),
        ]:
            if obj is not None:
                lines.append(f"{label}: {str(obj)}")
        body = "\n  ".join("\n".join(lines).split("\n"))
        return f"{self.__class__.__name__}\n  {body}"

    def __repr__(self):
        return utils.str2repr(self)

    # Mappings between observable and reduced coordinates ---------------------
    def embed(self, trajectories) -> TrajectorySet:
        """Delay embed observable trajectories (if there is an embedder)."""
        if self.embedder is None:
            return trajectories
        return self.embedder.embed(trajectories)

    @utils.requires("manifold")
    def encode(self, trajectories) -> TrajectorySet:
        """Reduced-coordinate trajectories of observable trajectories."""
        return project_trajectories(self.embed(trajectories), self.manifold)

    @utils.requires("manifold")
    def decode(self, reduced) -> TrajectorySet:
        """Embedded observable trajectories of reduced trajectories."""
        return lift_trajectories(reduced, self.manifold)

    # Training ----------------------------------------------------------------
    def fit(self, trajectories):
        """Fit the manifold and then the reduced dynamics to the training
        trajectories of ``trajectories``.

        Parameters
        ----------
        trajectories : ssmfit.pre.TrajectorySet
            Observable trajectories (before embedding).

        Returns
        -------
        self
        """
        if self.manifold_fitter is None or self.dynamics_fitter is None:
            raise AttributeError("fitters required for fit()")
        if not isinstance(trajectories, TrajectorySet):
            raise TypeError("trajectories must be a TrajectorySet")
        embedded = self.embed(trajectories)
        manifold = self.manifold_fitter.fit(embedded)
        reduced = project_trajectories(embedded, manifold)
        if self.cutoff:
            reduced = truncate_trajectories(reduced, self.cutoff)
        dynamics = self.dynamics_fitter.fit(reduced)
        self.manifold, self.dynamics = manifold, dynamics
        return self

    # Evaluation --------------------------------------------------------------
    @utils.requires("dynamics")
    def predict(self, state0, t, **options):
        """Advance the model from an embedded observable ``state0``.

        Parameters
        ----------
        state0 : (D,) ndarray
            Initial embedded observable, projected onto the manifold.
        t : (nt,) ndarray
            Output times (see
            :meth:`ssmfit.dynamics.ReducedDynamics.predict()`).
        options
            Arguments for :func:`scipy.integrate.solve_ivp()` (flows only).

        Returns
        -------
        (D, nt) ndarray
            Embedded observables along the predicted trajectory.
        """
        reduced = self.dynamics.predict(
            self.manifold.project(state0), t, **options
        )
        return self.manifold.lift(reduced)

    @utils.requires("dynamics")
    def reconstruct(self, trajectories, **options):
        """Reconstruct each trajectory from its first sample.

        Returns
        -------
        reduced_rec : ssmfit.pre.TrajectorySet
            Reconstructed reduced trajectories.
        full_rec : ssmfit.pre.TrajectorySet
            Reconstructed embedded observable trajectories.
        """
        reduced = self.encode(trajectories)
        if self.dynamics.kind == "map":
            return post.iterate_maps(self.dynamics, reduced, self.manifold)
        return post.integrate_flows(
            self.dynamics, reduced, self.manifold, **options
        )

    @utils.requires("dynamics")
    def compute_errors(self, trajectories, test_only: bool = True,
                       metric: str = "nrms", **options):
        """Errors of the model on a set of trajectories.

        Parameters
        ----------
        trajectories : ssmfit.pre.TrajectorySet
            Observable trajectories.
        test_only : bool
            If ``True`` and the set has testing trajectories, only use those.
        metric : str
            Per-trajectory error measure, see
            :func:`ssmfit.post.compute_rec_dyn_errors()`.

        Returns
        -------
        dict
            ``"rrms"``: manifold reconstruction error (float);
            ``"reduced"``: per-trajectory reduced reconstruction error;
            ``"full"``: per-trajectory observable reconstruction error;
            ``"indices"``: the trajectory indices of the errors.
        """
        if test_only and trajectories.test_indices:
            trajectories = trajectories.test()
        embedded = self.embed(trajectories)
        reduced = project_trajectories(embedded, self.manifold)
        if self.dynamics.kind == "map":
            rec = post.iterate_maps(self.dynamics, reduced, self.manifold)
        else:
            rec = post.integrate_flows(
                self.dynamics, reduced, self.manifold, **options
            )
        reduced_err, full_err = post.compute_rec_dyn_errors(
            rec[0], rec[1], reduced, embedded, metric
        )
        return {
            "rrms": rrms_error(embedded, self.manifold),
            "reduced": reduced_err,
            "full": full_err,
            "indices": np.array(rec[0].indices),
        }

    # Persistence -------------------------------------------------------------
    @utils.requires("dynamics")
    def save(self, savefile, overwrite=False):
        """Save the fitted manifold, dynamics, and embedding settings to an
        HDF5 file. Fitters are not saved.
        """
        with utils.hdf5_savehandle(savefile, overwrite, "SSMROM") as hf:
            meta = dict(cutoff=self.cutoff)
            if self.embedder is not None:
                meta.update(
                    manifold_dimension=self.embedder.manifold_dimension,
                    over_embedding=self.embedder.over_embedding,
                    force_embedding=self.embedder.force_embedding,
                    shift_steps=self.embedder.shift_steps,
                )
            utils.save_options(hf, meta)
            self.manifold.save(hf.create_group("manifold"))
            self.dynamics.save(hf.create_group("dynamics"))

    @classmethod
    def load(cls, loadfile):
        """Load a model saved with :meth:`save()`. The result can predict
        and reconstruct but has no fitters.
        """
        with utils.hdf5_loadhandle(loadfile, "SSMROM") as hf:
            meta = utils.load_options(hf)
            embedder = None
            if "manifold_dimension" in meta:
                embedder = DelayEmbedder(
                    meta["manifold_dimension"],
                    meta["over_embedding"],
                    bool(meta["force_embedding"]),
                    meta["shift_steps"],
                )
            rom = cls(embedder=embedder, cutoff=meta["cutoff"])
            rom.manifold = ManifoldParametrization.load(hf["manifold"])
            rom.dynamics = ReducedDynamics.load(hf["dynamics"])
        return rom
