# post/_reconstruction.py
"""Advance fitted reduced models along data trajectories and compare."""

__all__ = [
    "iterate_maps",
    "integrate_flows",
    "compute_rec_dyn_errors",
]

import numpy as np

from .. import errors
from ._errors import frobenius_error, lp_error, normalized_rms_error


def _advance(dynamics, reduced, manifold, options):
    def _predict(traj):
        states = dynamics.predict(traj.data[:, 0], traj.time, **options)
        # Failed integrations stop early; keep the computed part.
        return traj.replace(data=states, time=traj.time[: states.shape[1]])

    reduced_rec = reduced.map(_predict)
    if manifold is None:
        return reduced_rec, None
    full_rec = reduced_rec.map(
        lambda traj: traj.replace(data=manifold.lift(traj.data))
    )
    return reduced_rec, full_rec


def iterate_maps(dynamics, reduced, manifold=None):
    """Iterate a fitted map from the first sample of each trajectory.

    Parameters
    ----------
    dynamics : ssmfit.dynamics.ReducedDynamics
        Fitted map.
    reduced : ssmfit.pre.TrajectorySet
        Reduced-coordinate trajectories providing the initial conditions
        and the number of iterations.
    manifold : ssmfit.manifold.ManifoldParametrization or None
        If given, also lift the reconstructed trajectories.

    Returns
    -------
    reduced_rec : ssmfit.pre.TrajectorySet
        Reconstructed reduced trajectories (same indices and partition).
    full_rec : ssmfit.pre.TrajectorySet or None
        Lifted reconstructions (``None`` if no manifold is given).
    """
    if dynamics.kind != "map":
        raise ValueError(
            "iterate_maps() requires a map, use integrate_flows()"
        )
    for traj in reduced:
        if traj.num_samples > 1 and (
            traj.dt is None or not np.isclose(traj.dt, dynamics.dt, rtol=1e-6)
        ):
            raise ValueError(
                f"trajectory {traj.index} is not sampled with the map time "
                f"step {dynamics.dt:.6e}"
            )
    return _advance(dynamics, reduced, manifold, {})


def integrate_flows(dynamics, reduced, manifold=None, **options):
    """Integrate a fitted flow from the first sample of each trajectory
    over that trajectory's time samples.

    Parameters are as in :func:`iterate_maps()`; ``options`` are passed to
    :func:`scipy.integrate.solve_ivp()`.
    """
    if dynamics.kind != "flow":
        raise ValueError(
            "integrate_flows() requires a flow, use iterate_maps()"
        )
    return _advance(dynamics, reduced, manifold, options)


_METRICS = ("nrms", "relative", "max")


def _trajectory_error(true, approx, metric):
    if metric == "nrms":
        return normalized_rms_error(true, approx)
    if metric == "relative":
        return frobenius_error(true, approx)[1]
    return float(np.max(lp_error(true, approx, normalize=True)[1]))


def compute_rec_dyn_errors(
    reduced_rec,
    full_rec,
    reduced_true,
    full_true=None,
    metric: str = "nrms",
):
    """Errors of reconstructed trajectories, one per trajectory.

    Parameters
    ----------
    reduced_rec : ssmfit.pre.TrajectorySet
        Reconstructed reduced trajectories.
    full_rec : ssmfit.pre.TrajectorySet or None
        Reconstructed observable trajectories.
    reduced_true : ssmfit.pre.TrajectorySet
        Reduced trajectories of the data (matched by index).
    full_true : ssmfit.pre.TrajectorySet or None
        Observable trajectories of the data (matched by index).
    metric : str
        * ``"nrms"``: :func:`normalized_rms_error()` (default).
        * ``"relative"``: relative Frobenius error over the whole
          trajectory, see :func:`frobenius_error()`.
        * ``"max"``: largest sample error divided by the largest sample
          norm, see :func:`lp_error()`.

    Returns
    -------
    reduced_errors : (n_traj,) ndarray
        Reduced-coordinate distance of each reconstructed trajectory.
    full_errors : (n_traj,) ndarray or None
        Observable-space distance (``None`` unless both ``full_rec`` and
        ``full_true`` are given).
    """
    if metric not in _METRICS:
        raise ValueError(
            f"invalid metric '{metric}', options: {', '.join(_METRICS)}"
        )

    def _distances(rec, true):
        out = []
        for traj in rec:
            try:
                ref = true[traj.index]
            except KeyError:
                raise errors.DimensionMismatchError(
                    f"no data trajectory with index {traj.index}"
                ) from None
            k = traj.num_samples
            if k > ref.num_samples:
                raise errors.DimensionMismatchError(
                    f"reconstruction {traj.index} is longer than the data"
                )
            out.append(_trajectory_error(ref.data[:, :k], traj.data, metric))
        return np.array(out)

    reduced_errors = _distances(reduced_rec, reduced_true)
    full_errors = None
    if full_rec is not None and full_true is not None:
        full_errors = _distances(full_rec, full_true)
    return reduced_errors, full_errors
