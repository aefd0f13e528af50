# dynamics/_fit.py
"""Regression of polynomial reduced dynamics from reduced trajectories."""

__all__ = [
    "ReducedDynamicsFitter",
]

import numpy as np

from .. import ddt, errors, utils
from ..lstsq import L2Solver, PlainSolver
from ..polynomial import PolynomialMap, monomial_basis
from ..pre import TimeWeighting, TrajectorySet
from ._model import ReducedDynamics
from ._normalform import compute_normal_form


class ReducedDynamicsFitter:
    r"""Fit a polynomial map or flow to reduced-coordinate trajectories.

    * ``kind="map"``: regress the successive samples
      :math:`\boldsymbol{\eta}_{k+1}` of each trajectory onto the monomials
      :math:`\boldsymbol{\phi}_{1..M}(\boldsymbol{\eta}_k)`.
    * ``kind="flow"``: regress finite-difference estimates of
      :math:`\dot{\boldsymbol{\eta}}_k` (see :func:`ssmfit.ddt.ddt()`) onto
      :math:`\boldsymbol{\phi}_{1..M}(\boldsymbol{\eta}_k)`.

    Residuals are weighted with :class:`ssmfit.pre.TimeWeighting`. With
    ``style="modal"`` or ``style="normalform"``, the fitted polynomial is
    transformed with :func:`compute_normal_form()`.

    Parameters
    ----------
    kind : str
        ``"map"`` or ``"flow"``.
    max_degree : int
        Polynomial order :math:`M` of the dynamics.
    style : str
        ``"poly"``, ``"modal"``, or ``"normalform"``.
    c1, c2 : float
        Time weighting parameters.
    regularizer : float or None
        :math:`L_2` regularization constant. ``None`` (default) means plain
        least squares.
    resonance_tolerance : float
        Relative near-resonance threshold (normal form style).
    singularity_tolerance : float
        Relative threshold for vanishing denominators (normal form style).
    resonance_rule : str
        ``"frequency"`` or ``"exact"`` (normal form style).
    ddt_order : int {2, 4, 6}
        Finite difference order for flows.
    verbose : bool
        If ``True``, print timing messages.
    """

    def __init__(
        self,
        kind: str = "map",
        max_degree: int = 3,
        style: str = "poly",
        c1: float = 0,
        c2: float = 0,
        regularizer: float = None,
        resonance_tolerance: float = 0.1,
        singularity_tolerance: float = 1e-8,
        resonance_rule: str = "frequency",
        ddt_order: int = 2,
        verbose: bool = False,
    ):
        if kind not in ("map", "flow"):
            raise ValueError(f"invalid kind '{kind}', options: map, flow")
        if style not in ReducedDynamics._STYLES:
            raise ValueError(
                f"invalid style '{style}', options: poly, modal, normalform"
            )
        if resonance_rule not in ("frequency", "exact"):
            raise ValueError(
                f"invalid resonance_rule '{resonance_rule}', "
                "options: frequency, exact"
            )
        if max_degree < 1:
            raise ValueError("max_degree must be a positive integer")
        if resonance_tolerance < 0 or singularity_tolerance < 0:
            raise ValueError("tolerances must be nonnegative")
        self.kind = kind
        self.max_degree = int(max_degree)
        self.style = style
        self.weighting = TimeWeighting(c1, c2)
        self.regularizer = regularizer
        self.resonance_tolerance = resonance_tolerance
        self.singularity_tolerance = singularity_tolerance
        self.resonance_rule = resonance_rule
        self.ddt_order = ddt_order
        self.verbose = verbose
        self.solver_ = None

    def __str__(self) -> str:
        return "\n  ".join(
            [
                "ReducedDynamicsFitter",
                f"kind:      {self.kind}",
                f"style:     {self.style}",
                f"order:     {self.max_degree}",
                f"weighting: {self.weighting}",
            ]
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Data assembly -----------------------------------------------------------
    @staticmethod
    def _common_time_step(trajectories):
        steps = [traj.dt for traj in trajectories]
        if any(dt is None for dt in steps):
            raise ValueError(
                "map fitting requires uniformly sampled trajectories"
            )
        if not np.allclose(steps, steps[0], rtol=1e-6, atol=0):
            raise ValueError(
                "map fitting requires a common time step for all trajectories"
            )
        return steps[0]

    def stack_trajectories(self, trajectories):
        """Assemble the regression data of the training trajectories.

        Returns
        -------
        states : (m, K) ndarray
            Reduced coordinates at which the dynamics are sampled.
        targets : (m, K) ndarray
            Next iterates (maps) or time derivative estimates (flows).
        weights : (K,) ndarray
            Sample weights.
        dt : float or None
            Common time step (maps only).
        """
        if self.kind == "map":
            dt = self._common_time_step(trajectories)
            for traj in trajectories:
                if traj.num_samples < 2:
                    raise errors.InsufficientLengthError(
                        f"trajectory {traj.index} has fewer than 2 samples"
                    )
            states = np.hstack([traj.data[:, :-1] for traj in trajectories])
            targets = np.hstack([traj.data[:, 1:] for traj in trajectories])
            weights = self.weighting.trajectory_weights(trajectories, 1)
            return states, targets, weights, dt

        states = np.hstack([traj.data for traj in trajectories])
        targets = np.hstack(
            [ddt.ddt(traj, self.ddt_order) for traj in trajectories]
        )
        weights = self.weighting.trajectory_weights(trajectories)
        return states, targets, weights, None

    # Main routine ------------------------------------------------------------
    def fit(self, trajectories) -> ReducedDynamics:
        """Fit the reduced dynamics to the training trajectories.

        Parameters
        ----------
        trajectories : ssmfit.pre.TrajectorySet
            Reduced-coordinate trajectories. Only the training trajectories
            are used.

        Returns
        -------
        ReducedDynamics

        Raises
        ------
        InsufficientDataError
            If there are fewer distinct samples than monomials.
        ResonanceSingularityError
            If the normal form transformation meets a vanishing denominator.
        """
        if not isinstance(trajectories, TrajectorySet):
            raise TypeError("trajectories must be a TrajectorySet")
        training = trajectories.train()
        if len(training) == 0:
            raise errors.InsufficientDataError("no training trajectories")
        m = training.dimension

        states, targets, weights, dt = self.stack_trajectories(training)
        basis = monomial_basis(m, self.max_degree, 1)
        n_distinct = np.unique(states, axis=1).shape[1]
        if n_distinct < len(basis):
            raise errors.InsufficientDataError(
                f"{n_distinct} distinct samples, at least {len(basis)} "
                f"needed for order {self.max_degree} dynamics in "
                f"dimension {m}"
            )

        with utils.TimedBlock(
            f"Fitting order {self.max_degree} reduced {self.kind} "
            f"({self.style})",
            verbose=self.verbose,
        ) as block:
            if self.regularizer is None:
                solver = PlainSolver()
            else:
                solver = L2Solver(self.regularizer)
            solver.fit(basis.evaluate(states).T, targets, weights)
            R = PolynomialMap(solver.solve(), basis)
            self.solver_ = solver
            block.note(f"condition number {solver.cond():.2e}")

            normal_form = None
            if self.style != "poly":
                normal_form = compute_normal_form(
                    R,
                    self.kind,
                    dt,
                    style=self.style,
                    resonance_tolerance=self.resonance_tolerance,
                    singularity_tolerance=self.singularity_tolerance,
                    resonance_rule=self.resonance_rule,
                )

        return ReducedDynamics(self.kind, R, dt, self.style, normal_form)
