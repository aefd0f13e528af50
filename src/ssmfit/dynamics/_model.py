# dynamics/_model.py
"""Fitted reduced dynamics on the manifold."""

__all__ = [
    "ReducedDynamics",
]

import warnings
import numpy as np
import scipy.integrate as spintegrate

from .. import errors, utils
from ..polynomial import PolynomialMap
from ._normalform import NormalForm, continuous_eigenvalues, \
    modal_decomposition


class ReducedDynamics:
    r"""Polynomial reduced-order model in the reduced coordinates
    :math:`\boldsymbol{\eta}` of a manifold.

    * ``kind="map"``: :math:`\boldsymbol{\eta}_{k+1} =
      \mathbf{R}(\boldsymbol{\eta}_k)` with time step :math:`\delta t`.
    * ``kind="flow"``: :math:`\dot{\boldsymbol{\eta}} =
      \mathbf{R}(\boldsymbol{\eta})`.

    For ``style="modal"`` and ``style="normalform"`` the model also carries a
    :class:`NormalForm`, and predictions advance the normal form
    coordinates :math:`\z` and map them back through
    :math:`\boldsymbol{\eta} = \operatorname{Re}\mathbf{T}(\z)`.

    Parameters
    ----------
    kind : str
        ``"map"`` or ``"flow"``.
    R : PolynomialMap
        Fitted real polynomial (next iterate or velocity).
    dt : float or None
        Time step of the map (required for maps, ignored for flows).
    style : str
        ``"poly"``, ``"modal"``, or ``"normalform"``.
    normal_form : NormalForm or None
        Required unless ``style="poly"``.
    """

    _STYLES = ("poly", "modal", "normalform")

    def __init__(self, kind, R, dt=None, style="poly", normal_form=None):
        if kind not in ("map", "flow"):
            raise ValueError(f"invalid kind '{kind}', options: map, flow")
        if style not in self._STYLES:
            raise ValueError(
                f"invalid style '{style}', options: {', '.join(self._STYLES)}"
            )
        if kind == "map" and (dt is None or dt <= 0):
            raise ValueError("maps require a positive time step dt")
        if not isinstance(R, PolynomialMap):
            raise TypeError("R must be a PolynomialMap")
        if R.output_dimension != R.dimension:
            raise errors.DimensionMismatchError(
                "reduced dynamics must map the reduced space to itself"
            )
        if style != "poly" and normal_form is None:
            raise ValueError(f"style '{style}' requires a normal form")
        if normal_form is not None and normal_form.dimension != R.dimension:
            raise errors.DimensionMismatchError(
                "normal form and dynamics have different dimensions"
            )

        self.__kind = kind
        self.__R = R
        self.__dt = None if kind == "flow" else float(dt)
        self.__style = style
        self.__normal_form = normal_form
        self.predict_result_ = None

    # Properties --------------------------------------------------------------
    @property
    def kind(self) -> str:
        return self.__kind

    @property
    def style(self) -> str:
        return self.__style

    @property
    def dt(self) -> float:
        """Time step of a map (``None`` for flows)."""
        return self.__dt

    @property
    def R(self) -> PolynomialMap:
        """Fitted polynomial in the reduced coordinates."""
        return self.__R

    @property
    def normal_form(self) -> NormalForm:
        return self.__normal_form

    @property
    def dimension(self) -> int:
        return self.__R.dimension

    @property
    def max_degree(self) -> int:
        return self.__R.max_degree

    @property
    def linear_part(self) -> np.ndarray:
        return self.__R.linear_part

    @property
    def eigenvalues(self) -> np.ndarray:
        """Continuous-time eigenvalues of the linear part."""
        if self.__normal_form is not None:
            return self.__normal_form.continuous_eigenvalues
        lam, _ = modal_decomposition(self.linear_part, self.kind, self.dt)
        return continuous_eigenvalues(lam, self.kind, self.dt)

    def __str__(self) -> str:
        out = [
            f"ReducedDynamics ({self.kind}, {self.style})",
            f"  dimension: {self.dimension}",
            f"  order:     {self.max_degree}",
        ]
        if self.kind == "map":
            out.append(f"  dt:        {self.dt:.4e}")
        return "\n".join(out)

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Evaluation --------------------------------------------------------------
    def __call__(self, state):
        """Next iterate (maps) or velocity (flows) at ``state``."""
        return self.__R(state)

    def rhs(self, t, state):
        """Right-hand side ``R(state)`` in :func:`scipy.integrate.solve_ivp()`
        form (flows only).
        """
        return self.__R(state)

    def jacobian(self, t, state):
        """Jacobian of :meth:`rhs()` with respect to the state."""
        return self.__R.jacobian(state)

    # Prediction --------------------------------------------------------------
    def _check_state0(self, state0):
        state0 = np.asarray(state0)
        if state0.shape != (self.dimension,):
            raise errors.DimensionMismatchError(
                "initial condition not aligned with model "
                f"(state0.shape = {state0.shape} != "
                f"({self.dimension},))"
            )
        return state0

    def predict(self, state0, t, **options):
        """Advance the model from ``state0`` over the times ``t``.

        Parameters
        ----------
        state0 : (m,) ndarray
            Initial reduced coordinates.
        t : (nt,) ndarray
            Output times. Maps are iterated ``nt - 1`` times (the times
            themselves are not used beyond their count); flows are integrated
            with :func:`scipy.integrate.solve_ivp()` and evaluated at ``t``.
        options
            Arguments for :func:`scipy.integrate.solve_ivp()` (flows only).

        Returns
        -------
        states : (m, nt) ndarray
            Reduced coordinates, including ``state0``. A more detailed report
            on flow integration is stored as ``predict_result_``.
        """
        state0 = self._check_state0(state0)
        t = np.asarray(t, dtype=float)
        if t.ndim != 1 or t.size < 1:
            raise ValueError("t must be a nonempty one-dimensional array")

        nf = self.__normal_form
        if nf is not None:
            z0 = nf.to_normal(state0)
            if self.kind == "map":
                return nf.to_reduced(self._iterate(nf.N, z0, t.size))
            return nf.to_reduced(
                self._integrate(lambda _, z: nf.N(z), z0, t, None, options)
            )

        state0 = state0.astype(float)
        if self.kind == "map":
            return self._iterate(self.__R, state0, t.size)
        jac = None
        if options.get("method") in ("BDF", "Radau", "LSODA"):
            jac = self.jacobian
        return self._integrate(self.rhs, state0, t, jac, options)

    @staticmethod
    def _iterate(func, state0, niters):
        states = np.empty((state0.size, niters), dtype=state0.dtype)
        states[:, 0] = state0
        for j in range(niters - 1):
            states[:, j + 1] = func(states[:, j])
        return states

    def _integrate(self, func, state0, t, jac, options):
        if jac is not None:
            options = dict(options, jac=jac)
        if t.size == 1:
            return state0.reshape((-1, 1))
        out = spintegrate.solve_ivp(
            func,
            [t[0], t[-1]],
            state0,
            t_eval=t,
            **options,
        )
        if not out.success:
            warnings.warn(out.message, spintegrate.IntegrationWarning)
        self.predict_result_ = out
        return out.y

    # Persistence -------------------------------------------------------------
    def save(self, savefile, overwrite=False):
        """Save the model to an HDF5 file."""
        with utils.hdf5_savehandle(
            savefile, overwrite, "ReducedDynamics"
        ) as hf:
            utils.save_options(
                hf, dict(kind=self.kind, style=self.style, dt=self.dt)
            )
            self.__R.save(hf.create_group("R"))
            if self.__normal_form is not None:
                self.__normal_form.save(hf.create_group("normal_form"))

    @classmethod
    def load(cls, loadfile):
        """Load a model saved with :meth:`save()`."""
        with utils.hdf5_loadhandle(loadfile, "ReducedDynamics") as hf:
            meta = utils.load_options(hf)
            normal_form = None
            if "normal_form" in hf:
                normal_form = NormalForm.load(hf["normal_form"])
            return cls(
                meta["kind"],
                PolynomialMap.load(hf["R"]),
                dt=meta["dt"],
                style=meta["style"],
                normal_form=normal_form,
            )
