# roms/test_ssmrom.py
"""Tests for roms._ssmrom."""

import os
import pytest
import numpy as np

import ssmfit


class TestSSMROM:
    """Test roms.SSMROM."""

    @staticmethod
    def _rom(**kwargs):
        return ssmfit.SSMROM(
            ssmfit.manifold.ManifoldFitter(2, 3),
            ssmfit.dynamics.ReducedDynamicsFitter("map", 3,
                                                  style="normalform"),
            **kwargs,
        )

    def test_init(self):
        """Test __init__() validation."""
        with pytest.raises(TypeError) as ex:
            ssmfit.SSMROM("manifold")
        assert ex.value.args[0] == "manifold_fitter must be a ManifoldFitter"

        with pytest.raises(TypeError) as ex:
            ssmfit.SSMROM(dynamics_fitter="dynamics")
        assert ex.value.args[0] == \
            "dynamics_fitter must be a ReducedDynamicsFitter"

        with pytest.raises(TypeError) as ex:
            ssmfit.SSMROM(embedder=2)
        assert ex.value.args[0] == "embedder must be a DelayEmbedder"

        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            self._rom(embedder=ssmfit.pre.DelayEmbedder(4))
        assert ex.value.args[0] == "embedder and manifold fitter disagree " \
            "on the manifold dimension"

        with pytest.raises(ValueError) as ex:
            self._rom(cutoff=-1)
        assert ex.value.args[0] == "cutoff must be nonnegative"

        rom = ssmfit.SSMROM()
        with pytest.raises(AttributeError) as ex:
            rom.fit(None)
        assert ex.value.args[0] == "fitters required for fit()"

        with pytest.raises(AttributeError) as ex:
            rom.predict(np.zeros(4), [0, 1])
        assert ex.value.args[0] == "required attribute 'dynamics' not set"

        with pytest.raises(TypeError) as ex:
            self._rom().fit(np.ones((4, 10)))
        assert ex.value.args[0] == "trajectories must be a TrajectorySet"

    def test_fit_linear(self, linear_system, slow_mode_trajectories):
        """A linear system along its slowest mode is reproduced."""
        data = slow_mode_trajectories
        rom = self._rom(cutoff=10).fit(data)
        assert rom.manifold.dimension == 2
        assert rom.manifold.observable_dimension == 4
        assert rom.manifold.rrms < 1e-8
        assert rom.dynamics.dt == pytest.approx(0.05)
        assert np.allclose(rom.dynamics.eigenvalues,
                           linear_system.eigenvalues(2), rtol=1e-4)
        assert "ManifoldParametrization" in str(rom)

        traj = data[2]
        predicted = rom.predict(traj.data[:, 0], traj.time)
        assert predicted.shape == traj.data.shape
        assert ssmfit.post.normalized_rms_error(traj.data, predicted) < 1e-3

        reduced = rom.encode(data)
        assert reduced.dimension == 2
        assert rom.decode(reduced).dimension == 4

        _, full_rec = rom.reconstruct(data)
        assert full_rec.indices == data.indices

        errs = rom.compute_errors(data)
        assert np.array_equal(errs["indices"], [2])
        assert errs["rrms"] < 1e-8
        assert errs["reduced"].shape == errs["full"].shape == (1,)
        assert errs["full"][0] < 1e-3
        assert rom.compute_errors(data, test_only=False)["full"].size == 3

    def test_fit_embedded(self, linear_system, slow_mode_trajectories):
        """Delay embedding of a single displacement."""
        scalar = slow_mode_trajectories.map(
            lambda traj: traj.replace(data=traj.data[0])
        )
        embedder = ssmfit.pre.DelayEmbedder(2)
        rom = self._rom(embedder=embedder).fit(scalar)
        assert rom.manifold.observable_dimension == 5
        assert np.allclose(rom.dynamics.eigenvalues,
                           linear_system.eigenvalues(2), rtol=1e-4)
        errs = rom.compute_errors(scalar)
        assert errs["full"][0] < 1e-3

    def test_saveload(self, slow_mode_trajectories, target="_ssmromtest.h5"):
        """Test save() and load()."""
        if os.path.isfile(target):  # pragma: no cover
            os.remove(target)

        scalar = slow_mode_trajectories.map(
            lambda traj: traj.replace(data=traj.data[0])
        )
        rom = self._rom(embedder=ssmfit.pre.DelayEmbedder(2, 1),
                        cutoff=5).fit(scalar)
        rom.save(target)

        loaded = ssmfit.SSMROM.load(target)
        assert loaded.manifold_fitter is None
        assert loaded.cutoff == 5
        assert loaded.embedder.over_embedding == 1
        assert loaded.embedder.manifold_dimension == 2
        assert np.array_equal(loaded.manifold.tangent, rom.manifold.tangent)
        assert loaded.dynamics.R == rom.dynamics.R

        traj = rom.embed(scalar)[0]
        assert np.allclose(loaded.predict(traj.data[:, 0], traj.time[:20]),
                           rom.predict(traj.data[:, 0], traj.time[:20]))
        os.remove(target)
