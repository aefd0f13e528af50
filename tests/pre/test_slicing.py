# pre/test_slicing.py
"""Tests for pre._slicing and pre._weighting."""

import pytest
import numpy as np

import ssmfit


def test_slice_trajectories(scalar_trajectories):
    """Test pre.slice_trajectories()."""
    sliced = ssmfit.pre.slice_trajectories(scalar_trajectories, (2, 5))
    assert sliced.indices == scalar_trajectories.indices
    assert sliced.test_indices == (1,)
    for traj in sliced:
        assert traj.time[0] >= 2 and traj.time[-1] <= 5
        assert traj.num_samples == 31

    sliced = ssmfit.pre.slice_trajectories(scalar_trajectories, (None, 1))
    assert sliced[0].num_samples == 11

    with pytest.raises(ValueError) as ex:
        ssmfit.pre.slice_trajectories(scalar_trajectories, (5, 2))
    assert ex.value.args[0] == \
        "interval must satisfy interval[0] <= interval[1]"

    with pytest.raises(ValueError) as ex:
        ssmfit.pre.slice_trajectories(scalar_trajectories, (20, 30))
    assert ex.value.args[0] == "no samples of trajectory 0 in [20, 30]"


def test_truncate_trajectories(scalar_trajectories):
    """Test pre.truncate_trajectories()."""
    truncated = ssmfit.pre.truncate_trajectories(scalar_trajectories, 10)
    for old, new in zip(scalar_trajectories, truncated):
        assert new.index == old.index
        assert np.array_equal(new.data, old.data[:, 10:])
    assert truncated.train_indices == (0, 2)

    with pytest.raises(ValueError) as ex:
        ssmfit.pre.truncate_trajectories(scalar_trajectories, -1)
    assert ex.value.args[0] == "cutoff must be nonnegative"

    with pytest.raises(ValueError) as ex:
        ssmfit.pre.truncate_trajectories(scalar_trajectories, 101)
    assert ex.value.args[0] == \
        "cutoff 101 removes every sample of trajectory 0"


class TestTimeWeighting:
    """Test pre.TimeWeighting."""

    Weighting = ssmfit.pre.TimeWeighting

    def test_init(self):
        with pytest.raises(ValueError) as ex:
            self.Weighting(-1)
        assert ex.value.args[0] == "c1 must be a nonnegative scalar"

        with pytest.raises(ValueError) as ex:
            self.Weighting(1, [1, 2])
        assert ex.value.args[0] == "c2 must be a nonnegative scalar"

        weighting = self.Weighting()
        assert weighting.is_uniform
        assert str(weighting) == "TimeWeighting(c1=0, c2=0)"

    def test_call(self):
        t = np.linspace(0, 50, 11)
        assert np.all(self.Weighting()(t) == 1)

        w = self.Weighting(1e6, 0.4)(t)
        assert np.isclose(w[0], 1 / (1 + 1e6))
        assert np.all(np.diff(w) > 0)
        assert np.isclose(w[-1], 1, atol=1e-2)

    def test_trajectory_weights(self, scalar_trajectories):
        weighting = self.Weighting(10, 1)
        w = weighting.trajectory_weights(scalar_trajectories)
        assert w.shape == (303,)
        assert np.isclose(w[0], 1 / 11)
        assert np.isclose(w[101], 1 / 11)

        w = weighting.trajectory_weights(scalar_trajectories, drop_last=1)
        assert w.shape == (300,)
