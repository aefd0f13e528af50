# pre/test_trajectory.py
"""Tests for pre._trajectory."""

import os
import pytest
import numpy as np

import ssmfit


class TestTrajectory:
    """Test pre.Trajectory."""

    Trajectory = ssmfit.pre.Trajectory

    def test_init(self, k=20):
        """Test __init__() and properties."""
        t = np.linspace(0, 1, k)

        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            self.Trajectory(t, np.ones((2, k - 1)))
        assert ex.value.args[0] == f"data has {k - 1} samples but time has {k}"

        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            self.Trajectory(np.ones((2, k)), np.ones((2, k)))
        assert ex.value.args[0] == "time must be one-dimensional"

        with pytest.raises(ValueError) as ex:
            self.Trajectory(t[::-1], np.ones(k))
        assert ex.value.args[0] == "time must be strictly increasing"

        with pytest.raises(ValueError) as ex:
            self.Trajectory([], [])
        assert ex.value.args[0] == (
            "trajectory must contain at least one sample"
        )

        data = np.random.random((3, k))
        traj = self.Trajectory(t, data, index=4)
        assert traj.index == 4
        assert traj.dimension == 3
        assert traj.num_samples == len(traj) == k
        assert np.array_equal(traj.data, data)
        assert traj.data is not data
        assert not traj.data.flags.writeable
        assert not traj.time.flags.writeable
        assert traj.is_uniform
        assert np.isclose(traj.dt, 1 / (k - 1))

        # Scalar data.
        traj = self.Trajectory(t, np.sin(t))
        assert traj.data.shape == (1, k)

        # Nonuniform sampling.
        traj = self.Trajectory(t**2, np.sin(t))
        assert not traj.is_uniform
        assert traj.dt is None

        # Single sample.
        traj = self.Trajectory([0.0], [1.0])
        assert traj.dt is None

    def test_replace_samples(self, k=20):
        """Test replace() and samples()."""
        t = np.linspace(0, 1, k)
        traj = self.Trajectory(t, np.random.random((2, k)), 7)

        new = traj.replace(data=np.zeros((4, k)))
        assert new.index == 7
        assert new.dimension == 4
        assert np.array_equal(new.time, t)

        sub = traj.samples(slice(5, 10))
        assert sub.index == 7
        assert sub.num_samples == 5
        assert np.array_equal(sub.data, traj.data[:, 5:10])


class TestTrajectorySet:
    """Test pre.TrajectorySet."""

    Set = ssmfit.pre.TrajectorySet

    def test_init(self, scalar_trajectories):
        """Test __init__() and the train/test partition."""
        trajs = list(scalar_trajectories)

        with pytest.raises(TypeError) as ex:
            self.Set([1, 2])
        assert ex.value.args[0] == "expected Trajectory objects"

        with pytest.raises(ValueError) as ex:
            self.Set([trajs[0], trajs[0]])
        assert ex.value.args[0] == "trajectory indices must be unique"

        with pytest.raises(KeyError) as ex:
            self.Set(trajs, test_indices=[5])
        assert ex.value.args[0] == "no trajectory with index 5"

        with pytest.raises(ValueError) as ex:
            self.Set(trajs, [0, 1], [1])
        assert ex.value.args[0] == "train and test indices must be disjoint"

        tset = scalar_trajectories
        assert len(tset) == 3
        assert tset.indices == (0, 1, 2)
        assert tset.train_indices == (0, 2)
        assert tset.test_indices == (1,)
        assert tset.dimension == 1
        assert tset[2] is trajs[2]
        assert len(tset.times) == len(tset.datas) == 3

        train = tset.train()
        assert train.indices == (0, 2)
        assert train.test_indices == ()
        test = tset.test()
        assert test.indices == (1,)
        assert test.train_indices == ()

        # New partition.
        other = tset.partition([1], [0, 2])
        assert other.train_indices == (1,)
        assert other.test_indices == (0, 2)

    def test_from_arrays_stack(self, k=10):
        """Test from_arrays(), stack(), and dimension checks."""
        times = [np.linspace(0, 1, k), np.linspace(0, 2, 2 * k)]
        datas = [np.ones((2, k)), 2 * np.ones((2, 2 * k))]
        tset = self.Set.from_arrays(times, datas, test_indices=[0])
        assert tset.indices == (0, 1)
        assert tset.stack().shape == (2, 3 * k)

        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            self.Set.from_arrays(times, datas[:1])
        assert ex.value.args[0] == "2 time arrays but 1 data arrays"

        mixed = self.Set.from_arrays(times, [np.ones((2, k)),
                                             np.ones((3, 2 * k))])
        with pytest.raises(ssmfit.errors.DimensionMismatchError) as ex:
            mixed.dimension
        assert ex.value.args[0] == "trajectories have different dimensions " \
            "[2, 3]"

    def test_map(self, scalar_trajectories):
        """Test map()."""
        doubled = scalar_trajectories.map(
            lambda traj: traj.replace(data=2 * traj.data)
        )
        assert doubled.indices == scalar_trajectories.indices
        assert doubled.test_indices == (1,)
        for a, b in zip(doubled, scalar_trajectories):
            assert np.allclose(a.data, 2 * b.data)

    def test_saveload(self, scalar_trajectories, target="_trajsettest.h5"):
        """Test save() and load()."""
        if os.path.isfile(target):  # pragma: no cover
            os.remove(target)

        reordered = self.Set(
            [scalar_trajectories[i] for i in (2, 0, 1)], [2], [0, 1]
        )
        reordered.save(target)
        loaded = self.Set.load(target)
        assert loaded.indices == (2, 0, 1)
        assert loaded.train_indices == (2,)
        assert loaded.test_indices == (0, 1)
        for a, b in zip(loaded, reordered):
            assert a.index == b.index
            assert np.array_equal(a.time, b.time)
            assert np.array_equal(a.data, b.data)
        os.remove(target)
