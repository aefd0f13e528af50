# pre/_trajectory.py
"""Containers for sampled trajectories."""

__all__ = [
    "Trajectory",
    "TrajectorySet",
]

import numpy as np

from .. import errors, utils


def _readonly(arr):
    arr.flags.writeable = False
    return arr


class Trajectory:
    r"""Samples :math:`\y(t_0), \ldots, \y(t_{T-1})` of one trajectory.

    Arrays are copied on construction and stored read-only.

    Parameters
    ----------
    time : (T,) ndarray
        Strictly increasing sample times.
    data : (d, T) or (T,) ndarray
        Samples, one column per time. One-dimensional data is interpreted
        as a scalar observable (:math:`d = 1`).
    index : int
        Identifier of the trajectory within its :class:`TrajectorySet`.
    """

    def __init__(self, time, data, index: int = 0):
        time = np.array(time, dtype=float)
        data = np.array(data)
        if data.ndim == 1:
            data = data.reshape((1, -1))
        if time.ndim != 1:
            raise errors.DimensionMismatchError(
                "time must be one-dimensional"
            )
        if data.ndim != 2:
            raise errors.DimensionMismatchError(
                "data must be one- or two-dimensional"
            )
        if data.shape[1] != time.size:
            raise errors.DimensionMismatchError(
                f"data has {data.shape[1]} samples but time has {time.size}"
            )
        if time.size == 0:
            raise ValueError("trajectory must contain at least one sample")
        if np.any(np.diff(time) <= 0):
            raise ValueError("time must be strictly increasing")
        if not np.iscomplexobj(data):
            data = data.astype(float)

        self.__time = _readonly(time)
        self.__data = _readonly(data)
        self.__index = int(index)

    # Properties --------------------------------------------------------------
    @property
    def time(self) -> np.ndarray:
        """(T,) sample times."""
        return self.__time

    @property
    def data(self) -> np.ndarray:
        """(d, T) samples."""
        return self.__data

    @property
    def index(self) -> int:
        """Identifier of the trajectory."""
        return self.__index

    @property
    def dimension(self) -> int:
        """Number of rows of the data."""
        return self.__data.shape[0]

    @property
    def num_samples(self) -> int:
        """Number of time samples :math:`T`."""
        return self.__time.size

    def __len__(self) -> int:
        return self.num_samples

    @property
    def is_uniform(self) -> bool:
        """``True`` if the samples are equally spaced in time."""
        if self.num_samples < 3:
            return True
        steps = np.diff(self.__time)
        return bool(np.allclose(steps, steps[0], rtol=1e-6, atol=0))

    @property
    def dt(self) -> float:
        """Uniform time step (``None`` if non-uniform or a single sample)."""
        if self.num_samples < 2 or not self.is_uniform:
            return None
        return float((self.__time[-1] - self.__time[0])
                     / (self.num_samples - 1))

    def __str__(self) -> str:
        return (
            f"Trajectory {self.index}: {self.dimension} x "
            f"{self.num_samples} samples, "
            f"t in [{self.__time[0]:.4g}, {self.__time[-1]:.4g}]"
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Derived trajectories ----------------------------------------------------
    def replace(self, data=None, time=None):
        """New trajectory with the same index and new data and/or time."""
        return self.__class__(
            self.__time if time is None else time,
            self.__data if data is None else data,
            self.__index,
        )

    def samples(self, columns):
        """New trajectory restricted to the given sample columns."""
        return self.__class__(
            self.__time[columns], self.__data[:, columns], self.__index
        )


class TrajectorySet:
    """Ordered collection of trajectories with a train/test partition.

    Parameters
    ----------
    trajectories : iterable of Trajectory
        Trajectories with distinct indices.
    train_indices : iterable of ints or None
        Indices of the training trajectories. Default: all trajectories
        that are not listed in ``test_indices``.
    test_indices : iterable of ints or None
        Indices of the testing trajectories. Default: none.
    """

    def __init__(self, trajectories, train_indices=None, test_indices=None):
        trajectories = list(trajectories)
        for traj in trajectories:
            if not isinstance(traj, Trajectory):
                raise TypeError("expected Trajectory objects")
        ids = [traj.index for traj in trajectories]
        if len(set(ids)) != len(ids):
            raise ValueError("trajectory indices must be unique")
        self.__trajectories = {traj.index: traj for traj in trajectories}

        test = () if test_indices is None else tuple(int(i) for i in
                                                     test_indices)
        if train_indices is None:
            train = tuple(i for i in ids if i not in test)
        else:
            train = tuple(int(i) for i in train_indices)
        for i in train + test:
            if i not in self.__trajectories:
                raise KeyError(f"no trajectory with index {i}")
        if set(train) & set(test):
            raise ValueError("train and test indices must be disjoint")
        self.__train = train
        self.__test = test

    @classmethod
    def from_arrays(cls, times, datas, train_indices=None, test_indices=None):
        """Build a set from parallel lists of time and data arrays
        (trajectory ``i`` gets index ``i``).
        """
        if len(times) != len(datas):
            raise errors.DimensionMismatchError(
                f"{len(times)} time arrays but {len(datas)} data arrays"
            )
        return cls(
            [
                Trajectory(t, x, i)
                for i, (t, x) in enumerate(zip(times, datas))
            ],
            train_indices,
            test_indices,
        )

    # Properties --------------------------------------------------------------
    @property
    def indices(self) -> tuple:
        """Indices of all trajectories, in order."""
        return tuple(self.__trajectories.keys())

    @property
    def train_indices(self) -> tuple:
        return self.__train

    @property
    def test_indices(self) -> tuple:
        return self.__test

    @property
    def times(self) -> list:
        return [traj.time for traj in self]

    @property
    def datas(self) -> list:
        return [traj.data for traj in self]

    @property
    def dimension(self) -> int:
        """Common data dimension of the trajectories."""
        dims = {traj.dimension for traj in self}
        if len(dims) != 1:
            raise errors.DimensionMismatchError(
                f"trajectories have different dimensions {sorted(dims)}"
            )
        return dims.pop()

    def __len__(self) -> int:
        return len(self.__trajectories)

    def __iter__(self):
        return iter(self.__trajectories.values())

    def __getitem__(self, index) -> Trajectory:
        return self.__trajectories[index]

    def __str__(self) -> str:
        return "\n  ".join(
            [
                f"TrajectorySet with {len(self)} trajectories",
                f"train: {list(self.__train)}",
                f"test:  {list(self.__test)}",
            ]
            + [str(traj) for traj in self]
        )

    def __repr__(self) -> str:
        return utils.str2repr(self)

    # Subsets -----------------------------------------------------------------
    def subset(self, indices):
        """New set containing only the given trajectories (partition kept
        where it applies).
        """
        indices = tuple(indices)
        return self.__class__(
            [self[i] for i in indices],
            [i for i in self.__train if i in indices],
            [i for i in self.__test if i in indices],
        )

    def train(self):
        """Training trajectories only."""
        return self.subset(self.__train)

    def test(self):
        """Testing trajectories only."""
        return self.subset(self.__test)

    def partition(self, train_indices, test_indices=None):
        """Same trajectories with a new train/test partition."""
        return self.__class__(self, train_indices, test_indices)

    def map(self, func):
        """Apply ``func(Trajectory) -> Trajectory`` to every trajectory,
        keeping the indices and the partition.
        """
        out = []
        for traj in self:
            new = func(traj)
            if new.index != traj.index:
                new = Trajectory(new.time, new.data, traj.index)
            out.append(new)
        return self.__class__(out, self.__train, self.__test)

    def stack(self) -> np.ndarray:
        """(d, sum T) horizontal concatenation of all data."""
        return np.hstack(self.datas)

    # Persistence -------------------------------------------------------------
    def save(self, savefile, overwrite=False):
        """Save the trajectories and the partition to an HDF5 file."""
        with utils.hdf5_savehandle(savefile, overwrite, "TrajectorySet") as hf:
            hf.create_dataset("indices", data=np.array(self.indices,
                                                       dtype=int))
            hf.create_dataset("train_indices", data=np.array(self.__train,
                                                             dtype=int))
            hf.create_dataset("test_indices", data=np.array(self.__test,
                                                            dtype=int))
            for traj in self:
                group = hf.create_group(f"trajectory_{traj.index}")
                group.attrs["index"] = traj.index
                group.create_dataset("time", data=traj.time)
                group.create_dataset("data", data=traj.data)

    @classmethod
    def load(cls, loadfile):
        """Load a set saved with :meth:`save()`."""
        with utils.hdf5_loadhandle(loadfile, "TrajectorySet") as hf:
            trajectories = []
            for index in hf["indices"][:]:
                group = hf[f"trajectory_{index}"]
                trajectories.append(
                    Trajectory(
                        group["time"][:],
                        group["data"][:],
                        int(group.attrs["index"]),
                    )
                )
            return cls(
                trajectories,
                hf["train_indices"][:].tolist(),
                hf["test_indices"][:].tolist(),
            )
