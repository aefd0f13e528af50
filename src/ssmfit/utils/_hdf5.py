# utils/_hdf5.py
"""HDF5 persistence of fitted objects."""

__all__ = [
    "hdf5_savehandle",
    "hdf5_loadhandle",
    "save_options",
    "load_options",
]

import os
import h5py
import warnings

from .. import errors


KIND_ATTRIBUTE = "ssmfit_kind"


class _hdf5_filehandle:
    """Handle to an HDF5 file or group that one ssmfit object is stored in.

    Parameters
    ----------
    filename : str or h5py File/Group handle
        * str : Name of the file to interact with.
        * h5py File/Group handle : part of an already open HDF5 file, for
          objects stored inside other objects.
    mode : str
        * "save" : Open the file for writing only.
        * "load" : Open the file for reading only.
    overwrite : bool
        If ``True``, overwrite the file if it already exists. If ``False``,
        raise a ``FileExistsError`` if the file already exists.
        Only applies when ``mode = "save"``.
    kind : str or None
        Name of the stored object. Written to the handle when saving and
        checked when loading.
    """

    def __init__(self, filename, mode, overwrite=False, kind=None):
        if mode not in ("save", "load"):
            raise ValueError(f"invalid mode '{mode}'")
        self.mode = mode
        self.kind = kind

        if isinstance(filename, h5py.HLObject):
            self.file_handle = filename
            self.close_when_done = False
        elif mode == "save":
            if not filename.endswith(".h5"):
                warnings.warn(
                    "expected file with extension '.h5'",
                    errors.SSMWarning,
                )
            if os.path.isfile(filename) and not overwrite:
                raise FileExistsError(f"{filename} (overwrite=True to ignore)")
            self.file_handle = h5py.File(filename, "w")
            self.close_when_done = True
        else:
            if not os.path.isfile(filename):
                raise FileNotFoundError(filename)
            self.file_handle = h5py.File(filename, "r")
            self.close_when_done = True

    def __enter__(self):
        if self.kind is not None:
            if self.mode == "save":
                self.file_handle.attrs[KIND_ATTRIBUTE] = self.kind
            else:
                self._check_kind()
        return self.file_handle

    def _check_kind(self):
        found = self.file_handle.attrs.get(KIND_ATTRIBUTE, None)
        if isinstance(found, bytes):
            found = found.decode()
        if found != self.kind:
            self.close()
            raise errors.LoadfileFormatError(
                f"expected a saved {self.kind}, found "
                f"{'no ssmfit object' if found is None else found}"
            )

    def close(self):
        if self.close_when_done:
            self.file_handle.close()

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()
        if exc_type:
            raise


class hdf5_savehandle(_hdf5_filehandle):
    """Get a handle to an open HDF5 file to write to.

    Parameters
    ----------
    savefile : str or h5py File/Group handle
        File name or handle to part of an already open HDF5 file.
    overwrite : bool
        If ``True``, overwrite the file if it already exists.
        If ``False``, raise a ``FileExistsError`` if the file already exists.
    kind : str or None
        Name of the stored object, recorded for :class:`hdf5_loadhandle`.

    Examples
    --------
    >>> with hdf5_savehandle("manifold.h5", False, "Manifold") as hf:
    ...     hf.create_dataset("tangent", data=V)
    """

    def __init__(self, savefile, overwrite, kind=None):
        _hdf5_filehandle.__init__(self, savefile, "save", overwrite, kind)


class hdf5_loadhandle(_hdf5_filehandle):
    """Get a handle to an open HDF5 file to read from.

    Any exception raised while the handle is open is re-raised as a
    :class:`ssmfit.errors.LoadfileFormatError`, as is a mismatch between
    ``kind`` and the recorded name of the stored object.

    Examples
    --------
    >>> with hdf5_loadhandle("manifold.h5", "Manifold") as hf:
    ...    V = hf["tangent"][:]
    """

    def __init__(self, loadfile, kind=None):
        _hdf5_filehandle.__init__(self, loadfile, "load", kind=kind)

    def __exit__(self, exc_type, exc_value, exc_traceback):
        try:
            _hdf5_filehandle.__exit__(self, exc_type, exc_value, exc_traceback)
        except errors.LoadfileFormatError:
            raise
        except Exception as ex:
            raise errors.LoadfileFormatError(ex.args[0]) from ex


def save_options(group, options: dict, label: str = "meta"):
    """Store a flat dictionary of scalars and strings as the attributes of
    an empty dataset. ``None`` is written as ``"NULL"``.
    """
    meta = group.create_dataset(label, shape=(0,))
    for key, value in options.items():
        meta.attrs[key] = "NULL" if value is None else value


def load_options(group, label: str = "meta") -> dict:
    """Inverse of :func:`save_options()`, with numpy scalars converted to
    Python scalars.
    """
    options = dict()
    for key, value in group[label].attrs.items():
        if isinstance(value, bytes):
            value = value.decode()
        if isinstance(value, str) and value == "NULL":
            value = None
        elif hasattr(value, "item") and getattr(value, "ndim", 1) == 0:
            value = value.item()
        options[key] = value
    return options
