# utils/test_hdf5.py
"""Tests for utils._hdf5."""

import os
import h5py
import pytest
import warnings

import ssmfit


def test_hdf5_filehandle():
    """Test utils._hdf5._hdf5_filehandle()."""
    subject = ssmfit.utils._hdf5._hdf5_filehandle

    # Clean up after old tests.
    target = "_hdf5handletest.h5"
    if os.path.isfile(target):  # pragma: no cover
        os.remove(target)

    # Input file is already an open h5py handle.
    h5file = h5py.File(target, "a")
    with subject(h5file, "load", False) as hf:
        assert hf is h5file
        assert bool(hf)
    assert bool(hf)  # check the file is still open.
    hf.close()
    os.remove(target)

    # Save mode without .h5 extension.
    with pytest.warns(ssmfit.errors.SSMWarning) as wn:
        with subject(target[:-3], "save", True):
            pass
    assert len(wn) == 1
    assert wn[0].message.args[0] == "expected file with extension '.h5'"
    os.remove(target[:-3])

    # Save mode with .h5 extension.
    with subject(target, "save", True) as hf:
        assert isinstance(hf, h5py.File)
        assert hf.mode == "r+"
    assert os.path.isfile(target)
    assert not bool(hf)

    # Try to overwrite but with overwrite=False.
    with pytest.raises(FileExistsError) as ex:
        with subject(target, "save", overwrite=False):
            pass
    assert ex.value.args[0] == f"{target} (overwrite=True to ignore)"

    # Loading.
    with subject(target, "load", False) as hf:
        assert hf.mode == "r"
    assert not bool(hf)
    os.remove(target)

    # Try loading a nonexistent file.
    with pytest.raises(FileNotFoundError) as ex:
        with subject(target, "load", overwrite=False):
            pass
    assert ex.value.args[0] == target

    # Invalid mode.
    with pytest.raises(ValueError) as ex:
        with subject(target, "moose", None):
            pass
    assert ex.value.args[0] == "invalid mode 'moose'"


def test_hdf5_loadhandle():
    """Test utils._hdf5.hdf5_loadhandle()."""
    subject = ssmfit.utils.hdf5_loadhandle

    target = "_hdf5loadhandletest.h5"
    if os.path.isfile(target):  # pragma: no cover
        os.remove(target)
    with h5py.File(target, "w"):
        pass

    # Exception within block is wrapped as LoadfileFormatError.
    with pytest.raises(ssmfit.errors.LoadfileFormatError) as ex:
        with subject(target):
            raise RuntimeError("error within block")
    assert ex.value.args[0] == "error within block"

    with pytest.raises(ssmfit.errors.LoadfileFormatError) as ex:
        with subject(target):
            raise ssmfit.errors.LoadfileFormatError("error2")
    assert ex.value.args[0] == "error2"

    class DummyWarning(Warning):
        pass

    # Warning within block is passed on.
    with pytest.warns(DummyWarning) as wn:
        with subject(target):
            warnings.warn("my dummy warning", DummyWarning)
    assert wn[0].message.args[0] == "my dummy warning"
    os.remove(target)


def test_saveload_options(target="_optionstest.h5"):
    """Test utils.save_options() and utils.load_options()."""
    if os.path.isfile(target):  # pragma: no cover
        os.remove(target)

    options = dict(kind="map", dt=0.01, order=3, flag=True, missing=None)
    with h5py.File(target, "w") as hf:
        ssmfit.utils.save_options(hf, options)
        ssmfit.utils.save_options(hf, dict(a=1), label="other")

    with h5py.File(target, "r") as hf:
        loaded = ssmfit.utils.load_options(hf)
        other = ssmfit.utils.load_options(hf, label="other")

    assert loaded == options
    assert isinstance(loaded["order"], int)
    assert isinstance(loaded["kind"], str)
    assert other == dict(a=1)
    os.remove(target)


def test_kind(target="_hdf5kindtest.h5"):
    """Test the object name recorded by hdf5_savehandle() and checked by
    hdf5_loadhandle().
    """
    if os.path.isfile(target):  # pragma: no cover
        os.remove(target)

    with ssmfit.utils.hdf5_savehandle(target, False, "Manifold") as hf:
        hf.create_dataset("tangent", data=[1.0, 2.0])
        group = hf.create_group("inner")
        with ssmfit.utils.hdf5_savehandle(group, False, "PolynomialMap"):
            pass

    with h5py.File(target, "r") as hf:
        assert hf.attrs["ssmfit_kind"] == "Manifold"
        assert hf["inner"].attrs["ssmfit_kind"] == "PolynomialMap"

    with ssmfit.utils.hdf5_loadhandle(target, "Manifold") as hf:
        assert hf["tangent"].shape == (2,)
    with ssmfit.utils.hdf5_loadhandle(target) as hf:
        assert "inner" in hf

    with pytest.raises(ssmfit.errors.LoadfileFormatError) as ex:
        with ssmfit.utils.hdf5_loadhandle(target, "ReducedDynamics"):
            pass
    assert ex.value.args[0] == "expected a saved ReducedDynamics, found " \
        "Manifold"

    # The file is closed after a failed check.
    with h5py.File(target, "a") as hf:
        del hf.attrs["ssmfit_kind"]
    with pytest.raises(ssmfit.errors.LoadfileFormatError) as ex:
        with ssmfit.utils.hdf5_loadhandle(target, "Manifold"):
            pass
    assert ex.value.args[0] == "expected a saved Manifold, found no " \
        "ssmfit object"
    os.remove(target)
